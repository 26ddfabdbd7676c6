from __future__ import annotations

from custody_vm.config import load_config
from custody_vm.runtime import Host


def test_defaults(monkeypatch):
    for k in ("CUSTODY_ADDRESS_LEN", "CUSTODY_LOG_FORMAT", "CUSTODY_LOG_LEVEL"):
        monkeypatch.delenv(k, raising=False)
    cfg = load_config()
    assert cfg.address_len == 20
    assert cfg.log_level == "WARNING"
    assert cfg.log_format is None
    assert load_config() is cfg


def test_env_parsing_and_clamping(monkeypatch):
    monkeypatch.setenv("CUSTODY_ADDRESS_LEN", "32")
    monkeypatch.setenv("CUSTODY_CHAIN_ID", "0x10")
    monkeypatch.setenv("CUSTODY_MAX_STORAGE_KEY_BYTES", "4")
    monkeypatch.setenv("CUSTODY_MAX_EVENTS_PER_CALL", "not-a-number")
    monkeypatch.setenv("CUSTODY_LOG_LEVEL", "debug")
    cfg = load_config()
    assert cfg.address_len == 32
    assert cfg.chain_id == 16
    assert cfg.max_storage_key_bytes == 16
    assert cfg.max_events_per_call == 1024
    assert cfg.log_level == "DEBUG"


def test_host_uses_config(monkeypatch):
    monkeypatch.setenv("CUSTODY_ADDRESS_LEN", "8")
    monkeypatch.setenv("CUSTODY_GENESIS_TIMESTAMP", "1000")
    host = Host()
    assert len(host.address("alice")) == 8
    assert host.block.timestamp == 1000


def test_overrides(config):
    narrow = config.with_overrides(address_len=4)
    assert narrow.address_len == 4
    assert config.address_len == 20
    assert narrow.as_dict()["address_len"] == 4
