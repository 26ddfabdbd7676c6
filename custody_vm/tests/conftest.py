# -*- coding: utf-8 -*-
"""
custody_vm.tests.conftest
=========================

Fixtures for exercising the runtime without any contracts:

- ``config``  : a default LedgerConfig (env-independent)
- ``host``    : a fresh Host at genesis
- ``counter`` : a tiny contract deployed on ``host`` (see `Counter`)
"""
from __future__ import annotations

import pytest

from custody_vm.config import LedgerConfig
from custody_vm.errors import InsufficientBalance
from custody_vm.runtime import Contract, Host, external

DEFAULTS = dict(
    address_len=20,
    chain_id=1337,
    genesis_timestamp=1_700_000_000,
    max_storage_key_bytes=160,
    max_storage_value_bytes=131_072,
    max_events_per_call=1024,
    log_level="WARNING",
    log_format=None,
)


class Counter(Contract):
    """Minimal contract: one counter slot, one event per change."""

    K = b"count"

    def __init__(self, host: Host, address: bytes, *, start: int = 0) -> None:
        super().__init__(host, address)
        if start:
            self.storage.set_int(self.K, start)

    def value(self) -> int:
        return self.storage.get_int(self.K)

    @external
    def add(self, n: int) -> int:
        v = self.value() + n
        self.storage.set_int(self.K, v)
        self._emit(b"Added", {"n": n, "value": v})
        return v

    @external
    def add_then_fail(self, n: int) -> None:
        self.add(n)
        raise InsufficientBalance(data={"n": n})

    @external
    def call_other(self, other: "Counter", n: int) -> int:
        self.add(1)
        return other.add(n)


@pytest.fixture
def config() -> LedgerConfig:
    return LedgerConfig(**DEFAULTS)


@pytest.fixture
def host(config: LedgerConfig) -> Host:
    return Host(config)


@pytest.fixture
def counter(host: Host) -> Counter:
    return host.deploy(Counter)
