"""
custody_vm.config — runtime limits, address width and logging defaults.

This module centralizes configuration for the custody ledger host. It has
NO third-party deps and is safe to import very early.

Configuration precedence:
  1) Environment variables (CUSTODY_*)
  2) Hardcoded safe defaults below

Key env vars:
  - CUSTODY_ADDRESS_LEN              (int)    default: 20
  - CUSTODY_CHAIN_ID                 (int)    default: 1337
  - CUSTODY_GENESIS_TIMESTAMP        (int)    default: 0
  - CUSTODY_MAX_STORAGE_KEY_BYTES    (int)    default: 160
  - CUSTODY_MAX_STORAGE_VALUE_BYTES  (int)    default: 131_072   (128 KiB)
  - CUSTODY_MAX_EVENTS_PER_CALL      (int)    default: 1024
  - CUSTODY_LOG_LEVEL                (str)    default: WARNING
  - CUSTODY_LOG_FORMAT               (json|text) default: auto

Usage:
    from custody_vm.config import load_config
    CFG = load_config()
    narrow = CFG.with_overrides(address_len=32)
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from functools import lru_cache
from typing import Any, Dict, Optional
import os


# ----------------------------- helpers ---------------------------------------


def _env_int(name: str, default: int, *, min_v: int, max_v: int) -> int:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        v = int(raw, 0)
    except ValueError:
        return default
    if v < min_v:
        return min_v
    if v > max_v:
        return max_v
    return v


def _env_str(name: str, default: Optional[str]) -> Optional[str]:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip()


# ------------------------------- config --------------------------------------


@dataclass(frozen=True)
class LedgerConfig:
    # Identity & environment
    address_len: int
    chain_id: int
    genesis_timestamp: int

    # Numeric caps / limits (enforced by storage and event sink)
    max_storage_key_bytes: int
    max_storage_value_bytes: int
    max_events_per_call: int

    # Logging
    log_level: str
    log_format: Optional[str]

    def with_overrides(self, **changes: Any) -> "LedgerConfig":
        """Return a copy with the given fields replaced (tests, CLI flags)."""
        return replace(self, **changes)

    def as_dict(self) -> Dict[str, Any]:
        return {
            "address_len": self.address_len,
            "chain_id": self.chain_id,
            "genesis_timestamp": self.genesis_timestamp,
            "max_storage_key_bytes": self.max_storage_key_bytes,
            "max_storage_value_bytes": self.max_storage_value_bytes,
            "max_events_per_call": self.max_events_per_call,
            "log_level": self.log_level,
            "log_format": self.log_format,
        }


@lru_cache(maxsize=1)
def load_config() -> LedgerConfig:
    """
    Build and cache a LedgerConfig from environment + safe defaults.
    """
    return LedgerConfig(
        address_len=_env_int("CUSTODY_ADDRESS_LEN", 20, min_v=1, max_v=64),
        chain_id=_env_int("CUSTODY_CHAIN_ID", 1337, min_v=0, max_v=2**63 - 1),
        genesis_timestamp=_env_int("CUSTODY_GENESIS_TIMESTAMP", 0, min_v=0, max_v=2**63 - 1),
        max_storage_key_bytes=_env_int("CUSTODY_MAX_STORAGE_KEY_BYTES", 160, min_v=16, max_v=1024),
        max_storage_value_bytes=_env_int("CUSTODY_MAX_STORAGE_VALUE_BYTES", 131_072, min_v=32, max_v=1_048_576),
        max_events_per_call=_env_int("CUSTODY_MAX_EVENTS_PER_CALL", 1024, min_v=1, max_v=100_000),
        log_level=(_env_str("CUSTODY_LOG_LEVEL", "WARNING") or "WARNING").upper(),
        log_format=_env_str("CUSTODY_LOG_FORMAT", None),
    )


__all__ = ["LedgerConfig", "load_config"]
