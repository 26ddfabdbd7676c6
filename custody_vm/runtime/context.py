"""
custody_vm.runtime.context — block environment and principal helpers.

The block environment is the only source of "time" a ledger sees. It contains
only pure data (ints/bytes) and performs strict validation.

Design notes
------------
- Principals are raw bytes of a fixed width (`LedgerConfig.address_len`).
- Hex strings (with or without "0x") are accepted by helpers and normalized to
  bytes.
- `timestamp` must fit in 248 bits: it shares a 32-byte word with a one-byte
  flag in the packed token layout.
"""

from __future__ import annotations

import hashlib
from dataclasses import asdict, dataclass
from typing import Any, Dict, Union

from custody_vm.errors import VmError

TIMESTAMP_BITS = 248
TIMESTAMP_MAX = (1 << TIMESTAMP_BITS) - 1


# ----------------------------- helpers ----------------------------- #


class ContextError(VmError):
    """Validation or coercion failure for BlockEnv or principal values."""

    def __init__(self, message: str) -> None:
        super().__init__(message, code="context_invalid")


def _strip_0x(s: str) -> str:
    return s[2:] if s.startswith(("0x", "0X")) else s


def to_bytes(value: Union[bytes, bytearray, memoryview, str]) -> bytes:
    """
    Coerce `value` to bytes.
    - If str, interpret as hex (with or without '0x'); odd-length hex is rejected.
    - If a bytes-like object, copy to immutable bytes.
    """
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value)
    if isinstance(value, str):
        h = _strip_0x(value.strip())
        if len(h) % 2 != 0:
            raise ContextError(f"hex string must have even length, got {len(h)}")
        try:
            return bytes.fromhex(h)
        except ValueError as e:
            raise ContextError(f"invalid hex string: {value!r}") from e
    raise ContextError(f"cannot convert type {type(value).__name__} to bytes")


def to_hex(b: Union[bytes, bytearray, memoryview]) -> str:
    """Encode bytes as 0x-prefixed lowercase hex."""
    return "0x" + bytes(b).hex()


def zero_address(address_len: int) -> bytes:
    return b"\x00" * int(address_len)


def is_zero_address(addr: bytes) -> bool:
    return isinstance(addr, (bytes, bytearray)) and len(addr) > 0 and not any(addr)


def derive_address(label: Union[str, bytes], address_len: int) -> bytes:
    """
    Deterministic principal from a label (test accounts, CLI names, deploys).
    """
    raw = label.encode("utf-8") if isinstance(label, str) else bytes(label)
    return hashlib.sha3_256(b"custody-addr|" + raw).digest()[: int(address_len)]


def _require_non_negative_int(name: str, v: Any) -> int:
    if not isinstance(v, int) or isinstance(v, bool):
        raise ContextError(f"{name} must be int, got {type(v).__name__}")
    if v < 0:
        raise ContextError(f"{name} must be non-negative, got {v}")
    return v


# ----------------------------- models ------------------------------ #


@dataclass(frozen=True)
class BlockEnv:
    """
    Deterministic per-block environment.

    Fields
    ------
    height:     Block height (0-based).
    timestamp:  Block timestamp (seconds; must fit in 248 bits).
    chain_id:   Integer chain identifier.
    """

    height: int
    timestamp: int
    chain_id: int

    def __post_init__(self) -> None:
        _require_non_negative_int("height", self.height)
        _require_non_negative_int("chain_id", self.chain_id)
        ts = _require_non_negative_int("timestamp", self.timestamp)
        if ts > TIMESTAMP_MAX:
            raise ContextError(f"timestamp must fit in {TIMESTAMP_BITS} bits")

    def advanced(self, seconds: int, blocks: int = 1) -> "BlockEnv":
        _require_non_negative_int("seconds", seconds)
        _require_non_negative_int("blocks", blocks)
        return BlockEnv(
            height=self.height + blocks,
            timestamp=self.timestamp + seconds,
            chain_id=self.chain_id,
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


__all__ = [
    "TIMESTAMP_BITS",
    "TIMESTAMP_MAX",
    "ContextError",
    "to_bytes",
    "to_hex",
    "zero_address",
    "is_zero_address",
    "derive_address",
    "BlockEnv",
]
