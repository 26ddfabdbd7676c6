"""
custody_vm.runtime.storage_api — contract-facing key/value storage.

Each deployed contract receives a `Storage` view bound to its own address over
the host's shared `Journal`. The view is what contracts call; they never touch
the journal directly.

Design goals
------------
- Deterministic: pure functions over (key, value) with no wall-clock or I/O.
- Safe: strict byte-length caps; typed helpers for u256 ↔ bytes.
- Observable: every read and write is counted in an `AccessStats` tracker so
  that storage layouts can be compared by how many slots they touch.

Public API
----------
- get(key) -> Optional[bytes]
- set(key, value) -> None        # empty value deletes the key
- delete(key) -> None
- exists(key) -> bool
- get_int(key) -> int            # absent -> 0, 32-byte big-endian unsigned
- set_int(key, value) -> None    # 0 deletes the key

Notes
-----
Zero is stored as absence. A principal whose balance returns to zero is
indistinguishable from one that never held a balance.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Optional, Set

from custody_vm.errors import VmError

from .journal import Journal

U256_MAX = (1 << 256) - 1
WORD_BYTES = 32


# ------------------------------ Access tracking ----------------------------- #


@dataclass
class AccessCounts:
    reads: int = 0
    writes: int = 0
    touched: Set[bytes] = field(default_factory=set)

    @property
    def total(self) -> int:
        return self.reads + self.writes


class AccessStats:
    """
    Per-address storage access counters.

    Reads and writes are counted whether or not the surrounding call later
    reverts: the accesses happened even if their effects were discarded.
    """

    def __init__(self) -> None:
        self._by_addr: Dict[bytes, AccessCounts] = {}

    def _counts(self, addr: bytes) -> AccessCounts:
        c = self._by_addr.get(addr)
        if c is None:
            c = AccessCounts()
            self._by_addr[addr] = c
        return c

    def record_read(self, addr: bytes, key: bytes) -> None:
        c = self._counts(addr)
        c.reads += 1
        c.touched.add(key)

    def record_write(self, addr: bytes, key: bytes) -> None:
        c = self._counts(addr)
        c.writes += 1
        c.touched.add(key)

    def for_address(self, addr: bytes) -> AccessCounts:
        c = self._by_addr.get(bytes(addr))
        if c is None:
            return AccessCounts()
        return AccessCounts(reads=c.reads, writes=c.writes, touched=set(c.touched))

    def reset(self, addr: Optional[bytes] = None) -> None:
        if addr is None:
            self._by_addr.clear()
        else:
            self._by_addr.pop(bytes(addr), None)


# ------------------------------ Storage view ------------------------------- #


class Storage:
    """
    Storage bound to one contract address.

    Parameters
    ----------
    journal : Journal
        Shared host journal; all writes are staged in its open checkpoint.
    address : bytes
        Owning contract address.
    stats : AccessStats | None
        Optional access counter.
    max_key_bytes, max_value_bytes : int
        Length caps (from `custody_vm.config`).
    """

    def __init__(
        self,
        journal: Journal,
        address: bytes,
        stats: Optional[AccessStats] = None,
        *,
        max_key_bytes: int = 160,
        max_value_bytes: int = 131_072,
    ) -> None:
        self._journal = journal
        self._address = bytes(address)
        self._stats = stats
        self._max_key = int(max_key_bytes)
        self._max_value = int(max_value_bytes)

    @property
    def address(self) -> bytes:
        return self._address

    # --------------------------- Validation helpers --------------------------- #

    def _check_key(self, key: bytes) -> bytes:
        if not isinstance(key, (bytes, bytearray)):
            raise VmError("storage key must be bytes", code="storage_invalid")
        if len(key) == 0:
            raise VmError("storage key must be non-empty", code="storage_invalid")
        if len(key) > self._max_key:
            raise VmError(
                f"storage key too long (>{self._max_key} bytes)",
                code="storage_invalid",
                context={"len": len(key)},
            )
        return bytes(key)

    def _check_value(self, value: bytes) -> bytes:
        if not isinstance(value, (bytes, bytearray)):
            raise VmError("storage value must be bytes", code="storage_invalid")
        if len(value) > self._max_value:
            raise VmError(
                f"storage value too large (>{self._max_value} bytes)",
                code="storage_invalid",
                context={"len": len(value)},
            )
        return bytes(value)

    # --------------------------- Contract-facing API -------------------------- #

    def get(self, key: bytes) -> Optional[bytes]:
        """Return the value for `key`, or None if not set."""
        k = self._check_key(key)
        if self._stats is not None:
            self._stats.record_read(self._address, k)
        return self._journal.get(self._address, k)

    def set(self, key: bytes, value: bytes) -> None:
        """Set `key` to `value` (overwrites existing; empty value deletes)."""
        k = self._check_key(key)
        v = self._check_value(value)
        if self._stats is not None:
            self._stats.record_write(self._address, k)
        self._journal.set(self._address, k, v)

    def delete(self, key: bytes) -> None:
        """Delete `key` if present (no-op otherwise)."""
        k = self._check_key(key)
        if self._stats is not None:
            self._stats.record_write(self._address, k)
        self._journal.delete(self._address, k)

    def exists(self, key: bytes) -> bool:
        return self.get(key) is not None

    # ------------------------------ Typed helpers ----------------------------- #

    def get_int(self, key: bytes) -> int:
        """
        Read a big-endian unsigned integer at `key`. Absent keys read as 0.
        """
        raw = self.get(key)
        if not raw:
            return 0
        return int.from_bytes(raw, byteorder="big", signed=False)

    def set_int(self, key: bytes, value: int) -> None:
        """
        Store `value` as a 32-byte big-endian word. Enforces 0 <= value <= 2^256-1.
        Zero deletes the key.
        """
        if not isinstance(value, int) or isinstance(value, bool):
            raise VmError("set_int value must be int", code="storage_invalid")
        if value < 0 or value > U256_MAX:
            raise VmError("set_int out of range (must fit in 256 bits)", code="storage_invalid")
        if value == 0:
            self.delete(key)
            return
        self.set(key, value.to_bytes(WORD_BYTES, "big"))


__all__ = [
    "U256_MAX",
    "WORD_BYTES",
    "AccessCounts",
    "AccessStats",
    "Storage",
]
