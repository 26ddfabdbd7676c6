"""
custody_vm.runtime.journal — journaling writes, checkpoints, revert/commit.

This module provides a deterministic, in-memory write journal over a base
``{address: {key: value}}`` mapping. It supports nested checkpoints via a
stack of overlays. Writes go to the top overlay; reads consult overlays from
top → base. `commit()` merges the top overlay into the next layer (or the base
state if it's the last layer). `revert()` discards the top overlay.

Key properties
--------------
- Pure Python, no I/O; safe for unit tests and simulations.
- Storage overlay per (address, key) with explicit deletion markers.
- Nested checkpoints (begin/commit/revert) with O(changes) merge cost.
- With no open checkpoint, writes land directly in the base state.

Intended usage
--------------
    j = Journal()
    j.begin()                       # start a checkpoint
    j.set(addr, b"k", b"v")
    j.commit()                      # apply to parent/base

A reentrant call simply opens another checkpoint on top of the current one;
reverting it keeps the outer call's writes.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, MutableMapping, Optional

from custody_vm.errors import VmError


def _b(x: bytes | bytearray | memoryview, *, name: str) -> bytes:
    if not isinstance(x, (bytes, bytearray, memoryview)):
        raise TypeError(f"{name} must be bytes-like")
    return bytes(x)


# =============================================================================
# Overlay model
# =============================================================================


@dataclass
class _Overlay:
    """
    A single journal layer. `None` as a value means deletion of that key.
    """

    storage: Dict[bytes, Dict[bytes, Optional[bytes]]] = field(default_factory=dict)

    def lookup(self, addr: bytes, key: bytes) -> tuple[bool, Optional[bytes]]:
        m = self.storage.get(addr)
        if m is None or key not in m:
            return False, None
        return True, m[key]

    def put(self, addr: bytes, key: bytes, value: Optional[bytes]) -> None:
        self.storage.setdefault(addr, {})[key] = value


# =============================================================================
# Journal
# =============================================================================


class Journal:
    """
    A copy-on-write write journal with nested checkpoints.

    Parameters
    ----------
    base : MutableMapping[bytes, Dict[bytes, bytes]] | None
        The base (committed) storage mapping. A fresh dict is used if omitted.

    API highlights
    --------------
    - begin() / commit() / revert()
    - get(), set(), delete(), exists()
    - snapshot()
    """

    def __init__(self, base: Optional[MutableMapping[bytes, Dict[bytes, bytes]]] = None) -> None:
        self._base: MutableMapping[bytes, Dict[bytes, bytes]] = base if base is not None else {}
        self._layers: List[_Overlay] = []

    # --------------------------------------------------------------------- #
    # Checkpointing
    # --------------------------------------------------------------------- #

    def depth(self) -> int:
        """Number of open checkpoints (0 when nothing is staged)."""
        return len(self._layers)

    def begin(self) -> int:
        """Start a new checkpoint. Returns the new depth marker."""
        self._layers.append(_Overlay())
        return len(self._layers)

    def commit(self) -> None:
        """
        Commit the top overlay into its parent, or into the base state if it is
        the outermost checkpoint.
        """
        if not self._layers:
            raise VmError("commit without an open checkpoint", code="journal_state")
        top = self._layers.pop()
        if self._layers:
            parent = self._layers[-1]
            for addr, m in top.storage.items():
                for key, value in m.items():
                    parent.put(addr, key, value)
        else:
            self._apply_to_base(top)

    def revert(self) -> None:
        """Discard the top overlay."""
        if not self._layers:
            raise VmError("revert without an open checkpoint", code="journal_state")
        self._layers.pop()

    def _apply_to_base(self, layer: _Overlay) -> None:
        for addr, m in layer.storage.items():
            acct = self._base.get(addr)
            for key, value in m.items():
                if value is None:
                    if acct is not None:
                        acct.pop(key, None)
                else:
                    if acct is None:
                        acct = {}
                        self._base[addr] = acct
                    acct[key] = value
            if acct is not None and not acct:
                self._base.pop(addr, None)

    # --------------------------------------------------------------------- #
    # Storage API
    # --------------------------------------------------------------------- #

    def get(self, address: bytes, key: bytes) -> Optional[bytes]:
        addr = _b(address, name="address")
        k = _b(key, name="key")
        for layer in reversed(self._layers):
            found, value = layer.lookup(addr, k)
            if found:
                return value
        return self._base.get(addr, {}).get(k)

    def exists(self, address: bytes, key: bytes) -> bool:
        return self.get(address, key) is not None

    def set(self, address: bytes, key: bytes, value: bytes) -> None:
        """Set value for (address, key). An empty value deletes the key."""
        addr = _b(address, name="address")
        k = _b(key, name="key")
        v = _b(value, name="value")
        self._write(addr, k, v if v else None)

    def delete(self, address: bytes, key: bytes) -> None:
        self._write(_b(address, name="address"), _b(key, name="key"), None)

    def _write(self, addr: bytes, key: bytes, value: Optional[bytes]) -> None:
        if self._layers:
            self._layers[-1].put(addr, key, value)
            return
        acct = self._base.get(addr)
        if value is None:
            if acct is not None:
                acct.pop(key, None)
                if not acct:
                    self._base.pop(addr, None)
            return
        if acct is None:
            acct = {}
            self._base[addr] = acct
        acct[key] = value

    # --------------------------------------------------------------------- #
    # Views
    # --------------------------------------------------------------------- #

    def snapshot(self, address: Optional[bytes] = None) -> Dict[bytes, Dict[bytes, bytes]]:
        """
        Effective state (base + all overlays) as plain dicts. Restrict to one
        address when given.
        """
        merged: Dict[bytes, Dict[bytes, bytes]] = {a: dict(m) for a, m in self._base.items()}
        for layer in self._layers:
            for addr, m in layer.storage.items():
                acct = merged.setdefault(addr, {})
                for key, value in m.items():
                    if value is None:
                        acct.pop(key, None)
                    else:
                        acct[key] = value
        merged = {a: m for a, m in merged.items() if m}
        if address is not None:
            addr = _b(address, name="address")
            return {addr: merged[addr]} if addr in merged else {}
        return merged


__all__ = ["Journal"]
