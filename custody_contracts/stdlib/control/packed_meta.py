# -*- coding: utf-8 -*-
"""
custody_contracts.stdlib.control.packed_meta
============================================

`(last_update, paused)` packed into a single 32-byte storage word.

Layout (big-endian u256)
------------------------
    bits 255..248 : paused flag (0x00 or 0x01)
    bits 247..0   : last_update timestamp (u248)

    word = paused << 248 | last_update

An all-zero word decodes to ``PackedMeta(last_update=0, paused=False)``, so an
absent slot and a fresh contract read the same.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Final

from custody_vm.errors import Overflow

from ..math import U248_MAX

FLAG_SHIFT: Final[int] = 248


@dataclass(frozen=True)
class PackedMeta:
    last_update: int = 0
    paused: bool = False

    def __post_init__(self) -> None:
        if not isinstance(self.last_update, int) or not 0 <= self.last_update <= U248_MAX:
            raise Overflow("last_update must fit in 248 bits", data={"last_update": repr(self.last_update)})

    def to_int(self) -> int:
        return (int(bool(self.paused)) << FLAG_SHIFT) | self.last_update

    @classmethod
    def from_int(cls, word: int) -> "PackedMeta":
        flag = word >> FLAG_SHIFT
        if flag > 1:
            raise Overflow("packed meta flag byte must be 0 or 1", data={"flag": flag})
        return cls(last_update=word & U248_MAX, paused=bool(flag))

    def with_paused(self, paused: bool) -> "PackedMeta":
        return replace(self, paused=bool(paused))

    def with_last_update(self, ts: int) -> "PackedMeta":
        return replace(self, last_update=ts)


__all__ = ["PackedMeta", "FLAG_SHIFT"]
