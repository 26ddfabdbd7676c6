# -*- coding: utf-8 -*-
"""
custody_contracts.stdlib.math
=============================

Integer envelopes shared by ledger contracts. No floats anywhere.

- ``U256_MAX`` bounds every balance, allowance and supply.
- ``U248_MAX`` bounds timestamps that share a word with a one-byte flag.
"""

from __future__ import annotations

from typing import Final

from custody_vm.errors import Overflow

U256_MAX: Final[int] = (1 << 256) - 1
U248_MAX: Final[int] = (1 << 248) - 1


def is_u256(x: object) -> bool:
    return isinstance(x, int) and not isinstance(x, bool) and 0 <= x <= U256_MAX


def require_u256(*xs: int) -> None:
    """Raise Overflow unless every argument is an int in [0, U256_MAX]."""
    for x in xs:
        if not is_u256(x):
            raise Overflow("value outside u256", data={"value": repr(x)})


__all__ = ["U256_MAX", "U248_MAX", "is_u256", "require_u256"]
