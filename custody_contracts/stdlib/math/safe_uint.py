# -*- coding: utf-8 -*-
"""
custody_contracts.stdlib.math.safe_uint
=======================================

Checked and "checked-then-trusted" u256 arithmetic for ledger contracts.

Two styles
----------
1) **Checked** (`u256_add`, `u256_sub`): validate both operands and the
   result; raise `Overflow` when anything leaves [0, U256_MAX].
2) **Unchecked** (`unchecked_add`, `unchecked_sub`): no range checks at all.
   Only call these once a preceding precondition has already proven the
   result is in range, e.g.

       if bal < amount:
           raise InsufficientBalance(...)
       new_bal = unchecked_sub(bal, amount)        # bal >= amount

       if supply + amount > max_supply:            # max_supply <= U256_MAX
           raise SupplyExceeded(...)
       new_supply = unchecked_add(supply, amount)

The two styles must produce the same value for every in-range input; the
unchecked forms only skip the redundant validation.
"""

from __future__ import annotations

from custody_vm.errors import Overflow

from . import U256_MAX, require_u256


# ---------------------------------------------------------------------------
# Checked (fail-fast on errors)
# ---------------------------------------------------------------------------

def u256_add(x: int, y: int) -> int:
    """Checked add: raise Overflow when x + y > U256_MAX."""
    require_u256(x, y)
    s = x + y
    if s > U256_MAX:
        raise Overflow("u256 addition overflow", data={"x": x, "y": y})
    return s


def u256_sub(x: int, y: int) -> int:
    """Checked sub: raise Overflow on underflow (y > x)."""
    require_u256(x, y)
    if y > x:
        raise Overflow("u256 subtraction underflow", data={"x": x, "y": y})
    return x - y


# ---------------------------------------------------------------------------
# Unchecked (caller has already established range safety)
# ---------------------------------------------------------------------------

def unchecked_add(x: int, y: int) -> int:
    return x + y


def unchecked_sub(x: int, y: int) -> int:
    return x - y


__all__ = [
    "u256_add", "u256_sub",
    "unchecked_add", "unchecked_sub",
]
