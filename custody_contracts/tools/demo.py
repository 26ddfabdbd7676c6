# -*- coding: utf-8 -*-
"""
demo.py
=======

Deposit/withdraw walk-through for a `DepositPool` holding a `StandardToken`.

Each step records the pool balances of alice and bob, the pool total, the
token balance held by the pool, and the error code when a step fails on
purpose (zero deposit, over-withdrawal).
"""

from __future__ import annotations

from typing import Any, Callable, Dict, List, Optional, Tuple

from custody_vm.config import LedgerConfig
from custody_vm.errors import LedgerError
from custody_vm.runtime import Host

from ..pool import DepositPool, TokenAsset
from ..token import StandardToken

UNIT = 10**18


def run_pool_demo(*, config: Optional[LedgerConfig] = None) -> List[Dict[str, Any]]:
    host = Host(config)
    owner, alice, bob = host.address("owner"), host.address("alice"), host.address("bob")
    token = host.deploy(StandardToken, owner=owner)
    token.mint(owner, alice, 1000 * UNIT)
    token.mint(owner, bob, 1000 * UNIT)
    pool = host.deploy(DepositPool, asset=TokenAsset(token))

    steps: List[Tuple[str, Callable[[], Any]]] = [
        ("alice approves 100", lambda: token.approve(alice, pool.address, 100 * UNIT)),
        ("alice deposits 100", lambda: pool.deposit(alice, 100 * UNIT)),
        ("alice withdraws 50", lambda: pool.withdraw(alice, 50 * UNIT)),
        ("bob approves 200", lambda: token.approve(bob, pool.address, 200 * UNIT)),
        ("bob deposits 200", lambda: pool.deposit(bob, 200 * UNIT)),
        ("alice withdraws 50", lambda: pool.withdraw(alice, 50 * UNIT)),
        ("bob deposits 0", lambda: pool.deposit(bob, 0)),
        ("bob withdraws 300", lambda: pool.withdraw(bob, 300 * UNIT)),
    ]

    rows: List[Dict[str, Any]] = []
    for label, call in steps:
        error = None
        try:
            call()
        except LedgerError as e:
            error = e.code
        host.advance(12)
        rows.append(
            {
                "step": label,
                "ok": error is None,
                "error": error,
                "alice": pool.balance_of(alice),
                "bob": pool.balance_of(bob),
                "total": pool.total_deposited(),
                "custody": token.balance_of(pool.address),
            }
        )
    return rows


__all__ = ["run_pool_demo", "UNIT"]
