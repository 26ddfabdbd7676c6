# -*- coding: utf-8 -*-
"""
compare.py
==========

Measure how many storage reads and writes each token operation costs under
`StandardToken` and `PackedToken`.

Each measurement uses a fresh host, prepares the same fixture state for both
layouts, resets the access counters and then performs exactly one call:

    mint           owner mints `amount` to user1
    transfer       user1 (holding 10 * amount) sends `amount` to user2
    transfer_from  user2 spends `amount` of user1's allowance to itself
    burn           user1 burns `amount`

`verify_equivalence()` runs the mint-then-transfer flow on both layouts and
checks that balances, supply and event sequences agree.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Tuple, Type

from custody_vm.config import LedgerConfig
from custody_vm.runtime import AccessCounts, Host

from ..stdlib.math import U256_MAX
from ..token import PackedToken, StandardToken, TokenBase

OPERATIONS: Tuple[str, ...] = ("mint", "transfer", "transfer_from", "burn")
DEFAULT_AMOUNT = 100 * 10**18

# Seconds between fixture setup and the measured call.
BLOCK_TIME = 12


@dataclass(frozen=True)
class Accounts:
    owner: bytes
    user1: bytes
    user2: bytes

    @classmethod
    def on(cls, host: Host) -> "Accounts":
        return cls(host.address("owner"), host.address("user1"), host.address("user2"))


@dataclass(frozen=True)
class OpComparison:
    op: str
    standard: AccessCounts
    packed: AccessCounts

    @property
    def saved(self) -> int:
        return self.standard.total - self.packed.total

    @property
    def savings_pct(self) -> float:
        if self.standard.total == 0:
            return 0.0
        return round(self.saved * 100 / self.standard.total, 2)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "op": self.op,
            "standard": {"reads": self.standard.reads, "writes": self.standard.writes},
            "packed": {"reads": self.packed.reads, "writes": self.packed.writes},
            "saved": self.saved,
            "savings_pct": self.savings_pct,
        }


def _prepare(op: str, token: TokenBase, acct: Accounts, amount: int) -> Callable[[], Any]:
    if op == "mint":
        return lambda: token.mint(acct.owner, acct.user1, amount)
    token.mint(acct.owner, acct.user1, 10 * amount)
    if op == "transfer":
        return lambda: token.transfer(acct.user1, acct.user2, amount)
    if op == "transfer_from":
        token.approve(acct.user1, acct.user2, 10 * amount)
        return lambda: token.transfer_from(acct.user2, acct.user1, acct.user2, amount)
    if op == "burn":
        return lambda: token.burn(acct.user1, amount)
    raise ValueError(f"unknown operation: {op!r}")


def measure(
    op: str,
    variant: Type[TokenBase],
    amount: int = DEFAULT_AMOUNT,
    *,
    config: Optional[LedgerConfig] = None,
) -> AccessCounts:
    """Storage accesses of a single `op` call on a fresh `variant` ledger."""
    host = Host(config)
    acct = Accounts.on(host)
    token = host.deploy(variant, owner=acct.owner, max_supply=U256_MAX)
    call = _prepare(op, token, acct, amount)
    host.advance(BLOCK_TIME)
    host.stats.reset(token.address)
    call()
    return host.stats.for_address(token.address)


def compare_all(amount: int = DEFAULT_AMOUNT, *, config: Optional[LedgerConfig] = None) -> List[OpComparison]:
    return [
        OpComparison(
            op=op,
            standard=measure(op, StandardToken, amount, config=config),
            packed=measure(op, PackedToken, amount, config=config),
        )
        for op in OPERATIONS
    ]


def verify_equivalence(amount: int = DEFAULT_AMOUNT, *, config: Optional[LedgerConfig] = None) -> Dict[str, Any]:
    """
    Mint `amount` to user1, transfer half to user2, on both layouts.
    Returns {"equal": bool, "standard": state, "packed": state}.
    """
    out: Dict[str, Any] = {}
    logs: Dict[str, list] = {}
    for label, variant in (("standard", StandardToken), ("packed", PackedToken)):
        host = Host(config)
        acct = Accounts.on(host)
        token = host.deploy(variant, owner=acct.owner, max_supply=U256_MAX)
        token.mint(acct.owner, acct.user1, amount)
        host.advance(BLOCK_TIME)
        token.transfer(acct.user1, acct.user2, amount // 2)
        out[label] = token.state([acct.owner, acct.user1, acct.user2])
        logs[label] = [e.key() for e in token.events()]
    out["equal"] = out["standard"] == out["packed"] and logs["standard"] == logs["packed"]
    return out


__all__ = [
    "OPERATIONS",
    "DEFAULT_AMOUNT",
    "Accounts",
    "OpComparison",
    "measure",
    "compare_all",
    "verify_equivalence",
]
