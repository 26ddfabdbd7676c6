# -*- coding: utf-8 -*-
"""
DepositPool — single-asset custody ledger
=========================================

Tracks how much of one external asset each principal has deposited.

Invariant: ``total_deposited() == sum(balance_of(p) for every p)`` after every
call.

Call ordering
-------------
- deposit:  pull from the asset first, then read and credit. Crediting never
  calls out, and reading after the pull means a reentrant call made during
  the pull is never overwritten by a stale value.
- withdraw: debit first, then push. By the time the asset gets control the
  pool's books already reflect the withdrawal, so a reentrant withdraw sees
  the reduced balance.

Views reject a malformed principal with `InvalidAddress`, like the token views.

A failed pull or push surfaces as `TransferFailed` and, because the whole
method runs inside one host checkpoint, leaves no trace.

Storage layout
--------------
    pool:total       u256
    pool:bal:<addr>  u256

Events
------
    b"Deposited" { "principal": bytes, "amount": int, "new_total": int }
    b"Withdrawn" { "principal": bytes, "amount": int, "new_total": int }
"""

from __future__ import annotations

from typing import Any, Final

from custody_vm import logging as clog
from custody_vm.errors import InsufficientBalance, InvalidConfiguration, TransferFailed
from custody_vm.runtime import Contract, Host, external, is_zero_address

from ..stdlib.math.safe_uint import u256_add, u256_sub
from ..stdlib.token import require_amount
from .asset import AssetReference

log = clog.get_logger(__name__)

K_TOTAL: Final[bytes] = b"pool:total"
BAL_PREFIX: Final[bytes] = b"pool:bal:"

EVT_DEPOSITED: Final[bytes] = b"Deposited"
EVT_WITHDRAWN: Final[bytes] = b"Withdrawn"


def key_deposit(addr: bytes) -> bytes:
    return BAL_PREFIX + bytes(addr)


class DepositPool(Contract):
    def __init__(self, host: Host, address: bytes, *, asset: AssetReference) -> None:
        super().__init__(host, address)
        if asset is None:
            raise InvalidConfiguration("asset must not be None", data={"field": "asset"})
        if not isinstance(asset, AssetReference):
            raise InvalidConfiguration("asset must provide pull() and push()", data={"field": "asset"})
        token_address = getattr(asset, "token_address", None)
        if token_address is not None and is_zero_address(token_address):
            raise InvalidConfiguration("token address cannot be zero", data={"field": "asset"})
        bind = getattr(asset, "bind", None)
        if callable(bind):
            bind(self.address)
        self._asset = asset

    @property
    def asset(self) -> AssetReference:
        return self._asset

    # ------------------------------------------------------------------
    # Views
    # ------------------------------------------------------------------

    def token_address(self) -> bytes:
        """Address of the custodied token; the zero address for assets without one."""
        addr = getattr(self._asset, "token_address", None)
        return self.zero_address if addr is None else bytes(addr)

    def balance_of(self, principal: bytes) -> int:
        principal = self._require_address(principal, what="principal")
        return self.storage.get_int(key_deposit(principal))

    def total_deposited(self) -> int:
        return self.storage.get_int(K_TOTAL)

    # ------------------------------------------------------------------
    # Mutations (explicit caller)
    # ------------------------------------------------------------------

    @external
    def deposit(self, caller: bytes, amount: int) -> bool:
        caller = self._require_address(caller, what="caller")
        require_amount(amount, allow_zero=False)

        self._call_asset("pull", caller, amount)

        key = key_deposit(caller)
        new_total = u256_add(self.storage.get_int(K_TOTAL), amount)
        self.storage.set_int(key, u256_add(self.storage.get_int(key), amount))
        self.storage.set_int(K_TOTAL, new_total)

        self._emit(EVT_DEPOSITED, {"principal": caller, "amount": amount, "new_total": new_total})
        return True

    @external
    def withdraw(self, caller: bytes, amount: int) -> bool:
        caller = self._require_address(caller, what="caller")
        require_amount(amount, allow_zero=False)

        key = key_deposit(caller)
        bal = self.storage.get_int(key)
        if bal < amount:
            raise InsufficientBalance(data={"principal": caller, "balance": bal, "amount": amount})

        new_total = u256_sub(self.storage.get_int(K_TOTAL), amount)
        self.storage.set_int(key, u256_sub(bal, amount))
        self.storage.set_int(K_TOTAL, new_total)

        self._call_asset("push", caller, amount)

        self._emit(EVT_WITHDRAWN, {"principal": caller, "amount": amount, "new_total": new_total})
        return True

    # ------------------------------------------------------------------
    # Boundary
    # ------------------------------------------------------------------

    def _call_asset(self, op: str, principal: bytes, amount: int) -> None:
        data: dict[str, Any] = {"op": op, "principal": principal, "amount": amount}
        try:
            ok = getattr(self._asset, op)(principal, amount)
        except Exception as e:
            log.warning(
                "asset %s failed",
                op,
                extra={"contract": type(self).__name__, "error": getattr(e, "code", type(e).__name__)},
            )
            raise TransferFailed(f"asset {op} failed: {e}", data=data) from e
        if ok is False:
            log.warning("asset %s returned False", op, extra={"contract": type(self).__name__})
            raise TransferFailed(f"asset {op} returned False", data=data)


__all__ = ["DepositPool", "key_deposit", "EVT_DEPOSITED", "EVT_WITHDRAWN"]
