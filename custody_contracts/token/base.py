# -*- coding: utf-8 -*-
"""
Shared construction and validation for the fungible token ledgers.

`StandardToken` and `PackedToken` differ only in how they lay out and access
storage. Everything observable (argument checks, error classes, events,
return values) goes through the helpers here so the two cannot drift apart.
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, Union

from custody_vm.errors import InvalidAddress, InvalidConfiguration
from custody_vm.runtime import Contract, Host

from ..stdlib.math import is_u256
from ..stdlib.token import DEFAULT_DECIMALS, EVT_APPROVAL, EVT_TRANSFER, to_label

DEFAULT_MAX_SUPPLY = 1_000_000 * 10**18


class TokenBase(Contract):
    """
    Common constructor for both token layouts.

    Keyword arguments
    -----------------
    owner:       principal allowed to mint and pause (non-zero address)
    max_supply:  hard cap on total supply (u256)
    name/symbol: opaque labels; str is UTF-8 encoded
    decimals:    display precision, 0..255
    """

    def __init__(
        self,
        host: Host,
        address: bytes,
        *,
        owner: bytes,
        max_supply: int = DEFAULT_MAX_SUPPLY,
        name: Union[str, bytes] = "Test Token",
        symbol: Union[str, bytes] = "TEST",
        decimals: int = DEFAULT_DECIMALS,
    ) -> None:
        super().__init__(host, address)
        try:
            owner = self._require_address(owner, what="owner", allow_zero=False)
        except InvalidAddress as e:
            raise InvalidConfiguration(e.message, data={"field": "owner"}) from e
        if not is_u256(max_supply):
            raise InvalidConfiguration("max_supply must be an integer in [0, 2**256-1]", data={"field": "max_supply"})
        if not isinstance(decimals, int) or isinstance(decimals, bool) or not 0 <= decimals <= 255:
            raise InvalidConfiguration("decimals must be in [0, 255]", data={"field": "decimals"})
        self._decimals = decimals
        self._setup(
            owner=owner,
            max_supply=max_supply,
            name=to_label(name, what="name"),
            symbol=to_label(symbol, what="symbol"),
        )

    def _setup(self, *, owner: bytes, max_supply: int, name: bytes, symbol: bytes) -> None:
        raise NotImplementedError

    def decimals(self) -> int:
        return self._decimals

    # ------------------------------------------------------------------ #
    # Argument checks & events shared by both layouts
    # ------------------------------------------------------------------ #

    def _principal(self, addr: Any, what: str) -> bytes:
        return self._require_address(addr, what=what)

    def _target(self, addr: Any, what: str = "to") -> bytes:
        return self._require_address(addr, what=what, allow_zero=False)

    def _emit_transfer(self, frm: bytes, to: bytes, amount: int) -> None:
        self._emit(EVT_TRANSFER, {"from": frm, "to": to, "amount": amount})

    def _emit_approval(self, owner: bytes, spender: bytes, amount: int) -> None:
        self._emit(EVT_APPROVAL, {"owner": owner, "spender": spender, "amount": amount})

    # ------------------------------------------------------------------ #
    # Inspection
    # ------------------------------------------------------------------ #

    def state(self, principals: Iterable[bytes]) -> Dict[str, Any]:
        """
        Observable ledger state over `principals`: supply, pause flag,
        last update, balances and every pairwise allowance. Used to compare
        two ledgers; the reads it performs are counted like any other.
        """
        ps = [bytes(p) for p in principals]
        return {
            "total_supply": self.total_supply(),
            "paused": self.paused(),
            "last_update": self.last_update(),
            "balances": {p: self.balance_of(p) for p in ps},
            "allowances": {(o, s): self.allowance(o, s) for o in ps for s in ps},
        }

    # Views provided by each layout.
    def total_supply(self) -> int:
        raise NotImplementedError

    def paused(self) -> bool:
        raise NotImplementedError

    def last_update(self) -> int:
        raise NotImplementedError

    def balance_of(self, addr: bytes) -> int:
        raise NotImplementedError

    def allowance(self, owner: bytes, spender: bytes) -> int:
        raise NotImplementedError


__all__ = ["TokenBase", "DEFAULT_MAX_SUPPLY"]
