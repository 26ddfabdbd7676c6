# -*- coding: utf-8 -*-
"""
StandardToken — one storage slot per field
==========================================

The straightforward token layout. Every field lives in its own slot, every
value is fetched through its accessor each time it is needed, and all
arithmetic goes through the checked `u256_add` / `u256_sub` helpers.

Storage layout
--------------
    tok:meta:name          bytes
    tok:meta:symbol        bytes
    tok:meta:owner         bytes (address)
    tok:meta:max           u256
    tok:meta:total         u256
    tok:ctl:paused         b"\\x01" when paused, absent otherwise
    tok:ctl:last_update    u256 (block timestamp)
    tok:bal:<addr>         u256
    tok:allow:<o>|<s>      u256

Public interface
----------------
name() / symbol() / decimals() / owner() / max_supply() / total_supply()
balance_of(addr) / allowance(owner, spender) / paused() / last_update()

transfer(caller, to, amount) -> True
approve(caller, spender, amount) -> True
transfer_from(caller, owner, to, amount) -> True
mint(caller, to, amount) -> True          # owner only
burn(caller, amount) -> True
pause(caller) / unpause(caller) -> bool   # owner only; False if unchanged
"""

from __future__ import annotations

from typing import Final

from custody_vm.errors import (ContractPaused, InsufficientAllowance,
                               InsufficientBalance, SupplyExceeded,
                               Unauthorized)
from custody_vm.runtime import external

from ..stdlib.math.safe_uint import u256_add, u256_sub
from ..stdlib.token import (EVT_PAUSED, EVT_UNPAUSED, key_allow, key_balance,
                            require_amount)
from .base import TokenBase

K_NAME: Final[bytes] = b"tok:meta:name"
K_SYMBOL: Final[bytes] = b"tok:meta:symbol"
K_OWNER: Final[bytes] = b"tok:meta:owner"
K_MAX: Final[bytes] = b"tok:meta:max"
K_TOTAL: Final[bytes] = b"tok:meta:total"
K_PAUSED: Final[bytes] = b"tok:ctl:paused"
K_LAST_UPDATE: Final[bytes] = b"tok:ctl:last_update"

_FLAG_ON: Final[bytes] = b"\x01"


class StandardToken(TokenBase):
    def _setup(self, *, owner: bytes, max_supply: int, name: bytes, symbol: bytes) -> None:
        self.storage.set(K_NAME, name)
        self.storage.set(K_SYMBOL, symbol)
        self.storage.set(K_OWNER, owner)
        self.storage.set_int(K_MAX, max_supply)

    # ------------------------------------------------------------------
    # Views
    # ------------------------------------------------------------------

    def name(self) -> bytes:
        return self.storage.get(K_NAME) or b""

    def symbol(self) -> bytes:
        return self.storage.get(K_SYMBOL) or b""

    def owner(self) -> bytes:
        return self.storage.get(K_OWNER) or self.zero_address

    def max_supply(self) -> int:
        return self.storage.get_int(K_MAX)

    def total_supply(self) -> int:
        return self.storage.get_int(K_TOTAL)

    def balance_of(self, addr: bytes) -> int:
        return self.storage.get_int(key_balance(self._principal(addr, "addr")))

    def allowance(self, owner: bytes, spender: bytes) -> int:
        o = self._principal(owner, "owner")
        s = self._principal(spender, "spender")
        return self.storage.get_int(key_allow(o, s))

    def paused(self) -> bool:
        return self.storage.get(K_PAUSED) == _FLAG_ON

    def last_update(self) -> int:
        return self.storage.get_int(K_LAST_UPDATE)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _set_balance(self, addr: bytes, value: int) -> None:
        self.storage.set_int(key_balance(addr), value)

    def _set_allowance(self, owner: bytes, spender: bytes, value: int) -> None:
        self.storage.set_int(key_allow(owner, spender), value)

    def _require_not_paused(self) -> None:
        if self.paused():
            raise ContractPaused()

    def _require_owner(self, caller: bytes) -> None:
        if caller != self.owner():
            raise Unauthorized(data={"caller": caller})

    def _require_balance(self, addr: bytes, amount: int) -> None:
        bal = self.balance_of(addr)
        if bal < amount:
            raise InsufficientBalance(data={"principal": addr, "balance": bal, "amount": amount})

    def _touch(self) -> None:
        self.storage.set_int(K_LAST_UPDATE, self.now)

    # ------------------------------------------------------------------
    # Mutations (explicit caller)
    # ------------------------------------------------------------------

    @external
    def transfer(self, caller: bytes, to: bytes, amount: int) -> bool:
        caller = self._principal(caller, "caller")
        to = self._target(to)
        require_amount(amount)
        self._require_not_paused()
        self._require_balance(caller, amount)

        self._set_balance(caller, u256_sub(self.balance_of(caller), amount))
        self._set_balance(to, u256_add(self.balance_of(to), amount))
        self._touch()

        self._emit_transfer(caller, to, amount)
        return True

    @external
    def approve(self, caller: bytes, spender: bytes, amount: int) -> bool:
        caller = self._principal(caller, "caller")
        spender = self._target(spender, "spender")
        require_amount(amount)

        self._set_allowance(caller, spender, amount)

        self._emit_approval(caller, spender, amount)
        return True

    @external
    def transfer_from(self, caller: bytes, owner: bytes, to: bytes, amount: int) -> bool:
        """Spender (`caller`) moves `amount` from `owner` to `to` using its allowance."""
        caller = self._principal(caller, "caller")
        owner = self._principal(owner, "owner")
        to = self._target(to)
        require_amount(amount)
        self._require_not_paused()

        allowed = self.allowance(owner, caller)
        if allowed < amount:
            raise InsufficientAllowance(
                data={"owner": owner, "spender": caller, "allowance": allowed, "amount": amount}
            )
        self._require_balance(owner, amount)

        self._set_allowance(owner, caller, u256_sub(self.allowance(owner, caller), amount))
        self._set_balance(owner, u256_sub(self.balance_of(owner), amount))
        self._set_balance(to, u256_add(self.balance_of(to), amount))
        self._touch()

        self._emit_transfer(owner, to, amount)
        return True

    @external
    def mint(self, caller: bytes, to: bytes, amount: int) -> bool:
        caller = self._principal(caller, "caller")
        to = self._target(to)
        require_amount(amount)
        self._require_not_paused()
        self._require_owner(caller)

        if self.total_supply() + amount > self.max_supply():
            raise SupplyExceeded(
                data={"total_supply": self.total_supply(), "max_supply": self.max_supply(), "amount": amount}
            )

        self.storage.set_int(K_TOTAL, u256_add(self.total_supply(), amount))
        self._set_balance(to, u256_add(self.balance_of(to), amount))
        self._touch()

        self._emit_transfer(self.zero_address, to, amount)
        return True

    @external
    def burn(self, caller: bytes, amount: int) -> bool:
        caller = self._principal(caller, "caller")
        require_amount(amount)
        self._require_not_paused()
        self._require_balance(caller, amount)

        self._set_balance(caller, u256_sub(self.balance_of(caller), amount))
        self.storage.set_int(K_TOTAL, u256_sub(self.total_supply(), amount))
        self._touch()

        self._emit_transfer(caller, self.zero_address, amount)
        return True

    @external
    def pause(self, caller: bytes) -> bool:
        caller = self._principal(caller, "caller")
        self._require_owner(caller)
        if self.paused():
            return False
        self.storage.set(K_PAUSED, _FLAG_ON)
        self._emit(EVT_PAUSED, {"account": caller})
        return True

    @external
    def unpause(self, caller: bytes) -> bool:
        caller = self._principal(caller, "caller")
        self._require_owner(caller)
        if not self.paused():
            return False
        self.storage.delete(K_PAUSED)
        self._emit(EVT_UNPAUSED, {"account": caller})
        return True


__all__ = ["StandardToken"]
