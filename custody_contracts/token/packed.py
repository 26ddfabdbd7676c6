# -*- coding: utf-8 -*-
"""
PackedToken — storage-optimized token layout
============================================

Observably identical to `StandardToken`: same checks in the same order, same
errors, same return values and events. Only the physical layout and the way
storage is accessed differ:

1. Each slot an operation needs is read once into a local and reused.
2. Once a precondition bounds an arithmetic step, it uses `unchecked_add` /
   `unchecked_sub` instead of the checked helpers:
     - balance debits follow `bal >= amount`
     - balance credits are bounded by total supply
     - supply credits follow `supply + amount <= max_supply`
3. `(last_update, paused)` share one 32-byte word (`PackedMeta`), so the pause
   check and the timestamp update cost one read and one write.
4. owner, max supply, name and symbol are constructor-time immutables and
   never touch storage.

Storage layout
--------------
    tok:meta:total      u256
    tok:ctl:meta        paused << 248 | last_update
    tok:bal:<addr>      u256
    tok:allow:<o>|<s>   u256
"""

from __future__ import annotations

from typing import Final

from custody_vm.errors import (ContractPaused, InsufficientAllowance,
                               InsufficientBalance, SupplyExceeded,
                               Unauthorized)
from custody_vm.runtime import external

from ..stdlib.control.packed_meta import PackedMeta
from ..stdlib.math.safe_uint import unchecked_add, unchecked_sub
from ..stdlib.token import (EVT_PAUSED, EVT_UNPAUSED, key_allow, key_balance,
                            require_amount)
from .base import TokenBase

K_TOTAL: Final[bytes] = b"tok:meta:total"
K_META: Final[bytes] = b"tok:ctl:meta"


class PackedToken(TokenBase):
    def _setup(self, *, owner: bytes, max_supply: int, name: bytes, symbol: bytes) -> None:
        self._owner = owner
        self._max_supply = max_supply
        self._name = name
        self._symbol = symbol

    # ------------------------------------------------------------------
    # Views
    # ------------------------------------------------------------------

    def name(self) -> bytes:
        return self._name

    def symbol(self) -> bytes:
        return self._symbol

    def owner(self) -> bytes:
        return self._owner

    def max_supply(self) -> int:
        return self._max_supply

    def total_supply(self) -> int:
        return self.storage.get_int(K_TOTAL)

    def balance_of(self, addr: bytes) -> int:
        return self.storage.get_int(key_balance(self._principal(addr, "addr")))

    def allowance(self, owner: bytes, spender: bytes) -> int:
        o = self._principal(owner, "owner")
        s = self._principal(spender, "spender")
        return self.storage.get_int(key_allow(o, s))

    def paused(self) -> bool:
        return self._load_meta().paused

    def last_update(self) -> int:
        return self._load_meta().last_update

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _load_meta(self) -> PackedMeta:
        return PackedMeta.from_int(self.storage.get_int(K_META))

    def _store_meta(self, meta: PackedMeta) -> None:
        self.storage.set_int(K_META, meta.to_int())

    def _active_meta(self) -> PackedMeta:
        meta = self._load_meta()
        if meta.paused:
            raise ContractPaused()
        return meta

    def _require_owner(self, caller: bytes) -> None:
        if caller != self._owner:
            raise Unauthorized(data={"caller": caller})

    def _move(self, frm: bytes, to: bytes, from_key: bytes, from_bal: int, amount: int) -> None:
        # from_bal >= amount is already established; a self-move changes nothing.
        if frm == to:
            return
        self.storage.set_int(from_key, unchecked_sub(from_bal, amount))
        to_key = key_balance(to)
        self.storage.set_int(to_key, unchecked_add(self.storage.get_int(to_key), amount))

    # ------------------------------------------------------------------
    # Mutations (explicit caller)
    # ------------------------------------------------------------------

    @external
    def transfer(self, caller: bytes, to: bytes, amount: int) -> bool:
        caller = self._principal(caller, "caller")
        to = self._target(to)
        require_amount(amount)
        meta = self._active_meta()

        from_key = key_balance(caller)
        from_bal = self.storage.get_int(from_key)
        if from_bal < amount:
            raise InsufficientBalance(data={"principal": caller, "balance": from_bal, "amount": amount})

        self._move(caller, to, from_key, from_bal, amount)
        self._store_meta(meta.with_last_update(self.now))

        self._emit_transfer(caller, to, amount)
        return True

    @external
    def approve(self, caller: bytes, spender: bytes, amount: int) -> bool:
        caller = self._principal(caller, "caller")
        spender = self._target(spender, "spender")
        require_amount(amount)

        self.storage.set_int(key_allow(caller, spender), amount)

        self._emit_approval(caller, spender, amount)
        return True

    @external
    def transfer_from(self, caller: bytes, owner: bytes, to: bytes, amount: int) -> bool:
        caller = self._principal(caller, "caller")
        owner = self._principal(owner, "owner")
        to = self._target(to)
        require_amount(amount)
        meta = self._active_meta()

        allow_key = key_allow(owner, caller)
        allowed = self.storage.get_int(allow_key)
        if allowed < amount:
            raise InsufficientAllowance(
                data={"owner": owner, "spender": caller, "allowance": allowed, "amount": amount}
            )
        from_key = key_balance(owner)
        from_bal = self.storage.get_int(from_key)
        if from_bal < amount:
            raise InsufficientBalance(data={"principal": owner, "balance": from_bal, "amount": amount})

        self.storage.set_int(allow_key, unchecked_sub(allowed, amount))
        self._move(owner, to, from_key, from_bal, amount)
        self._store_meta(meta.with_last_update(self.now))

        self._emit_transfer(owner, to, amount)
        return True

    @external
    def mint(self, caller: bytes, to: bytes, amount: int) -> bool:
        caller = self._principal(caller, "caller")
        to = self._target(to)
        require_amount(amount)
        meta = self._active_meta()
        self._require_owner(caller)

        supply = self.storage.get_int(K_TOTAL)
        if supply + amount > self._max_supply:
            raise SupplyExceeded(
                data={"total_supply": supply, "max_supply": self._max_supply, "amount": amount}
            )

        self.storage.set_int(K_TOTAL, unchecked_add(supply, amount))
        to_key = key_balance(to)
        self.storage.set_int(to_key, unchecked_add(self.storage.get_int(to_key), amount))
        self._store_meta(meta.with_last_update(self.now))

        self._emit_transfer(self.zero_address, to, amount)
        return True

    @external
    def burn(self, caller: bytes, amount: int) -> bool:
        caller = self._principal(caller, "caller")
        require_amount(amount)
        meta = self._active_meta()

        bal_key = key_balance(caller)
        bal = self.storage.get_int(bal_key)
        if bal < amount:
            raise InsufficientBalance(data={"principal": caller, "balance": bal, "amount": amount})

        # total supply >= any single balance >= amount
        self.storage.set_int(bal_key, unchecked_sub(bal, amount))
        self.storage.set_int(K_TOTAL, unchecked_sub(self.storage.get_int(K_TOTAL), amount))
        self._store_meta(meta.with_last_update(self.now))

        self._emit_transfer(caller, self.zero_address, amount)
        return True

    def _set_paused(self, caller: bytes, flag: bool) -> bool:
        caller = self._principal(caller, "caller")
        self._require_owner(caller)
        meta = self._load_meta()
        if meta.paused == flag:
            return False
        self._store_meta(meta.with_paused(flag))
        self._emit(EVT_PAUSED if flag else EVT_UNPAUSED, {"account": caller})
        return True

    @external
    def pause(self, caller: bytes) -> bool:
        return self._set_paused(caller, True)

    @external
    def unpause(self, caller: bytes) -> bool:
        return self._set_paused(caller, False)


__all__ = ["PackedToken"]
