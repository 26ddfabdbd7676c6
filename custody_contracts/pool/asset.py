# -*- coding: utf-8 -*-
"""
Asset references: the external fungible asset a pool takes custody of.

A pool never touches the asset's own ledger. It only calls two fallible
boundary operations:

    pull(owner, amount)  move `amount` from `owner` into the pool's custody
    push(to, amount)     move `amount` from the pool's custody to `to`

Either call fails by raising or by returning ``False``. Implementations may
hand control to arbitrary code (including code that calls back into the
pool), so the pool orders its own bookkeeping around these calls.
"""

from __future__ import annotations

from typing import Any, Optional, Protocol, runtime_checkable

from custody_vm.errors import InvalidConfiguration


@runtime_checkable
class AssetReference(Protocol):
    def pull(self, owner: bytes, amount: int) -> Optional[bool]:
        ...

    def push(self, to: bytes, amount: int) -> Optional[bool]:
        ...


class TokenAsset:
    """
    Asset reference backed by a `StandardToken` / `PackedToken` on the same
    host.

    The pool binds itself as custodian once, at construction. Deposits then
    spend the depositor's allowance to the pool, so a depositor must
    ``approve(pool, amount)`` on the token first.
    """

    def __init__(self, token: Any, custodian: Optional[bytes] = None) -> None:
        if token is None:
            raise InvalidConfiguration("token must not be None", data={"field": "token"})
        self.token = token
        self._custodian = bytes(custodian) if custodian is not None else None

    @property
    def token_address(self) -> bytes:
        return bytes(self.token.address)

    @property
    def custodian(self) -> Optional[bytes]:
        return self._custodian

    def bind(self, custodian: bytes) -> None:
        if self._custodian is not None and self._custodian != bytes(custodian):
            raise InvalidConfiguration("asset already bound to another custodian", data={"custodian": self._custodian})
        self._custodian = bytes(custodian)

    def _require_bound(self) -> bytes:
        if self._custodian is None:
            raise InvalidConfiguration("asset has no custodian bound")
        return self._custodian

    def pull(self, owner: bytes, amount: int) -> bool:
        pool = self._require_bound()
        return self.token.transfer_from(pool, owner, pool, amount)

    def push(self, to: bytes, amount: int) -> bool:
        return self.token.transfer(self._require_bound(), to, amount)

    def __repr__(self) -> str:
        return f"TokenAsset(token=0x{self.token_address.hex()})"


__all__ = ["AssetReference", "TokenAsset"]
