"""
custody_contracts — contracts that run on a `custody_vm.Host`.

Packages
--------
- ``custody_contracts.pool``   : DepositPool (balance ledger) and asset handles
- ``custody_contracts.token``  : StandardToken and its storage-optimized twin,
                                 PackedToken
- ``custody_contracts.stdlib`` : shared math, token and control helpers
"""

from __future__ import annotations

from .pool import AssetReference, DepositPool, TokenAsset
from .token import PackedToken, StandardToken, TokenBase

__all__ = [
    "AssetReference",
    "DepositPool",
    "TokenAsset",
    "PackedToken",
    "StandardToken",
    "TokenBase",
]
