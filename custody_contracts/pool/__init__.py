"""custody_contracts.pool — single-asset deposit ledger and asset handles."""

from .asset import AssetReference, TokenAsset
from .deposit_pool import DepositPool

__all__ = ["AssetReference", "TokenAsset", "DepositPool"]
