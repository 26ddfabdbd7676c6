"""
custody_contracts.token — fungible token ledgers.

Two layouts with identical observable behavior:

- `StandardToken`: one slot per field, checked arithmetic everywhere.
- `PackedToken`:   single-read slots, checked-then-trusted arithmetic and a
                   packed `(last_update, paused)` word.
"""

from .base import DEFAULT_MAX_SUPPLY, TokenBase
from .packed import PackedToken
from .standard import StandardToken

VARIANTS = {"standard": StandardToken, "packed": PackedToken}

__all__ = ["DEFAULT_MAX_SUPPLY", "TokenBase", "StandardToken", "PackedToken", "VARIANTS"]
