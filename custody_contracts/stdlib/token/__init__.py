# -*- coding: utf-8 -*-
"""
custody_contracts.stdlib.token
==============================

Conventions and validation shared by the fungible token contracts. This
package performs no storage I/O and emits nothing itself.

Conventions
-----------
Storage keys (prefixed bytes):
  - balances:   BAL_PREFIX || <addr>
  - allowances: ALLOW_PREFIX || <owner> || b"|" || <spender>

Events (names as bytes):
  - b"Transfer" { "from": bytes, "to": bytes, "amount": int }
  - b"Approval" { "owner": bytes, "spender": bytes, "amount": int }
  - b"Paused"   { "account": bytes }
  - b"Unpaused" { "account": bytes }

Mints are reported as a Transfer from the zero address and burns as a
Transfer to it.
"""

from __future__ import annotations

from typing import Final, Union

from custody_vm.errors import InvalidAmount, InvalidConfiguration

from ..math import is_u256

# -----------------------------------------------------------------------------
# Public constants: storage prefixes, event names
# -----------------------------------------------------------------------------

BAL_PREFIX: Final[bytes] = b"tok:bal:"
ALLOW_PREFIX: Final[bytes] = b"tok:allow:"

EVT_TRANSFER: Final[bytes] = b"Transfer"
EVT_APPROVAL: Final[bytes] = b"Approval"
EVT_PAUSED: Final[bytes] = b"Paused"
EVT_UNPAUSED: Final[bytes] = b"Unpaused"

DEFAULT_DECIMALS: Final[int] = 18


# -----------------------------------------------------------------------------
# Key derivation helpers (no storage I/O here)
# -----------------------------------------------------------------------------


def key_balance(addr: bytes) -> bytes:
    return BAL_PREFIX + bytes(addr)


def key_allow(owner: bytes, spender: bytes) -> bytes:
    return ALLOW_PREFIX + bytes(owner) + b"|" + bytes(spender)


# -----------------------------------------------------------------------------
# Validation helpers
# -----------------------------------------------------------------------------


def require_amount(n: int, *, allow_zero: bool = True) -> int:
    """
    Ensure `n` is an integer amount in [0, 2**256-1] (and non-zero unless
    `allow_zero`). Raises InvalidAmount.
    """
    if not is_u256(n):
        raise InvalidAmount("amount must be an integer in [0, 2**256-1]", data={"amount": repr(n)})
    if not allow_zero and n == 0:
        raise InvalidAmount("amount must be greater than zero", data={"amount": 0})
    return n


def to_label(value: Union[str, bytes], *, what: str) -> bytes:
    """Token name/symbol as opaque bytes; str is UTF-8 encoded."""
    if isinstance(value, str):
        return value.encode("utf-8")
    if isinstance(value, (bytes, bytearray)):
        return bytes(value)
    raise InvalidConfiguration(f"{what} must be str or bytes", data={"field": what})


__all__ = [
    "BAL_PREFIX",
    "ALLOW_PREFIX",
    "EVT_TRANSFER",
    "EVT_APPROVAL",
    "EVT_PAUSED",
    "EVT_UNPAUSED",
    "DEFAULT_DECIMALS",
    "key_balance",
    "key_allow",
    "require_amount",
    "to_label",
]
