"""
custody_vm.errors — typed failures for the custody ledger runtime.

Ledger operations communicate failure via *typed exceptions*. Every failure
is synchronous, terminates the call, and is raised only after the host has
rolled back the call's journal checkpoint, so the caller observes the
pre-call state.

Hierarchy
---------
LedgerError (base)
 ├─ InvalidAmount          : zero or out-of-domain amount
 ├─ InvalidAddress         : malformed principal or zero-address target
 ├─ InsufficientBalance    : debit larger than the available balance
 ├─ InsufficientAllowance  : delegated spend larger than the allowance
 ├─ Unauthorized           : owner-gated call from a non-owner
 ├─ SupplyExceeded         : mint would push total supply past the cap
 ├─ ContractPaused         : balance-moving call while paused
 ├─ TransferFailed         : Asset Reference pull/push failed
 ├─ InvalidConfiguration   : bad constructor argument
 └─ Overflow               : checked u256 arithmetic left its range

VmError is separate: it signals misuse of the host itself (bad storage key,
malformed event) rather than a semantic ledger failure.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional


@dataclass(eq=False)
class LedgerError(Exception):
    """
    Base ledger error.

    Attributes:
        message: Human-readable explanation.
        code:    Stable machine code string (e.g., 'INSUFFICIENT_BALANCE').
        data:    Optional structured details (kept JSON-serializable).
    """

    message: str = "ledger error"
    code: str = "LEDGER_ERROR"
    data: Optional[Dict[str, Any]] = field(default=None)

    def __post_init__(self) -> None:
        super().__init__(self.message)

    def __str__(self) -> str:
        if self.data:
            return f"{self.code}: {self.message} ({self.data})"
        return f"{self.code}: {self.message}"

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to a JSON-safe dict for receipts/logs/CLI output."""
        out: Dict[str, Any] = {"code": self.code, "message": self.message}
        if self.data is not None:
            out["data"] = self.data
        return out


def _hexify(data: Optional[Mapping[str, Any]]) -> Optional[Dict[str, Any]]:
    if not data:
        return None
    return {
        k: ("0x" + bytes(v).hex() if isinstance(v, (bytes, bytearray)) else v)
        for k, v in data.items()
    }


class InvalidAmount(LedgerError):
    def __init__(self, message: str = "invalid amount", *, data: Optional[Dict[str, Any]] = None):
        super().__init__(message=message, code="INVALID_AMOUNT", data=_hexify(data))


class InvalidAddress(LedgerError):
    def __init__(self, message: str = "invalid address", *, data: Optional[Dict[str, Any]] = None):
        super().__init__(message=message, code="INVALID_ADDRESS", data=_hexify(data))


class InsufficientBalance(LedgerError):
    """
    Debit larger than the principal's balance.

    Usage:
        raise InsufficientBalance(data={"principal": addr, "balance": 5, "amount": 7})
    """

    def __init__(self, message: str = "insufficient balance", *, data: Optional[Dict[str, Any]] = None):
        super().__init__(message=message, code="INSUFFICIENT_BALANCE", data=_hexify(data))


class InsufficientAllowance(LedgerError):
    def __init__(self, message: str = "insufficient allowance", *, data: Optional[Dict[str, Any]] = None):
        super().__init__(message=message, code="INSUFFICIENT_ALLOWANCE", data=_hexify(data))


class Unauthorized(LedgerError):
    def __init__(self, message: str = "caller is not the owner", *, data: Optional[Dict[str, Any]] = None):
        super().__init__(message=message, code="UNAUTHORIZED", data=_hexify(data))


class SupplyExceeded(LedgerError):
    def __init__(self, message: str = "max supply exceeded", *, data: Optional[Dict[str, Any]] = None):
        super().__init__(message=message, code="SUPPLY_EXCEEDED", data=_hexify(data))


class ContractPaused(LedgerError):
    def __init__(self, message: str = "contract is paused", *, data: Optional[Dict[str, Any]] = None):
        super().__init__(message=message, code="PAUSED", data=_hexify(data))


class TransferFailed(LedgerError):
    """
    An Asset Reference boundary call (pull or push) failed.

    The underlying failure is chained as ``__cause__`` by the raising site.
    """

    def __init__(self, message: str = "asset transfer failed", *, data: Optional[Dict[str, Any]] = None):
        super().__init__(message=message, code="TRANSFER_FAILED", data=_hexify(data))


class InvalidConfiguration(LedgerError):
    def __init__(self, message: str = "invalid configuration", *, data: Optional[Dict[str, Any]] = None):
        super().__init__(message=message, code="INVALID_CONFIGURATION", data=_hexify(data))


class Overflow(LedgerError):
    def __init__(self, message: str = "u256 overflow", *, data: Optional[Dict[str, Any]] = None):
        super().__init__(message=message, code="UINT_OVERFLOW", data=_hexify(data))


class VmError(Exception):
    """
    Structured host-level error (storage/event/env misuse).

    Supported call patterns:

        VmError("simple message")
        VmError("message", code="some_code", context={...})
    """

    def __init__(self, message: str = "", *, code: str = "vm_error", context: Optional[Mapping[str, Any]] = None) -> None:
        super().__init__(message)
        self.code = str(code)
        self.message = str(message)
        self.context: Dict[str, Any] = dict(context or {})

    def to_dict(self) -> Dict[str, Any]:
        return {
            "code": self.code,
            "message": self.message,
            "context": dict(self.context),
        }


__all__ = [
    "LedgerError",
    "InvalidAmount",
    "InvalidAddress",
    "InsufficientBalance",
    "InsufficientAllowance",
    "Unauthorized",
    "SupplyExceeded",
    "ContractPaused",
    "TransferFailed",
    "InvalidConfiguration",
    "Overflow",
    "VmError",
]
