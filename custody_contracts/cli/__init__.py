"""custody_contracts.cli — `custody-ledger` command-line entry point."""

from .main import app, main

__all__ = ["app", "main"]
