"""
custody_vm — deterministic in-process host for custody ledger contracts.

The host owns all contract state (a journaled key/value store), the ordered
event log and the block environment, and runs every public contract call as an
all-or-nothing unit. Contracts live in the sibling `custody_contracts` package.

    from custody_vm import Host
    host = Host()
    token = host.deploy(StandardToken, owner=host.address("owner"), ...)
"""

from __future__ import annotations

from .config import LedgerConfig, load_config
from .errors import LedgerError, VmError
from .runtime import BlockEnv, Contract, Host, external
from .version import __version__

__all__ = [
    "__version__",
    "LedgerConfig",
    "load_config",
    "LedgerError",
    "VmError",
    "BlockEnv",
    "Contract",
    "Host",
    "external",
]
