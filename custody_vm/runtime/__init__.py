"""
custody_vm.runtime — host-facing runtime pieces.

Convenience re-exports live here so callers can do:

    from custody_vm.runtime import Host, Contract, external, BlockEnv
    from custody_vm.runtime import journal, storage, events  # module namespaces

Notes
-----
- All state lives on an explicit `Host`; nothing here is module-global.
- No wall-clock I/O is exposed: time comes from `BlockEnv` only.
"""

from __future__ import annotations

from . import events_api as events
from . import journal as journal
from . import storage_api as storage
from .context import BlockEnv, derive_address, is_zero_address, to_bytes, to_hex, zero_address
from .events_api import CanonicalEvent, Event, EventSink
from .host import Contract, Host, external
from .journal import Journal
from .storage_api import AccessCounts, AccessStats, Storage

__all__ = [
    "events",
    "journal",
    "storage",
    "BlockEnv",
    "derive_address",
    "is_zero_address",
    "to_bytes",
    "to_hex",
    "zero_address",
    "CanonicalEvent",
    "Event",
    "EventSink",
    "Contract",
    "Host",
    "external",
    "Journal",
    "AccessCounts",
    "AccessStats",
    "Storage",
]
