"""
custody_vm.runtime.host — owns ledger state and runs every call atomically.

A `Host` is the single owner of all contract state: a shared `Journal`, the
`AccessStats` counters, the ordered `EventSink` and the current `BlockEnv`.
Contracts are deployed onto a host and receive a `Storage` view bound to their
own address.

Atomicity
---------
Every public mutating contract method is wrapped by `external`, which runs it
inside `Host.atomic()`:

    checkpoint = journal.begin(); mark = events.mark()
    try:    run the method           → journal.commit()
    except: journal.revert(); events.truncate(mark); re-raise

Because all contracts on a host share the journal, a failure in an outer call
also discards whatever nested calls into other contracts (e.g. the asset
token) committed on its behalf. Reentrant calls simply nest checkpoints.

There is no concurrency: a host serializes calls and the caller identity is
always an explicit argument supplied by the boundary layer.
"""

from __future__ import annotations

import functools
import hashlib
from contextlib import ExitStack, contextmanager
from typing import Any, Callable, Dict, Iterator, Optional, Type, TypeVar, Union

from custody_vm import logging as clog
from custody_vm.config import LedgerConfig, load_config
from custody_vm.errors import InvalidAddress

from .context import BlockEnv, derive_address, is_zero_address, zero_address
from .events_api import Event, EventSink
from .journal import Journal
from .storage_api import AccessStats, Storage

log = clog.get_logger(__name__)

C = TypeVar("C", bound="Contract")
F = TypeVar("F", bound=Callable[..., Any])


class Host:
    """
    In-process execution host.

    Parameters
    ----------
    config : LedgerConfig | None
        Limits and address width; `load_config()` when omitted.
    block : BlockEnv | None
        Initial block environment; genesis from config when omitted.
    """

    def __init__(self, config: Optional[LedgerConfig] = None, *, block: Optional[BlockEnv] = None) -> None:
        self.config = config or load_config()
        self.journal = Journal()
        self.stats = AccessStats()
        self.events = EventSink(max_events_per_call=self.config.max_events_per_call)
        self.block = block or BlockEnv(
            height=0,
            timestamp=self.config.genesis_timestamp,
            chain_id=self.config.chain_id,
        )
        self.zero_address = zero_address(self.config.address_len)
        self._nonce = 0

    # ------------------------------------------------------------------ #
    # Principals & environment
    # ------------------------------------------------------------------ #

    def address(self, label: Union[str, bytes]) -> bytes:
        """Deterministic principal for a label (e.g. "alice")."""
        return derive_address(label, self.config.address_len)

    def advance(self, seconds: int = 1, blocks: int = 1) -> BlockEnv:
        self.block = self.block.advanced(seconds, blocks)
        return self.block

    def set_block(self, *, height: Optional[int] = None, timestamp: Optional[int] = None) -> BlockEnv:
        self.block = BlockEnv(
            height=self.block.height if height is None else height,
            timestamp=self.block.timestamp if timestamp is None else timestamp,
            chain_id=self.block.chain_id,
        )
        return self.block

    # ------------------------------------------------------------------ #
    # Contracts
    # ------------------------------------------------------------------ #

    def storage_for(self, address: bytes) -> Storage:
        return Storage(
            self.journal,
            address,
            self.stats,
            max_key_bytes=self.config.max_storage_key_bytes,
            max_value_bytes=self.config.max_storage_value_bytes,
        )

    def deploy(self, cls: Type[C], **kwargs: Any) -> C:
        """
        Instantiate `cls` at a fresh deterministic address. The constructor
        runs atomically: a failing constructor leaves no state behind.
        """
        self._nonce += 1
        seed = b"custody-deploy|" + self._nonce.to_bytes(8, "big")
        addr = hashlib.sha3_256(seed).digest()[: self.config.address_len]
        with self.atomic(f"deploy:{cls.__name__}"):
            contract = cls(self, addr, **kwargs)
        log.debug("contract deployed", extra={"contract": cls.__name__, "address": addr})
        return contract

    # ------------------------------------------------------------------ #
    # Atomic execution
    # ------------------------------------------------------------------ #

    @contextmanager
    def atomic(self, label: str = "call") -> Iterator[int]:
        """
        Run the enclosed block as one all-or-nothing unit. Yields the
        checkpoint depth (1 for a top-level call, >1 when reentered).

        A top-level call runs under its own log trace_id unless the caller
        already bound one; nested calls share it.
        """
        with ExitStack() as scope:
            if self.journal.depth() == 0:
                self.events.begin_call()
                if "trace_id" not in clog.context():
                    scope.enter_context(clog.trace_scope())
            depth = self.journal.begin()
            mark = self.events.mark()
            try:
                yield depth
            except BaseException as exc:
                self.journal.revert()
                self.events.truncate(mark)
                log.debug(
                    "call reverted",
                    extra={"call": label, "depth": depth, "error": getattr(exc, "code", type(exc).__name__)},
                )
                raise
            self.journal.commit()
            log.debug("call committed", extra={"call": label, "depth": depth, "events": len(self.events) - mark})


class Contract:
    """
    Base class for contracts deployed on a `Host`.

    Subclasses receive `host` and `address` from `Host.deploy` and use
    `self.storage` / `self._emit` for all state and logs.
    """

    def __init__(self, host: Host, address: bytes) -> None:
        self.host = host
        self.address = bytes(address)
        self.storage = host.storage_for(self.address)

    @property
    def zero_address(self) -> bytes:
        return self.host.zero_address

    @property
    def now(self) -> int:
        return self.host.block.timestamp

    def _emit(self, name: bytes, args: Dict[str, Any]) -> Event:
        return self.host.events.emit(self.address, name, args)

    def _require_address(self, addr: Any, *, what: str = "address", allow_zero: bool = True) -> bytes:
        n = self.host.config.address_len
        if not isinstance(addr, (bytes, bytearray)) or len(addr) != n:
            raise InvalidAddress(f"{what} must be {n} bytes", data={"field": what})
        if not allow_zero and is_zero_address(addr):
            raise InvalidAddress(f"{what} must not be the zero address", data={"field": what})
        return bytes(addr)

    def events(self, name: Optional[bytes] = None) -> list[Event]:
        return self.host.events.events(self.address, name)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(address=0x{self.address.hex()})"


def external(fn: F) -> F:
    """Mark a contract method as a public mutating entrypoint (atomic)."""

    @functools.wraps(fn)
    def wrapper(self: Contract, *args: Any, **kwargs: Any) -> Any:
        with self.host.atomic(f"{type(self).__name__}.{fn.__name__}"):
            return fn(self, *args, **kwargs)

    return wrapper  # type: ignore[return-value]


__all__ = ["Host", "Contract", "external"]
