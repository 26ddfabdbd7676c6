from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from custody_vm.errors import VmError

# Basic bounds (kept generous; tests only check that we *validate*).
MAX_EVENT_NAME_BYTES = 64
MAX_KEY_LEN = 64
MAX_BYTES_LEN = 4096
MAX_INT_BITS = 256

# Keys must be identifier-like: letters/underscore, then letters/digits/underscore.
_KEY_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")

ArgValue = Any  # constrained at runtime


@dataclass(frozen=True)
class Event:
    """An emitted event: emitting contract, name and validated args."""

    address: bytes
    name: bytes
    args: Dict[str, ArgValue]

    def key(self) -> Tuple[bytes, Tuple[Tuple[str, ArgValue], ...]]:
        """Address-independent identity, used to compare two ledgers' logs."""
        return self.name, tuple(self.args.items())


@dataclass
class CanonicalEvent:
    """
    Canonical event representation for receipts:

        address: "0x" + hex address
        name: "0x" + hex-encoded event name bytes
        args: sequence of {"k", "t", "v"} dicts
              t="b" => bytes encoded as 0x-prefixed hex
              t="i" => integer
              t="z" => boolean
    """

    address: str
    name: str
    args: Sequence[Mapping[str, Any]]


class EventSink:
    """
    Append-only, ordered event log owned by one host.

    `mark()` returns the current length and `truncate(mark)` drops everything
    emitted after it, which is how a reverted call's events disappear.
    """

    def __init__(self, *, max_events_per_call: int = 1024) -> None:
        self._events: List[Event] = []
        self._max_per_call = int(max_events_per_call)
        self._call_start = 0

    # --- Validation helpers -------------------------------------------------

    def _check_name(self, name: Any) -> bytes:
        if not isinstance(name, (bytes, bytearray)):
            raise VmError(
                "event name must be bytes",
                code="event_invalid",
                context={"where": "name_type"},
            )
        b = bytes(name)
        if len(b) == 0:
            raise VmError(
                "event name must be non-empty",
                code="event_invalid",
                context={"where": "name_empty"},
            )
        if len(b) > MAX_EVENT_NAME_BYTES:
            raise VmError(
                "event name too long",
                code="event_invalid",
                context={"where": "name_length", "len": len(b)},
            )
        return b

    def _check_key(self, key: Any) -> str:
        if not isinstance(key, str) or not key:
            raise VmError(
                "event key must be a non-empty str",
                code="event_invalid",
                context={"where": "key_type"},
            )
        if len(key) > MAX_KEY_LEN:
            raise VmError(
                "event key too long",
                code="event_invalid",
                context={"where": "key_length", "len": len(key)},
            )
        if not _KEY_RE.match(key):
            raise VmError(
                "event key has invalid characters",
                code="event_invalid",
                context={"where": "key_grammar", "key": key},
            )
        return key

    def _check_value(self, value: Any) -> ArgValue:
        if isinstance(value, (bytes, bytearray)):
            b = bytes(value)
            if len(b) > MAX_BYTES_LEN:
                raise VmError(
                    "event bytes arg too long",
                    code="event_invalid",
                    context={"where": "value_bytes_length", "len": len(b)},
                )
            return b

        if isinstance(value, bool):
            # bool is a subclass of int, so check it before int.
            return value

        if isinstance(value, int):
            if value.bit_length() > MAX_INT_BITS:
                raise VmError(
                    "event int arg out of range",
                    code="event_invalid",
                    context={"where": "value_int_bits", "bits": value.bit_length()},
                )
            return int(value)

        raise VmError(
            "unsupported event arg type",
            code="event_invalid",
            context={"where": "value_type", "py_type": type(value).__name__},
        )

    # --- Core sink operations -----------------------------------------------

    def begin_call(self) -> int:
        """Start a top-level call; the per-call cap counts from here."""
        self._call_start = len(self._events)
        return self._call_start

    def emit(self, address: bytes, name: bytes, args: Mapping[Any, Any]) -> Event:
        bname = self._check_name(name)

        if not isinstance(args, Mapping):
            raise VmError(
                "event args must be a mapping",
                code="event_invalid",
                context={"where": "args_type"},
            )
        if len(self._events) - self._call_start >= self._max_per_call:
            raise VmError(
                "too many events in one call",
                code="event_invalid",
                context={"where": "per_call_cap", "cap": self._max_per_call},
            )

        checked_args: Dict[str, ArgValue] = {}
        for raw_k, raw_v in args.items():
            checked_args[self._check_key(raw_k)] = self._check_value(raw_v)

        ev = Event(bytes(address), bname, checked_args)
        self._events.append(ev)
        return ev

    def mark(self) -> int:
        return len(self._events)

    def truncate(self, mark: int) -> None:
        if mark < 0 or mark > len(self._events):
            raise VmError("event mark out of range", code="event_invalid", context={"mark": mark})
        del self._events[mark:]

    def __len__(self) -> int:
        return len(self._events)

    def events(self, address: Optional[bytes] = None, name: Optional[bytes] = None) -> List[Event]:
        """Snapshot of the log, optionally filtered by emitter and/or name."""
        out = list(self._events)
        if address is not None:
            out = [e for e in out if e.address == bytes(address)]
        if name is not None:
            out = [e for e in out if e.name == bytes(name)]
        return out

    def events_for_receipt(self, address: Optional[bytes] = None) -> List[CanonicalEvent]:
        """
        Convert the log into canonical receipt events.
        """
        out: List[CanonicalEvent] = []
        for ev in self.events(address):
            enc_args: List[Dict[str, Any]] = []
            for k, v in ev.args.items():
                if isinstance(v, bytes):
                    enc_args.append({"k": k, "t": "b", "v": "0x" + v.hex()})
                elif isinstance(v, bool):
                    enc_args.append({"k": k, "t": "z", "v": v})
                else:
                    enc_args.append({"k": k, "t": "i", "v": int(v)})
            out.append(
                CanonicalEvent(
                    address="0x" + ev.address.hex(),
                    name="0x" + ev.name.hex(),
                    args=tuple(enc_args),
                )
            )
        return out


__all__ = [
    "Event",
    "CanonicalEvent",
    "EventSink",
    "MAX_EVENT_NAME_BYTES",
    "MAX_KEY_LEN",
    "MAX_BYTES_LEN",
    "MAX_INT_BITS",
]
