# -*- coding: utf-8 -*-
"""
replay.py
=========

Run a scripted sequence of token operations against both layouts and report
whether they agree.

Script format (JSON)
--------------------
Either a bare list of steps, or an object::

    {
      "owner": "owner",                 # principal that deploys/mints
      "max_supply": 1000000,
      "steps": [
        {"op": "mint", "caller": "owner", "to": "alice", "amount": 500},
        {"op": "approve", "caller": "alice", "spender": "bob", "amount": 100},
        {"op": "transfer_from", "caller": "bob", "owner": "alice", "to": "carol", "amount": 60},
        {"op": "transfer", "caller": "alice", "to": "bob", "amount": 10},
        {"op": "burn", "caller": "alice", "amount": 5},
        {"op": "pause", "caller": "owner"},
        {"op": "unpause", "caller": "owner"},
        {"op": "advance", "seconds": 12}
      ]
    }

Principals are either 0x-prefixed hex addresses or names; names map to
deterministic addresses (``Host.address(name)``), and ``"zero"`` is the zero
address. A failing step is recorded with its error code and the replay
continues, since every call is atomic.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple, Type, Union

from custody_vm.config import LedgerConfig
from custody_vm.errors import LedgerError
from custody_vm.runtime import Host, to_bytes

from ..token import DEFAULT_MAX_SUPPLY, PackedToken, StandardToken, TokenBase

# op -> ordered argument names (after caller)
STEP_ARGS: Dict[str, Tuple[str, ...]] = {
    "transfer": ("to", "amount"),
    "approve": ("spender", "amount"),
    "transfer_from": ("owner", "to", "amount"),
    "mint": ("to", "amount"),
    "burn": ("amount",),
    "pause": (),
    "unpause": (),
}
# fixed order: principals_of reports first-seen principals in this order per step
_PRINCIPAL_ARGS: Tuple[str, ...] = ("caller", "owner", "spender", "to")


class ScriptError(ValueError):
    """Malformed replay script."""


@dataclass
class StepResult:
    index: int
    op: str
    ok: bool
    result: Any = None
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {"index": self.index, "op": self.op, "ok": self.ok, "result": self.result, "error": self.error}


@dataclass
class ReplayRun:
    host: Host
    token: TokenBase
    steps: List[StepResult] = field(default_factory=list)

    def event_keys(self) -> list:
        return [e.key() for e in self.token.events()]


def _principal(host: Host, value: Any) -> bytes:
    if isinstance(value, (bytes, bytearray)):
        return bytes(value)
    if not isinstance(value, str) or not value:
        raise ScriptError(f"principal must be a name or 0x-hex string, got {value!r}")
    if value == "zero":
        return host.zero_address
    if value.startswith(("0x", "0X")):
        return to_bytes(value)
    return host.address(value)


def normalize_script(script: Union[Sequence[Mapping[str, Any]], Mapping[str, Any]]) -> Dict[str, Any]:
    """Return {"owner", "max_supply", "steps"} with shape-checked steps."""
    if isinstance(script, Mapping):
        steps = script.get("steps")
        owner = script.get("owner", "owner")
        max_supply = script.get("max_supply", DEFAULT_MAX_SUPPLY)
    else:
        steps, owner, max_supply = script, "owner", DEFAULT_MAX_SUPPLY
    if not isinstance(steps, list):
        raise ScriptError("script steps must be a list")
    for i, step in enumerate(steps):
        if not isinstance(step, Mapping) or "op" not in step:
            raise ScriptError(f"step {i}: expected an object with an 'op' field")
        op = step["op"]
        if op == "advance":
            continue
        if op not in STEP_ARGS:
            raise ScriptError(f"step {i}: unknown op {op!r}")
        missing = [a for a in ("caller",) + STEP_ARGS[op] if a not in step]
        if missing:
            raise ScriptError(f"step {i}: missing {', '.join(missing)}")
    return {"owner": owner, "max_supply": max_supply, "steps": list(steps)}


def principals_of(host: Host, script: Mapping[str, Any]) -> List[bytes]:
    """Every principal a normalized script mentions, in first-seen order."""
    seen: List[bytes] = [_principal(host, script["owner"])]
    for step in script["steps"]:
        for k in _PRINCIPAL_ARGS:
            if k in step:
                p = _principal(host, step[k])
                if p not in seen:
                    seen.append(p)
    return seen


def run_script(
    script: Union[Sequence[Mapping[str, Any]], Mapping[str, Any]],
    variant: Type[TokenBase],
    *,
    config: Optional[LedgerConfig] = None,
) -> ReplayRun:
    norm = normalize_script(script)
    host = Host(config)
    token = host.deploy(variant, owner=_principal(host, norm["owner"]), max_supply=norm["max_supply"])
    run = ReplayRun(host=host, token=token)

    for i, step in enumerate(norm["steps"]):
        op = step["op"]
        if op == "advance":
            host.advance(int(step.get("seconds", 1)), int(step.get("blocks", 1)))
            run.steps.append(StepResult(i, op, True))
            continue
        args = [
            _principal(host, step[name]) if name in _PRINCIPAL_ARGS else step[name]
            for name in ("caller",) + STEP_ARGS[op]
        ]
        try:
            result = getattr(token, op)(*args)
        except LedgerError as e:
            run.steps.append(StepResult(i, op, False, error=e.code))
        else:
            run.steps.append(StepResult(i, op, True, result=result))
    return run


def _render_state(state: Mapping[str, Any]) -> Dict[str, Any]:
    return {
        "total_supply": state["total_supply"],
        "paused": state["paused"],
        "last_update": state["last_update"],
        "balances": {"0x" + p.hex(): v for p, v in state["balances"].items() if v},
        "allowances": {"0x" + o.hex() + ":0x" + s.hex(): v for (o, s), v in state["allowances"].items() if v},
    }


def compare_script(
    script: Union[Sequence[Mapping[str, Any]], Mapping[str, Any]],
    *,
    config: Optional[LedgerConfig] = None,
) -> Dict[str, Any]:
    """
    Replay `script` on both layouts.

    Per layout the report holds step outcomes, final state, the event count,
    the receipt-encoded logs and the final block. ``agree`` is True only when outcomes, state
    and the ``(name, args)`` event sequences all match.
    """
    norm = normalize_script(script)
    runs = {
        "standard": run_script(norm, StandardToken, config=config),
        "packed": run_script(norm, PackedToken, config=config),
    }
    report: Dict[str, Any] = {}
    states = {}
    for label, run in runs.items():
        principals = principals_of(run.host, norm)
        states[label] = run.token.state(principals)
        report[label] = {
            "steps": [s.to_dict() for s in run.steps],
            "state": _render_state(states[label]),
            "events": len(run.event_keys()),
            "logs": [asdict(e) for e in run.host.events.events_for_receipt(run.token.address)],
            "block": run.host.block.to_dict(),
        }
    std, packed = runs["standard"], runs["packed"]
    report["agree"] = (
        [s.to_dict() for s in std.steps] == [s.to_dict() for s in packed.steps]
        and states["standard"] == states["packed"]
        and std.event_keys() == packed.event_keys()
    )
    return report


__all__ = [
    "STEP_ARGS",
    "ScriptError",
    "StepResult",
    "ReplayRun",
    "normalize_script",
    "principals_of",
    "run_script",
    "compare_script",
]
