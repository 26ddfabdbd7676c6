"""
custody-ledger — command-line driver for the custody ledger contracts.

Commands:
  custody-ledger compare [--amount N] [--json]   storage accesses per token layout
  custody-ledger replay SCRIPT.json [--json]     replay an op script on both layouts
  custody-ledger pool-demo [--json]              deposit/withdraw walk-through
  custody-ledger version

Global options:
  --log-level TEXT        log level for custody_* loggers on stderr
                          (default: CUSTODY_LOG_LEVEL, else WARNING)
  --log-json/--log-text  log record format (default: CUSTODY_LOG_FORMAT or TTY)
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List, Optional

import typer
from rich import box
from rich.console import Console
from rich.table import Table

from custody_vm import __version__
from custody_vm import logging as clog
from custody_vm.config import load_config
from custody_vm.errors import LedgerError, VmError

from ..tools.compare import DEFAULT_AMOUNT, compare_all, verify_equivalence
from ..tools.demo import run_pool_demo
from ..tools.replay import ScriptError, compare_script

log = clog.get_logger(__name__)

app = typer.Typer(
    name="custody-ledger",
    help="Custody ledger: token layout comparison, replay and pool demo",
    no_args_is_help=True,
    add_completion=False,
)


def _pretty(obj: Any) -> str:
    return json.dumps(obj, indent=2, ensure_ascii=False)


def _console() -> Console:
    return Console(highlight=False, soft_wrap=True)


@app.callback()
def main_callback(
    log_level: Optional[str] = typer.Option(
        None,
        "--log-level",
        help="Log level (DEBUG, INFO, WARNING, ...); overrides CUSTODY_LOG_LEVEL",
    ),
    log_json: Optional[bool] = typer.Option(None, "--log-json/--log-text", help="Log record format"),
) -> None:
    cfg = load_config()
    if log_level:
        cfg = cfg.with_overrides(log_level=log_level.upper())
    if log_json is not None:
        cfg = cfg.with_overrides(log_format="json" if log_json else "text")
    clog.configure_from_config(cfg)
    log.debug("configuration loaded", extra=cfg.as_dict())


@app.command()
def compare(
    amount: int = typer.Option(DEFAULT_AMOUNT, "--amount", min=0, help="Amount per measured call (base units)"),
    as_json: bool = typer.Option(False, "--json", help="Output JSON"),
) -> None:
    """Count storage reads/writes of mint, transfer, transfer_from and burn per layout."""
    try:
        rows = compare_all(amount)
        check = verify_equivalence(amount)
    except LedgerError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)

    if as_json:
        typer.echo(_pretty({"amount": amount, "operations": [r.to_dict() for r in rows], "equivalent": check["equal"]}))
    else:
        t = Table(title="Storage accesses per operation", box=box.SIMPLE)
        t.add_column("operation")
        t.add_column("standard r/w", justify="right")
        t.add_column("packed r/w", justify="right")
        t.add_column("saved", justify="right")
        t.add_column("savings %", justify="right")
        for r in rows:
            t.add_row(
                r.op,
                f"{r.standard.reads}/{r.standard.writes}",
                f"{r.packed.reads}/{r.packed.writes}",
                str(r.saved),
                f"{r.savings_pct:.2f}",
            )
        console = _console()
        console.print(t)
        console.print(f"Same functionality: {'yes' if check['equal'] else 'NO'}")

    if not check["equal"]:
        raise typer.Exit(1)


@app.command()
def replay(
    script: Path = typer.Argument(..., exists=True, dir_okay=False, readable=True, help="JSON op script"),
    as_json: bool = typer.Option(False, "--json", help="Output JSON"),
) -> None:
    """Replay SCRIPT on both token layouts and report whether they agree."""
    try:
        data = json.loads(script.read_text(encoding="utf-8"))
        report = compare_script(data)
    except (ValueError, VmError, LedgerError) as e:
        # json.JSONDecodeError and ScriptError are both ValueErrors
        kind = "script" if isinstance(e, ScriptError) else "input"
        typer.echo(f"Error ({kind}): {e}", err=True)
        raise typer.Exit(2)

    if as_json:
        typer.echo(_pretty(report))
    else:
        console = _console()
        t = Table(title="Steps", box=box.SIMPLE)
        t.add_column("#", justify="right")
        t.add_column("op")
        t.add_column("standard")
        t.add_column("packed")
        for s_std, s_pk in zip(report["standard"]["steps"], report["packed"]["steps"]):
            t.add_row(str(s_std["index"]), s_std["op"], s_std["error"] or "ok", s_pk["error"] or "ok")
        console.print(t)

        b = Table(title="Final balances", box=box.SIMPLE)
        b.add_column("principal")
        b.add_column("balance", justify="right")
        for p, v in report["standard"]["state"]["balances"].items():
            b.add_row(p, str(v))
        console.print(b)
        console.print(f"total supply: {report['standard']['state']['total_supply']}")
        console.print(f"events: {report['standard']['events']}")
        console.print(f"Layouts agree: {'yes' if report['agree'] else 'NO'}")

    if not report["agree"]:
        raise typer.Exit(1)


@app.command("pool-demo")
def pool_demo(as_json: bool = typer.Option(False, "--json", help="Output JSON")) -> None:
    """Walk a DepositPool through deposits, withdrawals and two rejected calls."""
    rows: List[Dict[str, Any]] = run_pool_demo()
    if as_json:
        typer.echo(_pretty(rows))
        return
    t = Table(title="DepositPool", box=box.SIMPLE)
    for col in ("step", "result", "alice", "bob", "total", "custody"):
        t.add_column(col, justify="left" if col == "step" else "right")
    for r in rows:
        t.add_row(
            r["step"],
            "ok" if r["ok"] else r["error"],
            str(r["alice"]),
            str(r["bob"]),
            str(r["total"]),
            str(r["custody"]),
        )
    _console().print(t)


@app.command()
def version() -> None:
    """Print the package version."""
    typer.echo(__version__)


def main() -> None:
    """Entry point for the custody-ledger CLI."""
    app()


if __name__ == "__main__":
    main()
