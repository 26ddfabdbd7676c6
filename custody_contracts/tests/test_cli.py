from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from typer.testing import CliRunner

from custody_contracts.cli.main import app
from custody_contracts.tools.demo import UNIT
from custody_vm import __version__
from custody_vm.config import load_config

runner = CliRunner()

# rich sizes tables from COLUMNS when stdout is not a terminal
WIDE = {"COLUMNS": "200"}


def _write(tmp_path: Path, payload: Any, name: str = "script.json") -> str:
    p = tmp_path / name
    p.write_text(payload if isinstance(payload, str) else json.dumps(payload), encoding="utf-8")
    return str(p)


def test_version() -> None:
    result = runner.invoke(app, ["version"])
    assert result.exit_code == 0
    assert result.stdout.strip() == __version__


def test_compare_json() -> None:
    result = runner.invoke(app, ["compare", "--amount", "10", "--json"])
    assert result.exit_code == 0, result.output
    data = json.loads(result.stdout)
    assert data["amount"] == 10
    assert data["equivalent"] is True
    assert [row["op"] for row in data["operations"]] == ["mint", "transfer", "transfer_from", "burn"]
    assert all(row["saved"] >= 0 for row in data["operations"])


def test_compare_table() -> None:
    result = runner.invoke(app, ["compare"], env=WIDE)
    assert result.exit_code == 0, result.output
    assert "transfer_from" in result.stdout
    assert "Same functionality: yes" in result.stdout


def test_replay_json(tmp_path: Path) -> None:
    script = _write(
        tmp_path,
        [
            {"op": "mint", "caller": "owner", "to": "alice", "amount": 50},
            {"op": "transfer", "caller": "alice", "to": "bob", "amount": 80},
            {"op": "transfer", "caller": "alice", "to": "bob", "amount": 20},
        ],
    )
    result = runner.invoke(app, ["replay", script, "--json"])
    assert result.exit_code == 0, result.output
    report = json.loads(result.stdout)
    assert report["agree"] is True
    assert [s["error"] for s in report["packed"]["steps"]] == [None, "INSUFFICIENT_BALANCE", None]
    assert sorted(report["standard"]["state"]["balances"].values()) == [20, 30]


def test_replay_table(tmp_path: Path) -> None:
    script = _write(tmp_path, {"steps": [{"op": "pause", "caller": "owner"}]})
    result = runner.invoke(app, ["replay", script], env=WIDE)
    assert result.exit_code == 0, result.output
    assert "Layouts agree: yes" in result.stdout


def test_replay_rejects_bad_input(tmp_path: Path) -> None:
    broken = _write(tmp_path, "{not json", name="broken.json")
    result = runner.invoke(app, ["replay", broken])
    assert result.exit_code == 2
    assert "Error (input)" in result.output

    unknown = _write(tmp_path, [{"op": "teleport", "caller": "owner"}], name="unknown.json")
    result = runner.invoke(app, ["replay", unknown])
    assert result.exit_code == 2
    assert "Error (script)" in result.output


def test_replay_missing_file(tmp_path: Path) -> None:
    result = runner.invoke(app, ["replay", str(tmp_path / "nope.json")])
    assert result.exit_code != 0


def test_pool_demo_json() -> None:
    result = runner.invoke(app, ["pool-demo", "--json"])
    assert result.exit_code == 0, result.output
    rows = json.loads(result.stdout)
    assert len(rows) == 8
    last_ok = rows[5]
    assert last_ok["ok"] is True
    assert (last_ok["alice"], last_ok["bob"], last_ok["total"]) == (0, 200 * UNIT, 200 * UNIT)
    assert last_ok["custody"] == last_ok["total"]
    assert [r["error"] for r in rows[6:]] == ["INVALID_AMOUNT", "INSUFFICIENT_BALANCE"]
    assert rows[-1]["total"] == 200 * UNIT


def test_pool_demo_table() -> None:
    result = runner.invoke(app, ["pool-demo"], env=WIDE)
    assert result.exit_code == 0, result.output
    assert "INSUFFICIENT_BALANCE" in result.stdout


def test_log_level_option() -> None:
    result = runner.invoke(app, ["--log-level", "WARNING", "--log-text", "version"])
    assert result.exit_code == 0
    assert __version__ in result.stdout


def test_logging_follows_environment(monkeypatch) -> None:
    monkeypatch.setenv("CUSTODY_LOG_LEVEL", "DEBUG")
    monkeypatch.setenv("CUSTODY_LOG_FORMAT", "text")
    monkeypatch.setenv("CUSTODY_CHAIN_ID", "1337")
    load_config.cache_clear()
    result = runner.invoke(app, ["pool-demo", "--json"])
    assert result.exit_code == 0, result.output
    assert "call committed" in result.output
    assert "chain_id=1337" in result.output
    assert "configuration loaded" in result.output


def test_log_level_option_overrides_environment(monkeypatch) -> None:
    monkeypatch.setenv("CUSTODY_LOG_LEVEL", "DEBUG")
    load_config.cache_clear()
    result = runner.invoke(app, ["--log-level", "WARNING", "pool-demo", "--json"])
    assert result.exit_code == 0, result.output
    assert "call committed" not in result.output
