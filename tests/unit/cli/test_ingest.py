"""Tests for clawlog ingest."""

from __future__ import annotations

from pathlib import Path

import yaml
from typer.testing import CliRunner

from clawlog.cli.main import app
from clawlog.db.connection import Database
from clawlog.db.repository import EventStore

runner = CliRunner()


def _count(db: Path) -> int:
    with Database(db) as conn:
        return EventStore(conn).count_events()


def test_ingest_backfills_state_dir(state: Path) -> None:
    result = runner.invoke(app, ["ingest", "--state-dir", str(state)])
    assert result.exit_code == 0, result.output
    assert "Ingested 3 events" in result.output
    assert _count(state / "observability.db") == 3


def test_ingest_custom_db(state: Path, tmp_path: Path) -> None:
    db = tmp_path / "out" / "events.db"
    result = runner.invoke(app, ["ingest", "--state-dir", str(state), "--db", str(db)])
    assert result.exit_code == 0, result.output
    assert _count(db) == 3


def test_ingest_twice_adds_nothing(state: Path) -> None:
    runner.invoke(app, ["ingest", "--state-dir", str(state)])
    result = runner.invoke(app, ["ingest", "--state-dir", str(state)])
    assert result.exit_code == 0
    assert "Ingested 0 events" in result.output
    assert _count(state / "observability.db") == 3


def test_ingest_reads_project_config(state: Path, monkeypatch) -> None:
    Path("clawlog.yaml").write_text(yaml.dump({"state_dir": str(state)}), encoding="utf-8")
    result = runner.invoke(app, ["ingest"])
    assert result.exit_code == 0, result.output
    assert _count(state / "observability.db") == 3


def test_ingest_env_state_dir(state: Path, monkeypatch) -> None:
    monkeypatch.setenv("CLAWLOG_STATE_DIR", str(state))
    result = runner.invoke(app, ["ingest"])
    assert result.exit_code == 0, result.output
    assert _count(state / "observability.db") == 3


def test_ingest_invalid_config_exits_one(state: Path) -> None:
    Path("clawlog.yaml").write_text(yaml.dump({"store": {"batch_size": 0}}), encoding="utf-8")
    result = runner.invoke(app, ["ingest", "--state-dir", str(state)])
    assert result.exit_code == 1
    assert "Invalid configuration" in result.output


def test_ingest_missing_state_dir_warns(tmp_path: Path) -> None:
    missing = tmp_path / "nope"
    result = runner.invoke(app, ["ingest", "--state-dir", str(missing), "--db", str(tmp_path / "x.db")])
    assert result.exit_code == 0
    assert "Warning" in result.output


def test_ingest_relative_state_dir_tracks_absolute_paths(state: Path, monkeypatch) -> None:
    monkeypatch.chdir(state.parent)
    result = runner.invoke(app, ["ingest", "--state-dir", state.name])
    assert result.exit_code == 0, result.output
    with Database(state / "observability.db") as conn:
        paths = [r[0] for r in conn.execute("SELECT path FROM tracked_files")]
    assert paths
    assert all(Path(p).is_absolute() for p in paths)
