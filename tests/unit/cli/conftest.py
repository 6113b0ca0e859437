"""Fixtures isolating CLI tests from the user's config and environment."""

from __future__ import annotations

import json

import pytest


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """No global config, no clawlog.yaml in CWD, no CLAWLOG_* env vars."""
    monkeypatch.setattr("clawlog.config._GLOBAL_CONFIG_PATH", tmp_path / "no-global" / "config.yaml")
    work = tmp_path / "cwd"
    work.mkdir()
    monkeypatch.chdir(work)
    for var in ("CLAWLOG_STATE_DIR", "CLAWLOG_DB_PATH", "CLAWLOG_LOG_LEVEL"):
        monkeypatch.delenv(var, raising=False)


@pytest.fixture
def state(tmp_path):
    """A small OpenClaw state directory with one session and one cache trace."""
    root = tmp_path / "openclaw"
    sessions = root / "agents" / "main" / "sessions"
    sessions.mkdir(parents=True)
    (root / "logs").mkdir()
    (sessions / "s1.jsonl").write_text(
        json.dumps({"type": "session", "version": 3, "id": "s1"})
        + "\n"
        + json.dumps({"type": "message", "message": {"role": "user", "content": "hi"}})
        + "\n",
        encoding="utf-8",
    )
    (root / "logs" / "cache-trace.jsonl").write_text(
        json.dumps({"ts": "2026-01-01T00:00:00Z", "seq": 1, "stage": "init"}) + "\n",
        encoding="utf-8",
    )
    return root
