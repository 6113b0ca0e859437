"""Tests for watched path patterns."""

from __future__ import annotations

from pathlib import Path

import pytest

from clawlog.ingest.base import SourceType
from clawlog.watch.patterns import (
    WatchedPath,
    absolute_path,
    classify,
    has_wildcard,
    matches_pattern,
    pattern_base_dir,
    resolve_pattern,
    resolve_watched_files,
)


# ---------------------------------------------------------------------------
# matches_pattern
# ---------------------------------------------------------------------------


@pytest.mark.parametrize(
    ("path", "pattern", "expected"),
    [
        ("/s/agents/a/sessions/x.jsonl", "/s/agents/**/sessions/*.jsonl", True),
        ("/s/agents/a/b/sessions/x.jsonl", "/s/agents/**/sessions/*.jsonl", True),
        ("/s/agents/sessions/x.jsonl", "/s/agents/**/sessions/*.jsonl", True),
        ("/s/agents/a/sessions/x.json", "/s/agents/**/sessions/*.jsonl", False),
        ("/s/agents/a/sessions/sub/x.jsonl", "/s/agents/**/sessions/*.jsonl", False),
        ("/l/openclaw-2026-01-01.log", "/l/openclaw-*.log", True),
        ("/l/other.log", "/l/openclaw-*.log", False),
        ("/l/a/openclaw-1.log", "/l/openclaw-*.log", False),
        ("/l/a1.log", "/l/a?.log", True),
        ("/l/a12.log", "/l/a?.log", False),
        ("/l/deep/x/y.log", "/l/**", True),
        ("/l/cache-trace.jsonl", "/l/cache-trace.jsonl", True),
        ("/l/cache-trace.jsonl.1", "/l/cache-trace.jsonl", False),
        ("/l/dir/file.log", "/l/dir", True),
        ("/l/dirx/file.log", "/l/dir", False),
        ("/l/a.b", "/l/a.b", True),
        ("/l/axb", "/l/a.b", False),
    ],
)
def test_matches_pattern(path, pattern, expected):
    assert matches_pattern(path, pattern) is expected


def test_backslashes_normalized():
    assert matches_pattern("C:\\s\\logs\\openclaw-1.log", "C:/s/logs/openclaw-*.log")


def test_has_wildcard():
    assert has_wildcard("/a/*.log")
    assert has_wildcard("/a/?.log")
    assert not has_wildcard("/a/b.log")


def test_pattern_base_dir():
    assert pattern_base_dir("/s/agents/**/sessions/*.jsonl") == Path("/s/agents")
    assert pattern_base_dir("/s/logs/cache-trace.jsonl") == Path("/s/logs/cache-trace.jsonl")


# ---------------------------------------------------------------------------
# classify
# ---------------------------------------------------------------------------


def test_classify_first_match_wins():
    watched = [
        WatchedPath("/s/logs/*.jsonl", SourceType.CACHE_TRACE),
        WatchedPath("/s/**", SourceType.SESSION),
    ]
    assert classify("/s/logs/cache-trace.jsonl", watched) is SourceType.CACHE_TRACE
    assert classify("/s/other/x.jsonl", watched) is SourceType.SESSION
    assert classify("/elsewhere/x.jsonl", watched) is None


# ---------------------------------------------------------------------------
# Resolution against the file system
# ---------------------------------------------------------------------------


def _touch(path: Path) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text("", encoding="utf-8")
    return path


def test_resolve_pattern_recursive(tmp_path):
    a = _touch(tmp_path / "agents" / "a" / "sessions" / "1.jsonl")
    b = _touch(tmp_path / "agents" / "b" / "sessions" / "2.jsonl")
    _touch(tmp_path / "agents" / "b" / "sessions" / "notes.txt")
    found = resolve_pattern(str(tmp_path / "agents" / "**" / "sessions" / "*.jsonl"))
    assert found == sorted([str(a), str(b)])


def test_resolve_exact_file(tmp_path):
    f = _touch(tmp_path / "logs" / "cache-trace.jsonl")
    assert resolve_pattern(str(f)) == [str(f)]


def test_resolve_exact_directory(tmp_path):
    f = _touch(tmp_path / "logs" / "x.log")
    assert resolve_pattern(str(tmp_path / "logs")) == [str(f)]


def test_resolve_missing_base(tmp_path):
    assert resolve_pattern(str(tmp_path / "missing" / "*.log")) == []
    assert resolve_pattern(str(tmp_path / "missing.log")) == []


def test_resolve_watched_files_dedupes(tmp_path):
    f = _touch(tmp_path / "logs" / "cache-trace.jsonl")
    watched = [
        WatchedPath(str(f), SourceType.CACHE_TRACE),
        WatchedPath(str(tmp_path / "logs" / "*.jsonl"), SourceType.SESSION),
    ]
    resolved = resolve_watched_files(watched)
    assert len(resolved) == 1
    assert resolved[0].source_type is SourceType.CACHE_TRACE


def test_absolute_path(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    assert absolute_path("logs/a.log") == str(tmp_path / "logs" / "a.log")
    assert absolute_path("agents/**/*.jsonl") == str(tmp_path / "agents" / "**" / "*.jsonl")
    assert absolute_path("~/x") == str(Path.home() / "x")
    assert absolute_path("/a/../b") == "/b"
