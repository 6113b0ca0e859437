"""Tests for CacheTraceParser."""

from __future__ import annotations

import json

import pytest

from clawlog.ingest.cache_trace import CacheTraceParser

SRC = "/state/logs/cache-trace.jsonl"


@pytest.fixture
def parser():
    return CacheTraceParser()


def _record(**kw):
    base = {"ts": "2026-01-01T00:00:00.000Z", "seq": 1, "stage": "prompt:before"}
    base.update(kw)
    return json.dumps(base)


def test_basic_record(parser):
    line = _record(sessionId="s1", runId="r1", provider="anthropic", modelId="claude")
    event = parser.parse_line(line, SRC)
    assert event.event_type == "cache:prompt:before"
    assert event.ts == "2026-01-01T00:00:00.000Z"
    assert event.source_type == "cache-trace"
    assert event.session_id == "s1"
    assert event.run_id == "r1"
    assert event.provider == "anthropic"
    assert event.model_id == "claude"
    assert event.raw_json == line


def test_preview_prefers_note(parser):
    event = parser.parse_line(_record(note="n", error="e", messageCount=3), SRC)
    assert event.message_preview == "n"


def test_preview_error(parser):
    event = parser.parse_line(_record(error="timeout", messageCount=3), SRC)
    assert event.message_preview == "error: timeout"


def test_preview_message_count(parser):
    event = parser.parse_line(_record(messageCount=0), SRC)
    assert event.message_preview == "messages: 0"


def test_preview_absent(parser):
    assert parser.parse_line(_record(), SRC).message_preview is None


@pytest.mark.parametrize(
    "record",
    [
        {"seq": 1, "stage": "x"},
        {"ts": "t", "stage": "x"},
        {"ts": "t", "seq": 1},
        {"ts": 5, "seq": 1, "stage": "x"},
        {"ts": "t", "seq": "1", "stage": "x"},
        {"ts": "t", "seq": True, "stage": "x"},
        {"ts": "t", "seq": 1, "stage": 3},
    ],
)
def test_rejects_missing_required_fields(parser, record):
    assert parser.parse_line(json.dumps(record), SRC) is None


def test_rejects_garbage(parser):
    assert parser.parse_line("{{{", SRC) is None


def test_session_loaded_stage(parser):
    line = (
        '{"ts":"2024-01-01T12:00:00.000Z","seq":1,"stage":"session:loaded",'
        '"runId":"run-123","messageCount":5}'
    )
    event = parser.parse_line(line, SRC)
    assert event.event_type == "cache:session:loaded"
    assert event.run_id == "run-123"
    assert event.message_preview == "messages: 5"
    assert event.ts == "2024-01-01T12:00:00.000Z"
