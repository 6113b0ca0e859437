"""Domain models for the event store."""

from __future__ import annotations

from dataclasses import dataclass

MAX_PREVIEW_CHARS = 500


@dataclass
class TrackedFile:
    path: str
    source_type: str
    byte_offset: int = 0
    file_size: int = 0
    last_seen_at: int | None = None  # epoch ms; set by the store on upsert


@dataclass
class Event:
    """One parsed log line, normalised across all source types.

    ``raw_json`` is always the source line verbatim so events can be
    re-derived if the schema changes.
    """

    ts: str
    source_type: str
    source_file: str
    event_type: str
    raw_json: str
    level: str | None = None
    session_id: str | None = None
    agent_id: str | None = None
    run_id: str | None = None
    provider: str | None = None
    model_id: str | None = None
    role: str | None = None
    message_preview: str | None = None
    ingested_at: int | None = None  # epoch ms; set by the store on insert
    id: int | None = None  # set after insert


def truncate_preview(text: str | None) -> str | None:
    """Clip a message preview to MAX_PREVIEW_CHARS characters."""
    if text is None:
        return None
    return text[:MAX_PREVIEW_CHARS]
