"""Cache-trace parser — one JSON object per prompt-cache pipeline stage."""

from __future__ import annotations

from typing import Any

from clawlog.db.models import Event, truncate_preview
from clawlog.ingest.base import BaseParser, SourceType


class CacheTraceParser(BaseParser):
    """Parse ``cache-trace.jsonl`` records.

    Required fields: ``ts`` (string), ``seq`` (number), ``stage`` (string).
    The event type is ``cache:<stage>``. The preview prefers ``note``, then
    ``error`` (as ``error: <msg>``), then ``messageCount`` (as ``messages: <n>``).
    """

    source_type = SourceType.CACHE_TRACE

    def parse_line(self, line: str, source_file: str) -> Event | None:
        entry = self.load_object(line)
        if entry is None or not _is_cache_trace(entry):
            return None

        return Event(
            ts=self.timestamp_or_now(entry["ts"]),
            source_type=self.source_type,
            source_file=source_file,
            event_type=f"cache:{entry['stage']}",
            session_id=_opt_str(entry.get("sessionId")),
            run_id=_opt_str(entry.get("runId")),
            provider=_opt_str(entry.get("provider")),
            model_id=_opt_str(entry.get("modelId")),
            message_preview=truncate_preview(_preview(entry)),
            raw_json=line,
        )


def _is_cache_trace(entry: dict[str, Any]) -> bool:
    seq = entry.get("seq")
    return (
        isinstance(entry.get("ts"), str)
        and isinstance(seq, (int, float))
        and not isinstance(seq, bool)
        and isinstance(entry.get("stage"), str)
    )


def _preview(entry: dict[str, Any]) -> str | None:
    if entry.get("note"):
        return str(entry["note"])
    if entry.get("error"):
        return f"error: {entry['error']}"
    if entry.get("messageCount") is not None:
        return f"messages: {entry['messageCount']}"
    return None


def _opt_str(value: Any) -> str | None:
    return value if isinstance(value, str) else None
