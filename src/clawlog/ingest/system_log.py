"""Runtime log parser — tslog-style JSON lines."""

from __future__ import annotations

from typing import Any

from clawlog.db.models import Event, truncate_preview
from clawlog.ingest.base import BaseParser, SourceType

LOG_LEVELS: dict[int, str] = {
    0: "silly",
    1: "trace",
    2: "debug",
    3: "info",
    4: "warn",
    5: "error",
    6: "fatal",
}


class SystemLogParser(BaseParser):
    """Parse structured runtime log lines.

    tslog writes metadata under ``_meta`` (``date``, ``logLevelId``,
    ``logLevelName``, ``name``) and the message as positional keys
    (``"0"``, ``"1"``, …). Flat records using ``date``, ``logLevel``,
    ``logLevelName``, ``subsystem``, ``message`` or ``msg`` are accepted too.
    Event type is ``log`` or ``log:<subsystem>``.
    """

    source_type = SourceType.SYSTEM_LOG

    def parse_line(self, line: str, source_file: str) -> Event | None:
        entry = self.load_object(line)
        if entry is None:
            return None

        meta = entry.get("_meta")
        if not isinstance(meta, dict):
            meta = {}

        subsystem = _subsystem(entry, meta)
        return Event(
            ts=self.timestamp_or_now(meta.get("date") or entry.get("date")),
            source_type=self.source_type,
            source_file=source_file,
            event_type=f"log:{subsystem}" if subsystem else "log",
            level=_level(entry, meta),
            message_preview=truncate_preview(_message(entry)),
            raw_json=line,
        )


def _level(entry: dict[str, Any], meta: dict[str, Any]) -> str | None:
    # Named level wins over the numeric id.
    for name in (meta.get("logLevelName"), entry.get("logLevelName")):
        if isinstance(name, str) and name:
            return name.lower()
    level_id = meta.get("logLevelId", entry.get("logLevel"))
    if isinstance(level_id, int) and not isinstance(level_id, bool):
        return LOG_LEVELS.get(level_id)
    return None


def _message(entry: dict[str, Any]) -> str | None:
    for key in ("message", "msg"):
        value = entry.get(key)
        if isinstance(value, str) and value:
            return value
    first = entry.get("0")
    if isinstance(first, str):
        return first
    if isinstance(first, dict) and isinstance(first.get("message"), str):
        return first["message"]
    return None


def _subsystem(entry: dict[str, Any], meta: dict[str, Any]) -> str | None:
    for value in (meta.get("name"), entry.get("subsystem")):
        if isinstance(value, str) and value:
            return value
    return None
