"""Session transcript parser — ``agents/<id>/sessions/*.jsonl``."""

from __future__ import annotations

import re
from typing import Any

from clawlog.db.models import Event, truncate_preview
from clawlog.ingest.base import BaseParser, SourceType

_AGENT_RE = re.compile(r"agents[/\\]([^/\\]+)[/\\]sessions[/\\]")


class SessionParser(BaseParser):
    """Parse session transcript records, discriminated by ``type``.

    - ``session`` header (``version``, ``id``, ``timestamp``) → ``session:start``
    - ``message`` with a nested ``message`` object → ``session:message:<role>``
    - any other ``type`` → ``session:<type>``

    The agent id comes from the file path, never from the record.
    """

    source_type = SourceType.SESSION

    def parse_line(self, line: str, source_file: str) -> Event | None:
        entry = self.load_object(line)
        if entry is None:
            return None
        entry_type = entry.get("type")
        if not isinstance(entry_type, str) or not entry_type:
            return None

        agent_id = agent_id_from_path(source_file)

        if _is_header(entry):
            return Event(
                ts=self.timestamp_or_now(entry.get("timestamp")),
                source_type=self.source_type,
                source_file=source_file,
                event_type="session:start",
                session_id=entry["id"],
                agent_id=agent_id,
                raw_json=line,
            )

        if entry_type == "message" and isinstance(entry.get("message"), dict):
            return self._parse_message(entry["message"], line, source_file, agent_id)

        return Event(
            ts=self.now_iso(),
            source_type=self.source_type,
            source_file=source_file,
            event_type=f"session:{entry_type}",
            agent_id=agent_id,
            raw_json=line,
        )

    def _parse_message(
        self, msg: dict[str, Any], line: str, source_file: str, agent_id: str | None
    ) -> Event | None:
        role = msg.get("role")
        if not isinstance(role, str) or not role:
            return None

        ts = None
        stamp = msg.get("timestamp")
        if isinstance(stamp, (int, float)) and not isinstance(stamp, bool) and stamp:
            ts = self.ms_to_iso(stamp)

        return Event(
            ts=ts or self.now_iso(),
            source_type=self.source_type,
            source_file=source_file,
            event_type=f"session:message:{role}",
            agent_id=agent_id,
            provider=_opt_str(msg.get("provider")),
            model_id=_opt_str(msg.get("model")),
            role=role,
            message_preview=truncate_preview(text_preview(msg.get("content"))),
            raw_json=line,
        )


def agent_id_from_path(source_file: str) -> str | None:
    """Return ``<id>`` from a path containing ``agents/<id>/sessions/``."""
    match = _AGENT_RE.search(source_file)
    return match.group(1) if match else None


def text_preview(content: Any) -> str | None:
    """Plain string content, or the text of the first ``{"type": "text"}`` block."""
    if isinstance(content, str):
        return content
    if not isinstance(content, list):
        return None
    for block in content:
        if isinstance(block, dict) and block.get("type") == "text" and isinstance(block.get("text"), str):
            return block["text"]
    return None


def _is_header(entry: dict[str, Any]) -> bool:
    version = entry.get("version")
    return (
        entry.get("type") == "session"
        and isinstance(version, (int, float))
        and not isinstance(version, bool)
        and isinstance(entry.get("id"), str)
    )


def _opt_str(value: Any) -> str | None:
    return value if isinstance(value, str) else None
