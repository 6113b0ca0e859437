"""Parser interface shared by every log source type."""

from __future__ import annotations

import json
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from clawlog.db.models import Event


class SourceType(str, Enum):
    """The closed set of log formats clawlog understands."""

    SYSTEM_LOG = "system-log"
    CACHE_TRACE = "cache-trace"
    SESSION = "session"

    def __str__(self) -> str:
        return self.value


class BaseParser(ABC):
    """Abstract base for all line parsers.

    A parser turns one raw line into an Event, or returns None when the line
    is blank, not JSON, or not the shape this source produces. Parsers never
    raise on bad input: one malformed record must not fail a whole file.
    """

    source_type: SourceType

    @abstractmethod
    def parse_line(self, line: str, source_file: str) -> Event | None:
        """Parse *line* read from *source_file*.

        Args:
            line: One complete line, without its terminator.
            source_file: Absolute path of the file the line came from.

        Returns:
            An Event carrying ``line`` verbatim in ``raw_json``, or None.
        """

    @staticmethod
    def load_object(line: str) -> dict[str, Any] | None:
        """Decode *line* as a JSON object; None for blanks, non-objects and bad JSON."""
        trimmed = line.strip()
        if not trimmed.startswith("{"):
            return None
        try:
            entry = json.loads(trimmed)
        except ValueError:
            return None
        return entry if isinstance(entry, dict) else None

    @staticmethod
    def now_iso() -> str:
        """Ingestion time as ISO-8601 UTC with millisecond precision."""
        return _iso(datetime.now(timezone.utc))

    @classmethod
    def timestamp_or_now(cls, value: Any) -> str:
        """Return *value* unchanged if it is an ISO-8601 string, else ingestion time."""
        if isinstance(value, str) and value.strip():
            candidate = value.strip()
            if candidate.endswith(("Z", "z")):
                candidate = candidate[:-1] + "+00:00"
            try:
                datetime.fromisoformat(candidate)
            except ValueError:
                return cls.now_iso()
            return value
        return cls.now_iso()

    @staticmethod
    def ms_to_iso(millis: float) -> str | None:
        """Convert epoch milliseconds to ISO-8601 UTC; None if out of range."""
        try:
            return _iso(datetime.fromtimestamp(millis / 1000, tz=timezone.utc))
        except (OverflowError, OSError, ValueError):
            return None


def _iso(dt: datetime) -> str:
    return dt.isoformat(timespec="milliseconds").replace("+00:00", "Z")
