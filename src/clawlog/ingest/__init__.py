"""clawlog ingest layer — tail reader and per-source line parsers."""

from __future__ import annotations

from collections.abc import Iterable

from clawlog.db.models import Event
from clawlog.errors import UnknownSourceTypeError
from clawlog.ingest.base import BaseParser, SourceType
from clawlog.ingest.cache_trace import CacheTraceParser
from clawlog.ingest.session import SessionParser
from clawlog.ingest.system_log import SystemLogParser
from clawlog.ingest.tail_reader import TailReadResult, read_log_slice, read_new_lines

# One parser per source type; the set is closed.
PARSERS: dict[SourceType, BaseParser] = {
    SourceType.SYSTEM_LOG: SystemLogParser(),
    SourceType.CACHE_TRACE: CacheTraceParser(),
    SourceType.SESSION: SessionParser(),
}


def get_parser(source_type: SourceType | str) -> BaseParser:
    """Return the parser registered for *source_type*.

    Raises:
        UnknownSourceTypeError: If *source_type* is not a known source type.
    """
    try:
        return PARSERS[SourceType(source_type)]
    except ValueError:
        raise UnknownSourceTypeError(source_type) from None


def parse_lines(parser: BaseParser, lines: Iterable[str], source_file: str) -> list[Event]:
    """Parse *lines* with *parser*, silently dropping lines it rejects."""
    events: list[Event] = []
    for line in lines:
        event = parser.parse_line(line, source_file)
        if event is not None:
            events.append(event)
    return events


__all__ = [
    "PARSERS",
    "BaseParser",
    "CacheTraceParser",
    "SessionParser",
    "SourceType",
    "SystemLogParser",
    "TailReadResult",
    "get_parser",
    "parse_lines",
    "read_log_slice",
    "read_new_lines",
]
