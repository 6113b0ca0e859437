"""Event store schema initialization."""

from __future__ import annotations

import sqlite3

from clawlog.db.migrations import MIGRATIONS, run_migrations

CURRENT_VERSION = MIGRATIONS[-1][0]

INDEXED_EVENT_COLUMNS: tuple[str, ...] = (
    "ts",
    "source_type",
    "event_type",
    "session_id",
    "agent_id",
    "run_id",
    "level",
)


def ensure_schema(conn: sqlite3.Connection) -> None:
    """Create tracked_files, events and their indexes if absent (idempotent)."""
    run_migrations(conn)
