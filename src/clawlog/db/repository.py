"""Event store: the narrow set of operations the ingestor performs on SQLite.

Two tables: ``tracked_files`` (one read cursor per file path) and ``events``
(append-only parsed log lines). The store never deletes or updates events.
"""

from __future__ import annotations

import sqlite3
import time
from collections.abc import Sequence

from clawlog.db.models import Event, TrackedFile


def _now_ms() -> int:
    return int(time.time() * 1000)


class EventStore:
    """Data access layer for tracked files and events.

    Wraps an open sqlite3.Connection whose schema has been initialised
    (see clawlog.db.schema.ensure_schema). The connection is owned by the
    caller and must be closed after use.
    """

    def __init__(self, conn: sqlite3.Connection) -> None:
        self._conn = conn

    # ------------------------------------------------------------------
    # Tracked files
    # ------------------------------------------------------------------

    def upsert_tracked_file(
        self, path: str, source_type: str, byte_offset: int, file_size: int
    ) -> None:
        """Insert or update the cursor record for *path*.

        Offset, size and last-seen time are overwritten unconditionally.
        """
        with self._conn:
            self._conn.execute(
                """
                INSERT INTO tracked_files (path, source_type, byte_offset, last_seen_at, file_size)
                VALUES (?, ?, ?, ?, ?)
                ON CONFLICT(path) DO UPDATE SET
                    byte_offset = excluded.byte_offset,
                    last_seen_at = excluded.last_seen_at,
                    file_size = excluded.file_size
                """,
                (path, str(source_type), byte_offset, _now_ms(), file_size),
            )

    def get_tracked_file(self, path: str) -> TrackedFile | None:
        """Return the cursor record for *path*, or None if it was never ingested."""
        row = self._conn.execute(
            """
            SELECT path, source_type, byte_offset, file_size, last_seen_at
            FROM tracked_files WHERE path = ?
            """,
            (path,),
        ).fetchone()
        return _row_to_tracked_file(row) if row else None

    def count_tracked_files(self) -> int:
        return self._conn.execute("SELECT COUNT(*) FROM tracked_files").fetchone()[0]

    # ------------------------------------------------------------------
    # Events
    # ------------------------------------------------------------------

    def insert_events_batch(self, events: Sequence[Event]) -> int:
        """Insert *events* in a single transaction and return the row count.

        If any row fails, the whole batch is rolled back and the error
        propagates; nothing from the batch is visible afterwards.
        """
        if not events:
            return 0

        now = _now_ms()
        rows = [
            (
                e.ts,
                str(e.source_type),
                e.source_file,
                e.event_type,
                e.level,
                e.session_id,
                e.agent_id,
                e.run_id,
                e.provider,
                e.model_id,
                e.role,
                e.message_preview,
                e.raw_json,
                now,
            )
            for e in events
        ]
        with self._conn:
            self._conn.executemany(
                """
                INSERT INTO events (
                    ts, source_type, source_file, event_type, level,
                    session_id, agent_id, run_id, provider, model_id,
                    role, message_preview, raw_json, ingested_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                rows,
            )
        return len(rows)

    def list_events(self, source_file: str | None = None) -> list[Event]:
        """Return stored events in insertion order, optionally for one file."""
        sql = (
            "SELECT id, ts, source_type, source_file, event_type, level, session_id, agent_id,"
            " run_id, provider, model_id, role, message_preview, raw_json, ingested_at FROM events"
        )
        params: tuple = ()
        if source_file is not None:
            sql += " WHERE source_file = ?"
            params = (source_file,)
        sql += " ORDER BY id"
        return [_row_to_event(r) for r in self._conn.execute(sql, params).fetchall()]

    def count_events(self) -> int:
        return self._conn.execute("SELECT COUNT(*) FROM events").fetchone()[0]

    def count_events_by_source_type(self) -> dict[str, int]:
        """Return ``{source_type: event_count}`` for every source type present."""
        rows = self._conn.execute(
            "SELECT source_type, COUNT(*) AS n FROM events GROUP BY source_type ORDER BY source_type"
        ).fetchall()
        return {r["source_type"]: r["n"] for r in rows}


# ------------------------------------------------------------------
# Row → model helpers
# ------------------------------------------------------------------

def _row_to_tracked_file(row: sqlite3.Row) -> TrackedFile:
    return TrackedFile(
        path=row["path"],
        source_type=row["source_type"],
        byte_offset=row["byte_offset"],
        file_size=row["file_size"],
        last_seen_at=row["last_seen_at"],
    )


def _row_to_event(row: sqlite3.Row) -> Event:
    return Event(
        id=row["id"],
        ts=row["ts"],
        source_type=row["source_type"],
        source_file=row["source_file"],
        event_type=row["event_type"],
        level=row["level"],
        session_id=row["session_id"],
        agent_id=row["agent_id"],
        run_id=row["run_id"],
        provider=row["provider"],
        model_id=row["model_id"],
        role=row["role"],
        message_preview=row["message_preview"],
        raw_json=row["raw_json"],
        ingested_at=row["ingested_at"],
    )
