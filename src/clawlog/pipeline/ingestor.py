"""Log ingestor: backfill, debounced incremental ingestion and lifecycle.

Lifecycle: ``created → watching → stopped → closed``. ``closed`` is
terminal; every operation on a closed ingestor raises IngestorClosedError.

All work runs on one asyncio event loop. The SQLite connection is owned
by the ingestor and is only touched from that loop, so passes never
contend for it.
"""

from __future__ import annotations

import asyncio
import logging
import os
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Callable

from clawlog.config import DEFAULT_DB_FILENAME, DEFAULT_STATE_DIR, ClawlogConfig
from clawlog.db.connection import Database
from clawlog.db.repository import EventStore
from clawlog.db.schema import ensure_schema
from clawlog.errors import IngestorClosedError
from clawlog.ingest import get_parser, parse_lines
from clawlog.ingest.base import SourceType
from clawlog.ingest.tail_reader import DEFAULT_MAX_BYTES, read_new_lines
from clawlog.pipeline.scheduler import DEFAULT_DEBOUNCE_SECONDS, DebouncedQueue
from clawlog.watch.patterns import WatchedPath, absolute_path, classify, resolve_watched_files
from clawlog.watch.watcher import (
    DEFAULT_POLL_MS,
    DEFAULT_STABILITY_MS,
    FileChangeEvent,
    LogWatcher,
)

logger = logging.getLogger(__name__)

DEFAULT_BATCH_SIZE = 100


class IngestorState(str, Enum):
    CREATED = "created"
    WATCHING = "watching"
    STOPPED = "stopped"
    CLOSED = "closed"


@dataclass
class IngestSummary:
    """Aggregate counts from one backfill."""

    files: int = 0
    events: int = 0
    failed: int = 0


@dataclass
class IngestorStatus:
    """Read-only snapshot returned by ``LogIngestor.status()``."""

    db_path: str
    watching: bool
    tracked_files: int
    total_events: int
    events_by_type: dict[str, int] = field(default_factory=dict)


def default_watched_paths(
    state_dir: Path | str | None = None,
    system_log_dir: Path | str | None = None,
) -> list[WatchedPath]:
    """Watch descriptors for the standard OpenClaw state layout.

    - ``<state_dir>/agents/**/sessions/*.jsonl`` — session transcripts
    - ``<state_dir>/logs/cache-trace.jsonl`` — cache trace stream
    - ``<system_log_dir>/openclaw-*.log`` — runtime logs (default ``<state_dir>/logs``)
    """
    root = Path(absolute_path(state_dir)) if state_dir is not None else DEFAULT_STATE_DIR
    log_dir = Path(absolute_path(system_log_dir)) if system_log_dir is not None else root / "logs"
    return [
        WatchedPath(
            pattern=os.path.join(root, "agents", "**", "sessions", "*.jsonl"),
            source_type=SourceType.SESSION,
        ),
        WatchedPath(
            pattern=os.path.join(root, "logs", "cache-trace.jsonl"),
            source_type=SourceType.CACHE_TRACE,
        ),
        WatchedPath(
            pattern=os.path.join(log_dir, "openclaw-*.log"),
            source_type=SourceType.SYSTEM_LOG,
        ),
    ]


class LogIngestor:
    """Ingests log files into the event store and keeps them in sync.

    Args:
        state_dir: State root; source of the default watched paths and the
            default store location.
        db_path: Event store file (default ``<state_dir>/observability.db``).
        watched_paths: Descriptors overriding ``default_watched_paths()``.
        batch_size: Events per insert transaction.
        max_bytes: Tail reader cap per read.
        debounce_seconds: Delay between the first notification and the pass.
        system_log_dir: Directory of runtime logs for the default descriptors.
        stability_ms: Watcher quiet window before a change is reported.
        poll_ms: Watcher poll interval when polling.
        force_polling: Make the watcher poll instead of using OS notifications.
        watcher_factory: Callable building the watcher (tests inject fakes).

    Raises:
        sqlite3.Error / OSError: If the store cannot be created or opened.
    """

    def __init__(
        self,
        *,
        state_dir: Path | str | None = None,
        db_path: Path | str | None = None,
        watched_paths: list[WatchedPath] | None = None,
        batch_size: int = DEFAULT_BATCH_SIZE,
        max_bytes: int = DEFAULT_MAX_BYTES,
        debounce_seconds: float = DEFAULT_DEBOUNCE_SECONDS,
        system_log_dir: Path | str | None = None,
        stability_ms: int = DEFAULT_STABILITY_MS,
        poll_ms: int = DEFAULT_POLL_MS,
        force_polling: bool = False,
        watcher_factory: Callable[..., Any] = LogWatcher,
    ) -> None:
        if batch_size < 1:
            raise ValueError("batch_size must be >= 1")
        if max_bytes < 1:
            raise ValueError("max_bytes must be >= 1")

        # Cursors are keyed by absolute path and watchfiles reports absolute paths.
        self.state_dir = Path(absolute_path(state_dir if state_dir is not None else DEFAULT_STATE_DIR))
        self.db_path = (
            Path(absolute_path(db_path)) if db_path is not None else self.state_dir / DEFAULT_DB_FILENAME
        )
        self.watched_paths = (
            [WatchedPath(absolute_path(wp.pattern), wp.source_type) for wp in watched_paths]
            if watched_paths is not None
            else default_watched_paths(self.state_dir, system_log_dir)
        )
        self.batch_size = batch_size
        self.max_bytes = max_bytes
        self.stability_ms = stability_ms
        self.poll_ms = poll_ms
        self.force_polling = force_polling
        self._watcher_factory = watcher_factory

        self._conn = Database(self.db_path).connect()
        ensure_schema(self._conn)
        self._store = EventStore(self._conn)

        self._queue = DebouncedQueue(self._process_pending, delay=debounce_seconds)
        self._watcher: Any = None
        self._state = IngestorState.CREATED

        logger.info("Log ingestor initialized (db=%s)", self.db_path)

    @classmethod
    def from_config(cls, cfg: ClawlogConfig, **overrides: Any) -> LogIngestor:
        """Build an ingestor from a loaded ClawlogConfig."""
        options: dict[str, Any] = {
            "state_dir": cfg.state_dir,
            "db_path": cfg.db_path,
            "watched_paths": cfg.sources,
            "batch_size": cfg.store.batch_size,
            "max_bytes": cfg.reader.max_bytes,
            "debounce_seconds": cfg.watcher.debounce_ms / 1000,
            "system_log_dir": cfg.system_log_dir,
            "stability_ms": cfg.watcher.stability_ms,
            "poll_ms": cfg.watcher.poll_ms,
            "force_polling": cfg.watcher.force_polling,
        }
        options.update(overrides)
        return cls(**options)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    @property
    def state(self) -> IngestorState:
        return self._state

    @property
    def watching(self) -> bool:
        return self._state is IngestorState.WATCHING

    def _check_open(self, operation: str) -> None:
        if self._state is IngestorState.CLOSED:
            raise IngestorClosedError(operation)

    async def start_watching(self) -> None:
        """Backfill existing files, then watch for changes."""
        self._check_open("start watching")
        if self.watching:
            logger.warning("Watcher already running")
            return

        logger.info(
            "Starting file watcher for patterns: %s", [wp.pattern for wp in self.watched_paths]
        )
        self.ingest_existing()

        self._queue.resume()
        self._watcher = self._watcher_factory(
            self.watched_paths,
            self._on_file_change,
            state_dir=self.state_dir,
            stability_ms=self.stability_ms,
            poll_ms=self.poll_ms,
            emit_existing=False,
            force_polling=self.force_polling,
        )
        await self._watcher.start()
        self._state = IngestorState.WATCHING

    async def stop_watching(self) -> None:
        """Cancel the pending debounce timer and detach the watcher."""
        self._check_open("stop watching")
        await self._detach()
        if self._state is IngestorState.WATCHING:
            self._state = IngestorState.STOPPED

    async def _detach(self) -> None:
        self._queue.stop()
        if self._watcher is not None:
            await self._watcher.stop()
            self._watcher = None
            logger.info("File watcher stopped")
        await self._queue.wait_idle()

    async def close(self) -> None:
        """Stop watching and release the store. Safe to call more than once."""
        if self._state is IngestorState.CLOSED:
            return
        self._state = IngestorState.CLOSED
        # An in-flight pass finishes its current file before the store closes.
        await self._detach()
        self._conn.close()
        logger.info("Log ingestor closed")

    async def __aenter__(self) -> LogIngestor:
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.close()

    # ------------------------------------------------------------------
    # Ingestion
    # ------------------------------------------------------------------

    def ingest_existing(self) -> IngestSummary:
        """Run one ingestion pass over every file matching the watched paths.

        Per-file failures are logged and do not stop the remaining files.
        """
        self._check_open("ingest existing files")
        files = resolve_watched_files(self.watched_paths)
        logger.info("Found %d file(s) to ingest", len(files))

        summary = IngestSummary(files=len(files))
        for resolved in files:
            try:
                summary.events += self.ingest_file(resolved.path, resolved.source_type)
            except Exception:
                summary.failed += 1
                logger.exception("Failed to ingest %s", resolved.path)

        logger.info(
            "Initial ingestion complete: %d file(s), %d event(s)", summary.files, summary.events
        )
        return summary

    def ingest_file(self, path: str, source_type: SourceType | str) -> int:
        """Ingest lines appended to *path* since its stored cursor.

        Events are persisted before the cursor advances; if an insert fails
        the cursor stays put and the error propagates, so the next pass
        re-reads the same bytes.

        Returns:
            Number of events inserted.
        """
        self._check_open("ingest files")
        path = absolute_path(path)
        parser = get_parser(source_type)
        source_type = parser.source_type

        tracked = self._store.get_tracked_file(path)
        cursor = tracked.byte_offset if tracked is not None else None

        result = read_new_lines(path, cursor, max_bytes=self.max_bytes)
        if not result.exists:
            logger.error("Cannot ingest %s: file not found", path)
            return 0
        if result.reset:
            logger.info(
                "File rotation or truncation detected for %s (cursor %s, size %d)",
                path,
                cursor,
                result.size,
            )
        if result.truncated:
            logger.info("Skipped to last %d bytes of %s", self.max_bytes, path)

        events = parse_lines(parser, result.lines, path)
        for i in range(0, len(events), self.batch_size):
            self._store.insert_events_batch(events[i : i + self.batch_size])

        self._store.upsert_tracked_file(path, source_type, result.cursor, result.size)

        logger.debug(
            "Ingested %d event(s) from %s (lines=%d, cursor %s → %d)",
            len(events),
            path,
            len(result.lines),
            cursor,
            result.cursor,
        )
        return len(events)

    def source_type_for(self, path: str) -> SourceType | None:
        return classify(absolute_path(path), self.watched_paths)

    def _on_file_change(self, event: FileChangeEvent) -> None:
        if event.event_type == "unlink":
            logger.debug("Ignoring removed file %s", event.path)
            return
        if self._watcher is None:
            return
        self._queue.enqueue(event.path)

    async def _process_pending(self, paths: list[str]) -> None:
        for path in paths:
            if self._state is IngestorState.CLOSED:
                break
            source_type = self.source_type_for(path)
            if source_type is None:
                continue
            try:
                self.ingest_file(path, source_type)
            except Exception:
                logger.exception("Failed to ingest %s", path)
            # Yield between files so notifications keep flowing.
            await asyncio.sleep(0)

    # ------------------------------------------------------------------
    # Status
    # ------------------------------------------------------------------

    def status(self) -> IngestorStatus:
        """Snapshot of store path, watch state and event counts."""
        self._check_open("report status")
        return IngestorStatus(
            db_path=str(self.db_path),
            watching=self.watching,
            tracked_files=self._store.count_tracked_files(),
            total_events=self._store.count_events(),
            events_by_type=self._store.count_events_by_source_type(),
        )


def create_ingestor(**options: Any) -> LogIngestor:
    """Create a LogIngestor; keyword options as for ``LogIngestor``."""
    return LogIngestor(**options)
