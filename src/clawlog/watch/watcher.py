"""File watcher for log sources, built on ``watchfiles``.

Change notifications are delivered once a write burst has been quiet for
the stability window, tagged with the source type of the first watched
pattern that matches the file.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import Literal

from watchfiles import Change, awatch

from clawlog.ingest.base import SourceType
from clawlog.watch.patterns import (
    WatchedPath,
    absolute_path,
    classify,
    has_wildcard,
    pattern_base_dir,
    resolve_watched_files,
)

logger = logging.getLogger(__name__)

DEFAULT_STABILITY_MS = 500
DEFAULT_POLL_MS = 100

# Upper bound on how long a continuous burst is grouped before yielding.
_MAX_GROUP_MS = 1600
_RESTART_DELAY_SECONDS = 1.0
# How often watch roots are re-checked while none of them exist.
_ROOT_RETRY_SECONDS = 1.0

LOG_EXTENSIONS = (".jsonl", ".log")

ChangeType = Literal["add", "change", "unlink"]

_CHANGE_NAMES: dict[Change, ChangeType] = {
    Change.added: "add",
    Change.modified: "change",
    Change.deleted: "unlink",
}


@dataclass(frozen=True)
class FileChangeEvent:
    path: str
    source_type: SourceType
    event_type: ChangeType


FileChangeCallback = Callable[[FileChangeEvent], None]


def is_hidden_path(path: str, state_dir: Path | None = None) -> bool:
    """True if any component of *path* is a dot-file or dot-directory.

    The state root itself and files ending in a log extension are exempt.
    """
    parts = Path(path).parts
    for i, part in enumerate(parts):
        if not part.startswith(".") or part in (".", ".."):
            continue
        if state_dir is not None and Path(*parts[: i + 1]) == state_dir:
            continue
        if i == len(parts) - 1 and part.endswith(LOG_EXTENSIONS):
            continue
        return True
    return False


class _LogFilter:
    """watchfiles filter: only files that map to a source type, no hidden paths."""

    def __init__(self, watched: list[WatchedPath], state_dir: Path | None) -> None:
        self.watched = watched
        self.state_dir = state_dir

    def __call__(self, change: Change, path: str) -> bool:
        if is_hidden_path(path, self.state_dir):
            return False
        return classify(path, self.watched) is not None


class LogWatcher:
    """Watches log file patterns and reports add/change/unlink notifications.

    Runs as an asyncio task on the caller's event loop; the callback is
    invoked on that loop, never from another thread.
    """

    def __init__(
        self,
        watched: list[WatchedPath],
        on_change: FileChangeCallback,
        *,
        state_dir: Path | None = None,
        stability_ms: int = DEFAULT_STABILITY_MS,
        poll_ms: int = DEFAULT_POLL_MS,
        emit_existing: bool = False,
        force_polling: bool = False,
    ) -> None:
        self.watched = [WatchedPath(absolute_path(wp.pattern), wp.source_type) for wp in watched]
        self.on_change = on_change
        self.state_dir = Path(absolute_path(state_dir)) if state_dir is not None else None
        self.stability_ms = stability_ms
        self.poll_ms = poll_ms
        self.emit_existing = emit_existing
        self.force_polling = force_polling

        self._stop_event: asyncio.Event | None = None
        self._task: asyncio.Task[None] | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def start(self) -> None:
        """Report existing files (if configured) and begin monitoring."""
        if self.running:
            return

        if self.emit_existing:
            for resolved in resolve_watched_files(self.watched):
                self._emit("add", resolved.path)

        self._stop_event = asyncio.Event()
        self._task = asyncio.create_task(self._watch_loop(self._stop_event), name="clawlog-watcher")

    async def stop(self) -> None:
        """Stop monitoring and wait for the watch task to exit."""
        if self._stop_event is not None:
            self._stop_event.set()
        if self._task is not None:
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
            logger.debug("Watcher stopped")
        self._stop_event = None

    def watch_roots(self) -> list[Path]:
        """Directories to hand to watchfiles, one per pattern, nested roots merged."""
        candidates: list[Path] = []
        for wp in self.watched:
            root = self._root_for(wp.pattern)
            if root is None:
                logger.debug("Skipping pattern with no existing directory: %s", wp.pattern)
                continue
            candidates.append(root)

        roots: list[Path] = []
        for root in sorted(set(candidates), key=lambda p: len(p.parts)):
            if not any(root == r or r in root.parents for r in roots):
                roots.append(root)
        return roots

    def _root_for(self, pattern: str) -> Path | None:
        base = pattern_base_dir(pattern)
        if not has_wildcard(pattern) and not base.is_dir():
            # Watch the parent of an exact file so rotation is observed.
            base = base.parent

        if base.is_dir():
            return base

        # Directory not created yet: fall back to an existing ancestor,
        # but never climb above the state root.
        if self.state_dir is None:
            return None
        for ancestor in base.parents:
            if ancestor != self.state_dir and self.state_dir not in ancestor.parents:
                return None
            if ancestor.is_dir():
                return ancestor
        return None

    def _emit(self, event_type: ChangeType, path: str) -> None:
        source_type = classify(path, self.watched)
        if source_type is None:
            logger.debug("Ignoring file change (no matching source type): %s", path)
            return
        logger.debug("File %s: %s (%s)", event_type, path, source_type)
        self.on_change(FileChangeEvent(path=path, source_type=source_type, event_type=event_type))

    async def _watch_loop(self, stop_event: asyncio.Event) -> None:
        waiting_for_roots = False
        while not stop_event.is_set():
            roots = self.watch_roots()
            if not roots:
                if not waiting_for_roots:
                    logger.warning(
                        "No existing directories to watch yet for: %s; retrying every %.1fs",
                        [wp.pattern for wp in self.watched],
                        _ROOT_RETRY_SECONDS,
                    )
                    waiting_for_roots = True
                await _wait_or_stop(stop_event, _ROOT_RETRY_SECONDS)
                continue

            if waiting_for_roots:
                # Files created before any root existed were never reported.
                waiting_for_roots = False
                for resolved in resolve_watched_files(self.watched):
                    self._emit("add", resolved.path)

            logger.info("Watching %d root(s) for log changes: %s", len(roots), [str(r) for r in roots])
            try:
                async for changes in awatch(
                    *roots,
                    watch_filter=_LogFilter(self.watched, self.state_dir),
                    debounce=max(_MAX_GROUP_MS, self.stability_ms),
                    step=self.stability_ms,
                    stop_event=stop_event,
                    force_polling=self.force_polling,
                    poll_delay_ms=self.poll_ms,
                    recursive=True,
                ):
                    for change, path in sorted(changes, key=lambda c: c[1]):
                        event_type = _CHANGE_NAMES.get(change)
                        if event_type is not None:
                            self._emit(event_type, path)
            except Exception:
                logger.exception("Watcher error; restarting in %.1fs", _RESTART_DELAY_SECONDS)
            await _wait_or_stop(stop_event, _RESTART_DELAY_SECONDS)


async def _wait_or_stop(stop_event: asyncio.Event, seconds: float) -> None:
    try:
        await asyncio.wait_for(stop_event.wait(), timeout=seconds)
    except asyncio.TimeoutError:
        pass
