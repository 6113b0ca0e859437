"""Debounced pending-file queue.

State is explicit: a pending set, an in-flight flag and at most one timer
handle. A pass drains the whole pending set; paths that arrive during a
pass wait for the next debounce cycle, which is scheduled when the pass
finishes, so passes never overlap and no path is dropped.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable

logger = logging.getLogger(__name__)

DEFAULT_DEBOUNCE_SECONDS = 0.5

ProcessFn = Callable[[list[str]], Awaitable[None]]


class DebouncedQueue:
    """Coalesces path notifications into debounced, sequential passes."""

    def __init__(self, process: ProcessFn, delay: float = DEFAULT_DEBOUNCE_SECONDS) -> None:
        if delay < 0:
            raise ValueError("delay must be >= 0")
        self._process = process
        self.delay = delay
        # dict keeps enqueue order while deduplicating.
        self._pending: dict[str, None] = {}
        self._in_flight = False
        self._timer: asyncio.TimerHandle | None = None
        self._task: asyncio.Task[None] | None = None
        self._stopped = False

    @property
    def pending(self) -> list[str]:
        return list(self._pending)

    @property
    def in_flight(self) -> bool:
        return self._in_flight

    @property
    def scheduled(self) -> bool:
        return self._timer is not None

    def enqueue(self, path: str) -> None:
        """Add *path* to the pending set and make sure a pass is scheduled.

        Must be called from the event loop thread.
        """
        if self._stopped:
            return
        self._pending[path] = None
        self._schedule()

    def _schedule(self) -> None:
        if self._timer is not None or self._in_flight or self._stopped:
            return
        loop = asyncio.get_running_loop()
        self._timer = loop.call_later(self.delay, self._fire)

    def _fire(self) -> None:
        self._timer = None
        if self._in_flight or self._stopped or not self._pending:
            return
        self._task = asyncio.get_running_loop().create_task(self._drain())

    async def _drain(self) -> None:
        self._in_flight = True
        try:
            batch = list(self._pending)
            self._pending.clear()
            logger.debug("Processing %d pending file(s)", len(batch))
            await self._process(batch)
        except Exception:
            logger.exception("Debounced ingestion pass failed")
        finally:
            self._in_flight = False
            if self._pending and not self._stopped:
                self._schedule()

    def stop(self) -> None:
        """Cancel the scheduled timer and discard pending paths.

        A pass already in flight is not interrupted; await ``wait_idle()``.
        """
        self._stopped = True
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        self._pending.clear()

    def resume(self) -> None:
        """Accept notifications again after ``stop()``."""
        self._stopped = False

    async def wait_idle(self) -> None:
        """Wait for the in-flight pass, if any, to finish."""
        task = self._task
        if task is not None and not task.done():
            await asyncio.shield(task)
