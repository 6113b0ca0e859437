"""Tests for DebouncedQueue."""

from __future__ import annotations

import asyncio

import pytest

from clawlog.pipeline.scheduler import DebouncedQueue

DELAY = 0.02


def test_negative_delay_rejected():
    async def noop(paths):
        pass

    with pytest.raises(ValueError):
        DebouncedQueue(noop, delay=-1)


def test_burst_coalesced_into_one_pass():
    batches: list[list[str]] = []

    async def process(paths):
        batches.append(paths)

    async def scenario():
        queue = DebouncedQueue(process, delay=DELAY)
        for name in ["a", "b", "a", "c", "b"]:
            queue.enqueue(name)
        assert queue.scheduled
        await asyncio.sleep(DELAY * 5)
        await queue.wait_idle()

    asyncio.run(scenario())
    assert batches == [["a", "b", "c"]]


def test_arrivals_during_pass_wait_for_next_pass():
    batches: list[list[str]] = []
    concurrent = 0
    max_concurrent = 0

    async def scenario():
        queue: DebouncedQueue

        async def process(paths):
            nonlocal concurrent, max_concurrent
            concurrent += 1
            max_concurrent = max(max_concurrent, concurrent)
            batches.append(paths)
            if paths == ["a"]:
                queue.enqueue("b")
                assert not queue.scheduled
                await asyncio.sleep(DELAY * 2)
            concurrent -= 1

        queue = DebouncedQueue(process, delay=DELAY)
        queue.enqueue("a")
        await asyncio.sleep(DELAY * 10)
        await queue.wait_idle()

    asyncio.run(scenario())
    assert batches == [["a"], ["b"]]
    assert max_concurrent == 1


def test_failed_pass_does_not_block_next():
    calls: list[list[str]] = []

    async def scenario():
        async def process(paths):
            calls.append(paths)
            if len(calls) == 1:
                raise RuntimeError("boom")

        queue = DebouncedQueue(process, delay=DELAY)
        queue.enqueue("a")
        await asyncio.sleep(DELAY * 4)
        await queue.wait_idle()
        assert not queue.in_flight
        queue.enqueue("b")
        await asyncio.sleep(DELAY * 4)
        await queue.wait_idle()

    asyncio.run(scenario())
    assert calls == [["a"], ["b"]]


def test_stop_cancels_timer_and_drops_pending():
    calls: list[list[str]] = []

    async def process(paths):
        calls.append(paths)

    async def scenario():
        queue = DebouncedQueue(process, delay=DELAY)
        queue.enqueue("a")
        queue.stop()
        assert not queue.scheduled
        assert queue.pending == []
        queue.enqueue("b")
        await asyncio.sleep(DELAY * 4)

    asyncio.run(scenario())
    assert calls == []


def test_resume_after_stop():
    calls: list[list[str]] = []

    async def process(paths):
        calls.append(paths)

    async def scenario():
        queue = DebouncedQueue(process, delay=DELAY)
        queue.stop()
        queue.resume()
        queue.enqueue("a")
        await asyncio.sleep(DELAY * 4)
        await queue.wait_idle()

    asyncio.run(scenario())
    assert calls == [["a"]]
