from __future__ import annotations

import asyncio

import pytest

from propdb.exceptions import InvalidKeyError, UnsupportedValueError
from propdb.scheduler import LoopTickScheduler, TaskQueue
from propdb.store import ChunkedKeyValueStore
from propdb.substrate import InMemoryPropertyStore


@pytest.mark.asyncio
async def test_async_round_trip_on_running_loop() -> None:
    store = ChunkedKeyValueStore("async", InMemoryPropertyStore())

    await store.set_async("k", {"a": 1})
    assert await store.get_async("k") == {"a": 1}


@pytest.mark.asyncio
async def test_async_operations_run_in_submission_order() -> None:
    store = ChunkedKeyValueStore("async", InMemoryPropertyStore(), scheduler=LoopTickScheduler())

    results = await asyncio.gather(
        store.set_async("k", 1),
        store.get_async("k"),
        store.set_async("k", 2),
        store.get_async("k"),
    )
    assert results == [None, 1, None, 2]


@pytest.mark.asyncio
async def test_async_set_runs_only_on_tick() -> None:
    queue = TaskQueue()
    store = ChunkedKeyValueStore("async", InMemoryPropertyStore(), scheduler=queue)

    task = asyncio.create_task(store.set_async("k", "v"))
    await asyncio.sleep(0)

    assert queue.pending == 1
    assert store.has("k") is False

    assert queue.tick() == 1
    await task
    assert store.get("k") == "v"


@pytest.mark.asyncio
async def test_async_invalid_key_fails_before_scheduling() -> None:
    queue = TaskQueue()
    store = ChunkedKeyValueStore("async", InMemoryPropertyStore(), scheduler=queue)

    with pytest.raises(InvalidKeyError):
        await store.get_async("")
    with pytest.raises(InvalidKeyError):
        await store.set_async("", 1)
    assert queue.pending == 0


@pytest.mark.asyncio
async def test_async_errors_reach_the_caller() -> None:
    store = ChunkedKeyValueStore("async", InMemoryPropertyStore())

    with pytest.raises(UnsupportedValueError):
        await store.set_async("k", object())


@pytest.mark.asyncio
async def test_cancelled_caller_does_not_cancel_scheduled_write() -> None:
    queue = TaskQueue()
    store = ChunkedKeyValueStore("async", InMemoryPropertyStore(), scheduler=queue)

    task = asyncio.create_task(store.set_async("k", 1))
    await asyncio.sleep(0)
    task.cancel()
    with pytest.raises(asyncio.CancelledError):
        await task

    queue.tick()
    assert store.get("k") == 1


def test_task_queue_defers_callbacks_queued_during_tick() -> None:
    queue = TaskQueue()
    order: list[str] = []

    def first() -> None:
        order.append("first")
        queue.run_next(lambda: order.append("nested"))

    queue.run_next(first)
    queue.run_next(lambda: order.append("second"))

    assert queue.tick() == 2
    assert order == ["first", "second"]
    assert queue.pending == 1

    assert queue.drain() == 1
    assert order == ["first", "second", "nested"]
    assert queue.ticks == 2
