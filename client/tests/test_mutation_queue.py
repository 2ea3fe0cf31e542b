"""Tests for KeyedMutationQueue ordering and failure isolation."""

import asyncio

import pytest

from diagram_client import KeyedMutationQueue


@pytest.mark.asyncio
async def test_same_key_runs_one_at_a_time_in_order():
    queue = KeyedMutationQueue()
    events = []

    async def op(name, delay):
        events.append(f"start {name}")
        await asyncio.sleep(delay)
        events.append(f"end {name}")
        return name

    results = await asyncio.gather(
        queue.run("k", lambda: op("a", 0.02)),
        queue.run("k", lambda: op("b", 0.01)),
        queue.run("k", lambda: op("c", 0)),
    )

    assert results == ["a", "b", "c"]
    assert events == ["start a", "end a", "start b", "end b", "start c", "end c"]
    assert not queue.has_pending("k")


@pytest.mark.asyncio
async def test_failure_does_not_block_followers():
    queue = KeyedMutationQueue()

    async def fail():
        await asyncio.sleep(0.01)
        raise ValueError("boom")

    async def succeed():
        return "ok"

    results = await asyncio.gather(
        queue.run("k", fail),
        queue.run("k", succeed),
        return_exceptions=True,
    )

    assert isinstance(results[0], ValueError)
    assert results[1] == "ok"
    assert not queue.has_pending("k")


@pytest.mark.asyncio
async def test_failure_is_reported_to_its_own_caller():
    queue = KeyedMutationQueue()

    async def fail():
        raise RuntimeError("nope")

    with pytest.raises(RuntimeError):
        await queue.run("k", fail)
    assert await queue.run("k", lambda: asyncio.sleep(0, result=1)) == 1


@pytest.mark.asyncio
async def test_different_keys_do_not_wait_on_each_other():
    queue = KeyedMutationQueue()
    released = asyncio.Event()

    async def blocked():
        await released.wait()
        return "a"

    async def releaser():
        released.set()
        return "b"

    results = await asyncio.wait_for(
        asyncio.gather(queue.run("a", blocked), queue.run("b", releaser)),
        timeout=1,
    )
    assert results == ["a", "b"]


@pytest.mark.asyncio
async def test_pending_state_tracks_submissions():
    queue = KeyedMutationQueue()
    gate = asyncio.Event()

    task = asyncio.ensure_future(queue.run("k", gate.wait))
    await asyncio.sleep(0)
    assert queue.has_pending("k")

    gate.set()
    await task
    assert not queue.has_pending("k")


@pytest.mark.asyncio
async def test_clear_lets_next_operation_start_fresh():
    queue = KeyedMutationQueue()
    gate = asyncio.Event()

    first = asyncio.ensure_future(queue.run("k", gate.wait))
    await asyncio.sleep(0)

    queue.clear("k")
    assert not queue.has_pending("k")
    result = await asyncio.wait_for(queue.run("k", lambda: asyncio.sleep(0, result="fresh")), timeout=1)
    assert result == "fresh"

    gate.set()
    await first


@pytest.mark.asyncio
async def test_cancelled_waiter_keeps_chain_ordered():
    queue = KeyedMutationQueue()
    gate = asyncio.Event()
    events = []

    async def first():
        await gate.wait()
        events.append("first")

    async def third():
        events.append("third")

    t1 = asyncio.ensure_future(queue.run("k", first))
    await asyncio.sleep(0)
    t2 = asyncio.ensure_future(queue.run("k", lambda: asyncio.sleep(0)))
    await asyncio.sleep(0)
    t3 = asyncio.ensure_future(queue.run("k", third))
    await asyncio.sleep(0)

    t2.cancel()
    await asyncio.sleep(0)
    assert events == []

    gate.set()
    await asyncio.gather(t1, t3)
    assert events == ["first", "third"]
    assert t2.cancelled()
