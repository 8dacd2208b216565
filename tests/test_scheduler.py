import asyncio

import pytest
from tiny_future.future import TinyFuture
from tiny_future.scheduler import AsyncioScheduler, CallSoonQueue, call_soon, get_scheduler


def test_call_soon_queue_runs_in_order():
    """Test that deferred callbacks run first in, first out."""
    queue = CallSoonQueue()
    calls = []
    for i in range(3):
        queue.call_soon(lambda i=i: calls.append(i))
    assert calls == []
    assert queue.poll() == 3
    assert calls == [0, 1, 2]
    assert queue.poll() == 0


def test_call_soon_queue_defers_nested_callbacks_to_next_turn():
    """Test that a callback deferred during poll waits for the next poll."""
    queue = CallSoonQueue()
    calls = []

    def outer():
        calls.append("outer")
        queue.call_soon(lambda: calls.append("inner"))

    queue.call_soon(outer)
    assert queue.poll() == 1
    assert calls == ["outer"]
    assert len(queue) == 1
    assert queue.run() == 1
    assert calls == ["outer", "inner"]


def test_call_soon_queue_keeps_remaining_after_error():
    """Test that an exception escapes poll and later callbacks stay queued."""
    queue = CallSoonQueue()
    calls = []

    def broken():
        raise RuntimeError("callback failed")

    queue.call_soon(broken)
    queue.call_soon(lambda: calls.append("after"))
    with pytest.raises(RuntimeError, match="callback failed"):
        queue.poll()
    assert len(queue) == 1
    queue.run()
    assert calls == ["after"]


def test_module_call_soon_uses_default(scheduler):
    """Test the module-level helpers go through the installed scheduler."""
    assert get_scheduler() is scheduler
    calls = []
    call_soon(lambda: calls.append(1))
    scheduler.run()
    assert calls == [1]


def test_asyncio_scheduler():
    """Test deferring late callbacks onto an asyncio event loop."""

    async def main():
        future = TinyFuture("on_loop", scheduler=AsyncioScheduler())
        future.complete("value")
        seen = []
        future.callback = lambda: seen.append(future.result())
        assert seen == []
        await asyncio.sleep(0)
        return seen

    assert asyncio.run(main()) == ["value"]
