"""Provides the "defer to scheduler" primitive used by tiny_future.

Futures never run a late-registered callback inline. Instead they hand it to a
scheduler, which runs it on a later turn. This module defines what a scheduler
must offer, a minimal in-process implementation, and an adapter for asyncio.
"""

import asyncio
from collections import deque
import logging
from typing import Callable, Protocol

logger = logging.getLogger(__name__)


class Scheduler(Protocol):
    """Anything that can run a zero-argument callback on a later turn."""

    def call_soon(self, callback: Callable[[], None]) -> None:
        """Arrange for callback to run later, never inside this call."""
        ...


class CallSoonQueue:
    """A FIFO of deferred callbacks drained explicitly by its owner.

    This is the default scheduler. The host calls poll() once per turn of its
    own loop, or run() to drain everything.
    """

    def __init__(self) -> None:
        self._ready: deque[Callable[[], None]] = deque()

    def call_soon(self, callback: Callable[[], None]) -> None:
        self._ready.append(callback)

    def __len__(self) -> int:
        return len(self._ready)

    def poll(self) -> int:
        """Run the callbacks that were queued when this turn started.

        Callbacks deferred while polling are left for the next turn. If a
        callback raises, the exception propagates and the remaining callbacks
        stay queued.

        Returns:
            The number of callbacks that ran
        """
        count = len(self._ready)
        if count:
            logger.debug("Running %d deferred callback(s)", count)
        for ran in range(count):
            callback = self._ready.popleft()
            try:
                callback()
            except BaseException:
                logger.debug("Deferred callback %r raised after %d ran", callback, ran)
                raise
        return count

    def run(self) -> int:
        """Poll until no callbacks are left. Returns the total number run."""
        total = 0
        while self._ready:
            total += self.poll()
        return total


class AsyncioScheduler:
    """Defers callbacks onto an asyncio event loop."""

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        """Initialize the adapter.

        Args:
            loop: Loop to schedule on. When None, the running loop at the time
                of each call_soon is used.
        """
        self._loop = loop

    def call_soon(self, callback: Callable[[], None]) -> None:
        loop = self._loop if self._loop is not None else asyncio.get_running_loop()
        loop.call_soon(callback)


_default: Scheduler = CallSoonQueue()


def get_scheduler() -> Scheduler:
    """Return the process-wide scheduler used by futures without their own."""
    return _default


def set_scheduler(scheduler: Scheduler) -> Scheduler:
    """Install a new process-wide scheduler and return the previous one."""
    global _default
    previous, _default = _default, scheduler
    return previous


def call_soon(callback: Callable[[], None]) -> None:
    """Defer callback on the process-wide scheduler."""
    _default.call_soon(callback)
