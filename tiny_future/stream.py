"""Provides TinyStream, a future that carries a FIFO queue of values.

The stream's callback is signalled every time a value is written and once more
when the stream is completed. Readers call read() to get a future for the next
value. The queue is unbounded; values are only removed by reads.
"""

from collections import deque
from typing import Callable, Generic, TypeVar

from .errors import StreamClosedError
from .future import TinyFuture, TinyFutureBase
from .scheduler import Scheduler

T = TypeVar("T")


class TinyStream(TinyFutureBase, Generic[T]):
    """A future acting as a queue of values with an end-of-data signal."""

    def __init__(self, from_proc: str = "unspecified", scheduler: Scheduler | None = None) -> None:
        super().__init__(from_proc, scheduler)
        self._queue: deque[T] = deque()

    def __len__(self) -> int:
        """Number of values written but not yet read."""
        return len(self._queue)

    @property
    def closed(self) -> bool:
        """Whether the stream no longer accepts writes."""
        return self._finished

    @property
    def done(self) -> bool:
        """True once the stream is closed and every value has been read."""
        return self._finished and not self._queue

    def write(self, value: T) -> TinyFuture[None]:
        """Append value to the stream and signal the callback.

        Returns:
            A completed future, or a failed one (StreamClosedError) if the
            stream was already closed. A closed stream is left untouched.
        """
        written: TinyFuture[None] = TinyFuture("TinyStream.write", self._scheduler)
        if self._finished:
            msg = "TinyStream is finished and so no longer accepts new data."
            written.fail(StreamClosedError(msg, cause=self))
            return written
        self._queue.append(value)
        self._fire()
        written.complete()
        return written

    def complete(self) -> None:
        """Close the stream. Values already queued can still be read.

        Raises:
            FutureError: If the stream was already closed (debug builds only)
        """
        self._diagnostics.check_not_finished(self)
        self._finished = True
        self._fire()

    def read(self) -> TinyFuture[tuple[bool, T | None]]:
        """Return a future for the oldest unread value.

        The future completes with (True, value), removing value from the
        stream, or with (False, None) once the stream is closed and drained.
        A stream closed with fail() makes drained reads fail with its error.
        """
        result: TinyFuture[tuple[bool, T | None]] = TinyFuture("TinyStream.read", self._scheduler)
        self.set_callback(_Reader(self, result, self._callback))
        return result

    def _has_news(self) -> bool:
        return self._finished or bool(self._queue)


class _Reader(Generic[T]):
    """One-shot stream callback that serves a single read().

    It remembers the callback that was installed before it. After serving its
    read it puts that callback back in place and runs it, so stacked readers
    and user callbacks all keep getting signalled.
    """

    def __init__(
        self,
        stream: TinyStream[T],
        result: TinyFuture[tuple[bool, T | None]],
        saved: Callable[[], None] | None,
    ) -> None:
        self.stream = stream
        self.result = result
        self.saved = saved
        self.fired = False

    def __call__(self) -> None:
        stream = self.stream
        if not self.fired:
            if not stream._queue and not stream._finished:
                return
            self.fired = True
            if stream._callback is self:
                stream._callback = self.saved
            self._serve()
        elif stream._callback is self:
            stream._callback = self.saved
        if self.saved is not None:
            self.saved()

    def _serve(self) -> None:
        stream, result = self.stream, self.result
        if result.done:
            return
        if stream._queue:
            result.complete((True, stream._queue.popleft()))
        elif stream._error is not None:
            result.fail(stream._error)
        else:
            result.complete((False, None))
