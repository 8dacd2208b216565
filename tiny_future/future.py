"""Provides lightweight futures for a single-threaded cooperative scheduler.

A future represents a value that will be available at some point, or the error
that prevented it. Consumers register a single zero-argument callback which the
producer's completion call runs synchronously. A callback registered after the
future has finished is handed to the scheduler instead, so the caller that is
still setting up never re-enters its own code.
"""

from typing import Any, Callable, Generic, TypeVar

from .diagnostics import capture_error_trace, make_diagnostics
from .errors import FutureNotReadyError, NoErrorError
from .scheduler import Scheduler, get_scheduler

T = TypeVar("T")

_UNSET: Any = object()


class TinyFutureBase:
    """State shared by every kind of future: completion, error and callback.

    Not meant to be created directly; use TinyFuture, TinyFutureVar or TinyStream.
    """

    def __init__(self, from_proc: str = "unspecified", scheduler: Scheduler | None = None) -> None:
        """Initialize a pending future.

        Args:
            from_proc: Name of the operation this future belongs to. Shows up in
                debug diagnostics, so naming it is a good habit.
            scheduler: Scheduler for deferred callbacks. Defaults to the
                process-wide scheduler at the time a callback is deferred.
        """
        self._finished = False
        self._error: BaseException | None = None
        self.error_stack_trace = ""
        self._callback: Callable[[], None] | None = None
        self._diagnostics = make_diagnostics(from_proc)
        self._scheduler = scheduler

    @property
    def scheduler(self) -> Scheduler:
        if self._scheduler is None:
            return get_scheduler()
        return self._scheduler

    @property
    def done(self) -> bool:
        """Whether this future has completed, with either a value or an error."""
        return self._finished

    @property
    def failed(self) -> bool:
        """Whether this future completed with an error."""
        return self._error is not None

    @property
    def callback(self) -> Callable[[], None] | None:
        return self._callback

    @callback.setter
    def callback(self, callback: Callable[[], None] | None) -> None:
        self.set_callback(callback)

    def set_callback(self, callback: Callable[[], None] | None) -> None:
        """Replace the callback run when this future completes.

        Only one callback is kept; registering a new one discards the previous
        registration. If the future has already finished, the callback is not
        run here but deferred to the scheduler.

        Args:
            callback: Zero-argument function, or None to clear the registration
        """
        self._callback = callback
        if callback is not None and self._has_news():
            self.scheduler.call_soon(callback)

    def on_complete(self, callback: Callable[[Any], None]) -> None:
        """Like set_callback, but callback receives this future."""
        self.set_callback(lambda: callback(self))

    def fail(self, error: BaseException) -> None:
        """Complete this future with error.

        Raises:
            FutureError: If the future already completed (debug builds only)
        """
        self._diagnostics.check_not_finished(self)
        self._finished = True
        self._error = error
        self.error_stack_trace = capture_error_trace(error)
        # Without a callback the error is only kept on the future; nothing is raised.
        self._fire()

    def exception(self) -> BaseException:
        """Return the error this future failed with.

        Raises:
            NoErrorError: If the future is pending or completed successfully
        """
        if self._error is None:
            raise NoErrorError("No error in future.", cause=self)
        return self._error

    def async_check(self) -> None:
        """Make a failure of this future raise instead of being dropped.

        Registers a callback that re-raises the stored error wherever the
        callback runs. Use this for futures nobody else will look at.
        """

        def _check() -> None:
            if self._error is not None:
                self._diagnostics.annotate(self, self._error)
                raise self._error

        self.set_callback(_check)

    def _has_news(self) -> bool:
        return self._finished

    def _fire(self) -> None:
        if self._callback is not None:
            self._callback()

    def __repr__(self) -> str:
        if not self._finished:
            state = "pending"
        elif self._error is not None:
            state = f"failed: {self._error!r}"
        else:
            state = "finished"
        origin = self._diagnostics.describe()
        return f"<{type(self).__name__}{' ' + origin if origin else ''} {state}>"


class TinyFuture(TinyFutureBase, Generic[T]):
    """A future that completes with a value of type T.

    TinyFuture[None] is the value-less case: complete() with no argument.
    """

    def __init__(self, from_proc: str = "unspecified", scheduler: Scheduler | None = None) -> None:
        super().__init__(from_proc, scheduler)
        self._value: T | None = None

    @classmethod
    def completed(cls, value: T = None, from_proc: str = "unspecified") -> "TinyFuture[T]":
        """Create a future that has already succeeded with value."""
        future: TinyFuture[T] = cls(from_proc)
        future.complete(value)
        return future

    @classmethod
    def failed_with(cls, error: BaseException, from_proc: str = "unspecified") -> "TinyFuture[T]":
        """Create a future that has already failed with error."""
        future: TinyFuture[T] = cls(from_proc)
        future.fail(error)
        return future

    def complete(self, value: T = None) -> None:
        """Complete this future with value and run the callback, if any.

        Raises:
            FutureError: If the future already completed (debug builds only)
        """
        self._diagnostics.check_not_finished(self)
        self._value = value
        self._finished = True
        self._fire()

    def result(self) -> T:
        """Return the value of this future.

        Returns:
            The value the future completed with (None for value-less futures)

        Raises:
            FutureNotReadyError: If the future has not completed yet
            Exception: The stored error, if the future failed
        """
        if not self._finished:
            raise FutureNotReadyError("Future still in progress.", cause=self)
        if self._error is not None:
            self._diagnostics.annotate(self, self._error)
            raise self._error
        return self._value  # type: ignore[return-value]

    def __and__(self, other: TinyFutureBase) -> "TinyFuture[None]":
        from .combinators import and_

        return and_(self, other)

    def __or__(self, other: TinyFutureBase) -> "TinyFuture[None]":
        from .combinators import or_

        return or_(self, other)


class TinyFutureVar(Generic[T]):
    """A reusable future cell.

    Wraps a single TinyFuture and can re-arm it with reset() so a producer on a
    hot path completes the same object over and over instead of allocating a
    new future each time. Everyone holding the cell, or its underlying future,
    observes the same state.
    """

    def __init__(self, from_proc: str = "unspecified", scheduler: Scheduler | None = None) -> None:
        self._future: TinyFuture[T] = TinyFuture(from_proc, scheduler)

    @classmethod
    def wrap(cls, future: TinyFuture[T]) -> "TinyFutureVar[T]":
        """Create a cell sharing an existing future."""
        var = cls.__new__(cls)
        var._future = future
        return var

    @property
    def future(self) -> TinyFuture[T]:
        """The underlying future."""
        return self._future

    def reset(self) -> None:
        """Mark the future pending again. The value and callback are kept."""
        self._future._finished = False
        self._future._error = None
        self._future.error_stack_trace = ""

    def peek(self) -> T | None:
        """Return the stored value whatever the state. Never raises."""
        return self._future._value

    def complete(self, value: T = _UNSET) -> None:
        """Complete the cell, overwriting the stored value if one is given."""
        if value is _UNSET:
            value = self._future._value  # type: ignore[assignment]
        self._future.complete(value)

    def fail(self, error: BaseException) -> None:
        self._future.fail(error)

    def result(self) -> T:
        return self._future.result()

    def exception(self) -> BaseException:
        return self._future.exception()

    def async_check(self) -> None:
        self._future.async_check()

    def on_complete(self, callback: Callable[[TinyFuture[T]], None]) -> None:
        self._future.on_complete(callback)

    def set_callback(self, callback: Callable[[], None] | None) -> None:
        self._future.set_callback(callback)

    @property
    def callback(self) -> Callable[[], None] | None:
        return self._future.callback

    @callback.setter
    def callback(self, callback: Callable[[], None] | None) -> None:
        self._future.set_callback(callback)

    @property
    def done(self) -> bool:
        return self._future.done

    @property
    def failed(self) -> bool:
        return self._future.failed

    def __repr__(self) -> str:
        return f"<TinyFutureVar of {self._future!r}>"
