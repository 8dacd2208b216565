"""Combinators building a new future out of existing ones.

Each combinator takes over the callback slot of its inputs. Once the combined
future has settled, later completions of the inputs are ignored; inputs are
never cancelled.
"""

from typing import Any, Iterable, TypeVar

from .future import TinyFuture, TinyFutureBase

T = TypeVar("T")


def and_(fut1: TinyFutureBase, fut2: TinyFutureBase) -> TinyFuture[None]:
    """Return a future completing once both fut1 and fut2 have completed.

    The returned future fails as soon as either input fails.
    """
    combined: TinyFuture[None] = TinyFuture("combinators.and_")

    def _first() -> None:
        if not combined.done:
            if fut1.failed:
                combined.fail(fut1.exception())
            elif fut2.done:
                combined.complete()

    def _second() -> None:
        if not combined.done:
            if fut2.failed:
                combined.fail(fut2.exception())
            elif fut1.done:
                combined.complete()

    fut1.set_callback(_first)
    fut2.set_callback(_second)
    return combined


def or_(fut1: TinyFutureBase, fut2: TinyFutureBase) -> TinyFuture[None]:
    """Return a future settling like whichever of fut1 or fut2 settles first.

    A failure of the first input to settle is propagated; its value is not.
    """
    combined: TinyFuture[None] = TinyFuture("combinators.or_")

    def _settled(fut: TinyFutureBase) -> None:
        if combined.done:
            return
        if fut.failed:
            combined.fail(fut.exception())
        else:
            combined.complete()

    fut1.on_complete(_settled)
    fut2.on_complete(_settled)
    return combined


def all_(*futs: TinyFuture[T] | Iterable[TinyFuture[T]]) -> TinyFuture[list[T]]:
    """Return a future completing once every input has completed.

    Accepts the futures as positional arguments or as a single iterable. The
    result holds the input values in input order, whatever order they complete
    in. The first failure fails the result right away. No inputs means an
    immediate empty list.
    """
    if len(futs) == 1 and not isinstance(futs[0], TinyFutureBase):
        futures: list[TinyFuture[T]] = list(futs[0])  # type: ignore[arg-type]
    else:
        futures = list(futs)  # type: ignore[arg-type]

    combined: TinyFuture[list[T]] = TinyFuture("combinators.all_")
    values: list[Any] = [None] * len(futures)
    completed = 0

    def _watch(index: int, fut: TinyFuture[T]) -> None:
        def _settled() -> None:
            nonlocal completed
            completed += 1
            if combined.done:
                return
            if fut.failed:
                combined.fail(fut.exception())
                return
            values[index] = fut.result()
            if completed == len(values):
                combined.complete(values)

        fut.set_callback(_settled)

    for index, fut in enumerate(futures):
        _watch(index, fut)

    if not futures:
        combined.complete(values)
    return combined
