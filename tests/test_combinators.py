import pytest
from tiny_future.combinators import all_, and_, or_
from tiny_future.future import TinyFuture


def test_and_waits_for_both():
    """Test that and_ completes only after both inputs succeeded."""
    fut1: TinyFuture[int] = TinyFuture("fut1")
    fut2: TinyFuture[str] = TinyFuture("fut2")
    both = and_(fut1, fut2)

    fut1.complete(1)
    assert not both.done
    fut2.complete("two")
    assert both.done
    assert not both.failed
    assert both.result() is None


def test_and_fails_fast():
    """Test that and_ fails on the first failure without waiting for the other input."""
    fut1: TinyFuture[int] = TinyFuture("fut1")
    fut2: TinyFuture[int] = TinyFuture("fut2")
    both = and_(fut1, fut2)

    error = ValueError("fut1 broke")
    fut1.fail(error)
    assert both.failed
    assert both.exception() is error

    # The late completion is ignored, not reported as a double completion.
    fut2.complete(2)
    assert both.exception() is error


def test_and_operator():
    """Test that & builds an and_ combinator."""
    fut1: TinyFuture[int] = TinyFuture("fut1")
    fut2: TinyFuture[int] = TinyFuture("fut2")
    both = fut1 & fut2
    fut2.complete(2)
    fut1.complete(1)
    assert both.done and not both.failed


def test_and_with_finished_inputs_settles_on_scheduler(scheduler):
    """Test and_ over futures that already completed."""
    both = and_(TinyFuture.completed(1), TinyFuture.completed(2))
    assert not both.done
    scheduler.run()
    assert both.done


def test_or_takes_first_success():
    """Test that or_ settles with the first input and ignores the second."""
    fut1: TinyFuture[int] = TinyFuture("fut1")
    fut2: TinyFuture[int] = TinyFuture("fut2")
    either = or_(fut1, fut2)

    fut1.complete(1)
    assert either.done
    assert not either.failed

    fut2.fail(RuntimeError("too late"))
    assert not either.failed
    # The slower input still ran to completion on its own.
    assert fut2.failed


def test_or_takes_first_failure():
    """Test that or_ propagates a failure when it settles first."""
    fut1: TinyFuture[int] = TinyFuture("fut1")
    fut2: TinyFuture[int] = TinyFuture("fut2")
    either = fut1 | fut2

    fut2.fail(TimeoutError("slow"))
    assert either.failed
    with pytest.raises(TimeoutError):
        either.result()

    fut1.complete(1)
    assert either.failed


def test_all_empty():
    """Test that all_ of nothing completes right away with an empty list."""
    combined = all_()
    assert combined.result() == []
    assert all_([]).result() == []


def test_all_keeps_input_order():
    """Test that values follow input position, not completion order."""
    fut_a: TinyFuture[int] = TinyFuture("a")
    fut_b: TinyFuture[int] = TinyFuture("b")
    combined = all_(fut_a, fut_b)

    fut_b.complete(20)
    assert not combined.done
    fut_a.complete(10)
    assert combined.result() == [10, 20]


def test_all_accepts_iterable():
    """Test passing the inputs as one iterable."""
    futures = [TinyFuture(f"f{i}") for i in range(3)]
    combined = all_(f for f in futures)
    for i, future in reversed(list(enumerate(futures))):
        future.complete(i * i)
    assert combined.result() == [0, 1, 4]


def test_all_void_futures():
    """Test all_ over value-less futures."""
    futures: list[TinyFuture[None]] = [TinyFuture("v1"), TinyFuture("v2")]
    combined = all_(futures)
    for future in futures:
        future.complete()
    assert combined.done
    assert combined.result() == [None, None]


def test_all_short_circuits_on_failure():
    """Test that the first failure fails all_ without waiting for the rest."""
    futures = [TinyFuture(f"f{i}") for i in range(3)]
    combined = all_(futures)

    futures[0].complete(0)
    error = LookupError("second input")
    futures[1].fail(error)
    assert combined.failed
    assert combined.exception() is error

    # Outstanding inputs still complete; the combinator ignores them.
    futures[2].complete(2)
    assert combined.exception() is error


def test_all_with_finished_inputs(scheduler):
    """Test all_ over inputs that already completed."""
    combined = all_(TinyFuture.completed("x"), TinyFuture.completed("y"))
    assert not combined.done
    scheduler.run()
    assert combined.result() == ["x", "y"]
