import pytest

from tiny_future import config
from tiny_future.scheduler import CallSoonQueue, set_scheduler


@pytest.fixture(autouse=True)
def scheduler():
    """Give every test its own scheduler and debug diagnostics."""
    queue = CallSoonQueue()
    previous = set_scheduler(queue)
    was_debug = config.is_debug()
    config.set_debug(True)
    yield queue
    config.set_debug(was_debug)
    set_scheduler(previous)
