"""Exceptions raised by tiny_future."""

from typing import Any


class FutureError(Exception):
    """Raised when a future is misused, e.g. completed more than once.

    Attributes:
        cause: The future that produced this error, if known
    """

    def __init__(self, message: str, cause: Any = None) -> None:
        super().__init__(message)
        self.cause = cause


class FutureNotReadyError(FutureError, ValueError):
    """Raised when reading the result of a future that is still pending."""


class NoErrorError(FutureError, ValueError):
    """Raised when asking a future for its error when it holds none."""


class StreamClosedError(FutureError, ValueError):
    """Reported (as a failed future) when writing to a closed stream."""
