"""Debug instrumentation attached to every future.

A future holds exactly one Diagnostics object, picked when it is created.
DebugDiagnostics remembers where the future came from so that a double
completion or a failed read can be traced back to its origin.
ReleaseDiagnostics carries no state and turns every check into a no-op.
"""

from abc import ABC, abstractmethod
import itertools
import logging
import os
import textwrap
import traceback
from typing import Any

from . import config
from .errors import FutureError

logger = logging.getLogger(__name__)

_PACKAGE_DIR = os.path.dirname(os.path.abspath(__file__))
_ids = itertools.count()


def _format_stack() -> str:
    """Format the current stack, leaving out frames from this package."""
    frames = [
        frame
        for frame in traceback.extract_stack()
        if not os.path.abspath(frame.filename).startswith(_PACKAGE_DIR + os.sep)
    ]
    return "".join(traceback.format_list(frames))


def _indent(text: str) -> str:
    return textwrap.indent(text.strip(), " " * 4)


def capture_error_trace(error: BaseException) -> str:
    """Return the traceback of error, or the current stack if it has none."""
    if error.__traceback__ is not None:
        return "".join(traceback.format_tb(error.__traceback__))
    return _format_stack()


class Diagnostics(ABC):
    """What a future needs from its instrumentation."""

    @property
    @abstractmethod
    def label(self) -> str:
        """Name of the operation that created the future."""

    @abstractmethod
    def check_not_finished(self, future: Any) -> None:
        """Raise FutureError if future has already been completed."""

    @abstractmethod
    def annotate(self, future: Any, error: BaseException) -> None:
        """Attach the failure's origin to error before it is re-raised."""

    @abstractmethod
    def describe(self) -> str:
        """Short text used in the future's repr."""


class DebugDiagnostics(Diagnostics):
    """Diagnostics for debug builds: id, creation label and creation stack."""

    def __init__(self, from_proc: str) -> None:
        self.id = next(_ids)
        self.from_proc = from_proc
        self.stack_trace = _format_stack()
        self._annotated: BaseException | None = None

    @property
    def label(self) -> str:
        return self.from_proc

    def check_not_finished(self, future: Any) -> None:
        if not future._finished:
            return
        lines = [
            "An attempt was made to complete a Future more than once. Details:",
            f"  Future ID: {self.id}",
            f"  Created in proc: {self.from_proc}",
            "  Stack trace to moment of creation:",
            _indent(self.stack_trace),
        ]
        value = getattr(future, "_value", None)
        if isinstance(value, str):
            lines += ["  Contents (string):", _indent(repr(value))]
        lines += ["  Stack trace to moment of secondary completion:", _indent(_format_stack())]
        logger.debug("Double completion of future %d (%s)", self.id, self.from_proc)
        raise FutureError("\n".join(lines), cause=future)

    def annotate(self, future: Any, error: BaseException) -> None:
        if self._annotated is error:
            return
        self._annotated = error
        trace = future.error_stack_trace.strip()
        note = f"  {self.from_proc}'s lead up to read of failed Future:\n"
        note += _indent(trace) if trace else "    Empty stack trace."
        error.add_note(note)

    def describe(self) -> str:
        return f"#{self.id} from {self.from_proc}"


class ReleaseDiagnostics(Diagnostics):
    """Diagnostics for release builds. Holds nothing and checks nothing."""

    @property
    def label(self) -> str:
        return "unspecified"

    def check_not_finished(self, future: Any) -> None:
        pass

    def annotate(self, future: Any, error: BaseException) -> None:
        pass

    def describe(self) -> str:
        return ""


RELEASE = ReleaseDiagnostics()


def make_diagnostics(from_proc: str) -> Diagnostics:
    """Pick the diagnostics variant for a new future."""
    if config.is_debug():
        return DebugDiagnostics(from_proc)
    return RELEASE
