"""Runtime configuration for tiny_future.

The only knob is the debug/release switch. Debug futures record where they
were created and report double completions with full context; release futures
skip that bookkeeping entirely.
"""

import os

_TRUTHY = {"1", "true", "yes", "on"}


def _env_flag(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() in _TRUTHY


# `python -O` is the release build unless the environment says otherwise.
TINY_FUTURE_DEBUG = _env_flag("TINY_FUTURE_DEBUG", __debug__)

_debug = TINY_FUTURE_DEBUG


def is_debug() -> bool:
    """Whether newly created futures carry debug diagnostics."""
    return _debug


def set_debug(flag: bool) -> None:
    """Override the debug switch. Only affects futures created afterwards."""
    global _debug
    _debug = bool(flag)


__all__ = ["TINY_FUTURE_DEBUG", "is_debug", "set_debug"]
