from __future__ import annotations

import logging
import os as _os
import sys
from typing import Optional

TRACE_ENV = "NAIVE_DEBUG_PY_TRACE"
LOG_LEVEL_ENV = "NAIVE_LOG_LEVEL"

_TRUTHY = ("1", "true", "yes", "on")


def env_flag(name: str) -> bool:
    """True when the environment variable is set to a truthy word."""
    return _os.environ.get(name, "").strip().lower() in _TRUTHY


def debug_py_trace_enabled() -> bool:
    """Whether fatal errors should also show the Python traceback."""
    return env_flag(TRACE_ENV)


def set_debug_py_trace(enabled: bool) -> None:
    if enabled:
        _os.environ[TRACE_ENV] = "1"
    else:
        _os.environ.pop(TRACE_ENV, None)


def log_level(default: int = logging.WARNING) -> int:
    """Resolve NAIVE_LOG_LEVEL (a level name or number) to a logging level."""
    raw: Optional[str] = _os.environ.get(LOG_LEVEL_ENV)
    if not raw:
        return default

    raw = raw.strip()
    if raw.isdigit():
        return int(raw)

    level = logging.getLevelName(raw.upper())
    return level if isinstance(level, int) else default


# A naive call costs roughly twenty Python frames.
RECURSION_LIMIT = 30_000


def raise_host_limits() -> None:
    """Lift the Python limits that would otherwise cap naive recursion depth and integer size."""
    if sys.getrecursionlimit() < RECURSION_LIMIT:
        sys.setrecursionlimit(RECURSION_LIMIT)

    sys.set_int_max_str_digits(0)
