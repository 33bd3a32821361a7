"""Per-task logging context stored in a ContextVar.

Worker tasks run concurrently on one event loop, so the job id and the
repository being processed are kept per asyncio task.
"""

from __future__ import annotations

from contextvars import ContextVar
from typing import Any, Dict


_job_context: ContextVar[Dict[str, Any]] = ContextVar("job_context", default={})


def get_job_context() -> Dict[str, Any]:
    """Return a copy of the current job context."""
    context = _job_context.get()
    return dict(context) if context else {}


def set_job_context(**values: Any) -> Dict[str, Any]:
    """Merge provided values into the stored context.

    Passing ``None`` clears the value for that key.
    """

    current = get_job_context()
    for key, value in values.items():
        if value is None:
            current.pop(key, None)
        else:
            current[key] = value
    _job_context.set(current)
    return current


def clear_job_context() -> None:
    """Remove all stored context for the active task."""

    _job_context.set({})
