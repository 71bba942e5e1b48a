"""
Execution context binding using contextvars.

Hooks, the adapter and the tasks themselves run with the iterator's
execution context bound, and read it through :func:`current_context`
instead of receiving it as a parameter. Each ``asyncio`` task gets its
own copy of the variable, so tasks scheduled in parallel never see each
other's binding. The context *value* is shared though: mutating a shared
``dict`` from parallel tasks is racy and unlocked.

Usage:
    def before_each(task):
        current_context()["seen"].append(task.__name__)

    iterator = make_iterator(before_each=before_each, context={"seen": []})
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Any

_UNBOUND = object()

_execution_context: ContextVar[Any] = ContextVar("execution_context", default=_UNBOUND)  # noqa: B039


def current_context(default: Any = None) -> Any:
    """Return the execution context bound for the running hook or task.

    Outside of any binding ``default`` is returned.
    """
    value = _execution_context.get()
    if value is _UNBOUND:
        return default
    return value


@contextmanager
def use_context(context: Any) -> Iterator[Any]:
    """Bind ``context`` for the duration of the ``with`` block."""
    token = _execution_context.set(context)
    try:
        yield context
    finally:
        _execution_context.reset(token)


__all__ = ["current_context", "use_context"]
