"""Task classification: which calling convention a task uses.

WHY
───
A task may return its value, hand it to a trailing callback, or be a
coroutine function. The adapter needs to know which before calling it,
because a callback-style task must be given a callback and a synchronous
one must not.

RULES
─────
::

    explicit tag (@callback_task / @sync_task / @task_kind)  → that kind
    coroutine function                                       → COROUTINE
    required positional params > number of extra params      → CALLBACK
    anything else (incl. *args, builtins without signature)  → SYNC

Example::

    @callback_task
    def fetch(url, done):
        ...

    classify(fetch)                   # TaskKind.CALLBACK
    classify(lambda: 1)               # TaskKind.SYNC
    classify(lambda cb: cb(None, 2))  # TaskKind.CALLBACK
"""

from __future__ import annotations

import inspect
from collections.abc import Callable
from enum import Enum
from typing import Any, TypeVar

F = TypeVar("F", bound=Callable[..., Any])

TASK_KIND_ATTR = "__task_kind__"


class TaskKind(str, Enum):
    """Calling convention of a task."""

    SYNC = "sync"
    CALLBACK = "callback"
    COROUTINE = "coroutine"


def task_kind(kind: TaskKind | str) -> Callable[[F], F]:
    """Decorator factory that tags a task with an explicit :class:`TaskKind`."""
    resolved = TaskKind(kind)

    def decorator(fn: F) -> F:
        setattr(fn, TASK_KIND_ATTR, resolved)
        return fn

    return decorator


def callback_task(fn: F) -> F:
    """Tag ``fn`` as callback-style regardless of its signature."""
    return task_kind(TaskKind.CALLBACK)(fn)


def sync_task(fn: F) -> F:
    """Tag ``fn`` as synchronous regardless of its signature."""
    return task_kind(TaskKind.SYNC)(fn)


def _required_positional(sig: inspect.Signature) -> int | None:
    # None means "cannot tell" (the callable takes *args)
    count = 0
    for param in sig.parameters.values():
        if param.kind is inspect.Parameter.VAR_POSITIONAL:
            return None
        if param.kind in (
            inspect.Parameter.POSITIONAL_ONLY,
            inspect.Parameter.POSITIONAL_OR_KEYWORD,
        ) and param.default is inspect.Parameter.empty:
            count += 1
    return count


def classify(task: Callable[..., Any], arg_count: int = 0) -> TaskKind:
    """Decide the calling convention of ``task``.

    Args:
        task: The task callable.
        arg_count: Number of extra params the task will be called with,
            not counting a completion callback.
    """
    tagged = getattr(task, TASK_KIND_ATTR, None)
    if tagged is not None:
        return TaskKind(tagged)

    if inspect.iscoroutinefunction(task):
        return TaskKind.COROUTINE

    try:
        sig = inspect.signature(task)
    except (TypeError, ValueError):
        return TaskKind.SYNC

    required = _required_positional(sig)
    if required is not None and required > arg_count:
        return TaskKind.CALLBACK
    return TaskKind.SYNC


def accepts_positional(fn: Callable[..., Any], count: int) -> bool:
    """Whether ``fn`` can be called with ``count`` positional arguments.

    Callables without an inspectable signature count as not accepting them.
    """
    try:
        sig = inspect.signature(fn)
    except (TypeError, ValueError):
        return False
    try:
        sig.bind(*([None] * count))
    except TypeError:
        return False
    return True


__all__ = [
    "TaskKind",
    "TASK_KIND_ATTR",
    "classify",
    "accepts_positional",
    "task_kind",
    "callback_task",
    "sync_task",
]
