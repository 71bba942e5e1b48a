"""Lifecycle hooks fired around each task.

Hooks are optional; an absent hook is a no-op.  Each hook is classified
the way tasks are (see :func:`~async_base_iterator.kinds.classify`), with
its trailing continuation playing the part of a task's callback:

    ==========================================  ==================================
    hook                                        finishes when
    ==========================================  ==================================
    ``def before_each(task)``                   it returns
    ``async def before_each(task, next)``       its coroutine completes
    ``def before_each(task, next)``             it calls ``next()`` (or raises)
    ==========================================  ==================================

The continuation a hook receives belongs to the hook alone: calling
``next(err)`` fails the hook with ``err``, calling ``next()`` completes
it.  It is never the driver's ``next``.  Every hook runs with the
iterator's execution context bound (see
:func:`~async_base_iterator.context.current_context`).

Hook signatures (continuation optional unless callback-style)::

    before_each(task, next)
    after_each(err, result, task, next)
    error(err, result, task, next)

Errors raised or reported by a hook are not caught here.
"""

from __future__ import annotations

import inspect
from collections.abc import Callable
from typing import Any

from async_base_iterator.context import use_context
from async_base_iterator.kinds import TaskKind, accepts_positional, classify
from async_base_iterator.normalizer import as_exception, call_with_callback
from async_base_iterator.result import Err

Hook = Callable[..., Any]


class _Signal:
    """Continuation for hooks that finish by returning; keeps the first error reported."""

    __slots__ = ("error",)

    def __init__(self) -> None:
        self.error: Any = None

    def __call__(self, err: Any = None, *results: Any) -> None:
        if err is not None and self.error is None:
            self.error = err


class IterationHooks:
    """Invokes the configured hooks with the execution context bound."""

    def __init__(
        self,
        before_each: Hook | None = None,
        after_each: Hook | None = None,
        error: Hook | None = None,
        context: Any = None,
    ) -> None:
        self.before_each = before_each
        self.after_each = after_each
        self.error = error
        self.context = context

    async def _invoke(self, hook: Hook | None, *args: Any) -> None:
        if hook is None:
            return
        with use_context(self.context):
            if classify(hook, len(args)) is TaskKind.CALLBACK:
                outcome = await call_with_callback(hook, args)
                if isinstance(outcome, Err):
                    raise outcome.error
                return

            if not accepts_positional(hook, len(args) + 1):
                outcome = hook(*args)
                if inspect.isawaitable(outcome):
                    await outcome
                return

            signal = _Signal()
            outcome = hook(*args, signal)
            if inspect.isawaitable(outcome):
                await outcome
            if signal.error is not None:
                raise as_exception(signal.error, hook)

    async def run_before_each(self, task: Any) -> None:
        await self._invoke(self.before_each, task)

    async def run_after_each(self, err: BaseException | None, result: Any, task: Any) -> None:
        await self._invoke(self.after_each, err, result, task)

    async def run_error(self, err: BaseException | None, result: Any, task: Any) -> None:
        await self._invoke(self.error, err, result, task)

    def __repr__(self) -> str:
        configured = [
            name for name in ("before_each", "after_each", "error") if getattr(self, name) is not None
        ]
        return f"IterationHooks({', '.join(configured) or 'none'})"


__all__ = ["IterationHooks", "Hook"]
