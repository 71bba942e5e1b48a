"""Async Base Iterator: ``(task, next)`` iterators for callback-style drivers.

WHY
───
Callback-style control-flow drivers (map-series, map-parallel, ...) call an
*iterator* once per item with the item and a Node-style ``next(err, result)``
continuation.  When the items are tasks of mixed calling conventions, every
such iterator has to repeat the same work: run the task whatever its shape,
fire lifecycle hooks, and decide whether a failure stops the run.
``AsyncBaseIterator`` builds that iterator once.

ARCHITECTURE
────────────
::

    AsyncBaseIterator(options)            ─ instance defaults (IteratorOptions)
      ├── .configure(**overrides)         ─ merge into defaults
      ├── .make_iterator(**overrides)     ─ TaskIterator over TaskNormalizer
      ├── .wrap_iterator(runner, ...)     ─ TaskIterator over a custom runner
      └── .done_callback(fn, done)        ─ guard for the final callback

    TaskIterator(task, next)              ─ schedules .run() on the running loop
      .run(task, next):
        before_each(task)
        settle task  ─ TaskNormalizer (thunks followed in sequence)
        Ok(v)  → after_each(None, v, task)   → next(None, v)
        Err(e) → error(e, None, task)
                 after_each(e, None, task)   → next(e, None)
                                               next(None, e)  if settle

Hook errors count as the task's failure.  Each hook runs to completion
(including one that finishes through its own continuation) before the
next step starts.  Only ``run`` calls ``next``, exactly once per task.

Example::

    iterator = AsyncBaseIterator(settle=True).make_iterator(
        after_each=lambda err, res, task: print(task.__name__, err, res),
    )
    map_series([one, two, three], iterator, on_done)
"""

from __future__ import annotations

import asyncio
import inspect
from collections.abc import Callable, Mapping
from typing import Any

from async_base_iterator.context import use_context
from async_base_iterator.errors import ConfigError
from async_base_iterator.guard import done_callback as _guard
from async_base_iterator.hooks import IterationHooks
from async_base_iterator.logging import get_logger, task_name
from async_base_iterator.normalizer import TaskNormalizer
from async_base_iterator.options import IteratorOptions
from async_base_iterator.result import Err, Ok, Result
from async_base_iterator.settings import IteratorSettings, get_settings

logger = get_logger(__name__)

Next = Callable[..., Any]
Runner = Callable[..., Any]


class TaskIterator:
    """The ``(task, next)`` callable handed to a control-flow driver.

    Parameters
    ----------
    options : IteratorOptions
        Fully merged options; fixed for the lifetime of the iterator.
    runner : callable, optional
        Replaces the :class:`TaskNormalizer`: called as
        ``runner(task, *params)`` and awaited if it returns an awaitable.
    """

    def __init__(self, options: IteratorOptions, runner: Runner | None = None) -> None:
        self.options = options
        self.hooks = IterationHooks(
            before_each=options.before_each,
            after_each=options.after_each,
            error=options.error,
            context=options.context,
        )
        self.normalizer = TaskNormalizer(letta=options.letta, max_depth=options.max_depth)
        self._runner = runner
        self._pending: set[asyncio.Task[None]] = set()

    def __call__(self, task: Any, next: Next) -> asyncio.Task[None]:
        """Schedule processing of ``task`` on the running loop.

        Raises:
            RuntimeError: no event loop is running.
        """
        loop = asyncio.get_running_loop()
        scheduled = loop.create_task(self.run(task, next), name=f"iterator:{task_name(task)}")
        self._pending.add(scheduled)
        scheduled.add_done_callback(self._pending.discard)
        return scheduled

    @property
    def pending(self) -> int:
        """Number of scheduled tasks not finished yet."""
        return len(self._pending)

    async def execute(self, task: Any) -> Result[Any]:
        """Run ``task`` alone, without hooks, and return its settlement."""
        if self._runner is None:
            return await self.normalizer.settle(task, self.options.params, self.options.context)

        try:
            with use_context(self.options.context):
                value = self._runner(task, *self.options.params)
                if inspect.isawaitable(value):
                    value = await value
        except Exception as exc:
            return Err(exc)
        if isinstance(value, Err):
            return value
        return Ok(value)

    async def run(self, task: Any, next: Next) -> None:
        """Process one task and call ``next`` exactly once."""
        name = task_name(task)
        logger.debug("iterator.task_start", task=name, settle=self.options.settle)

        outcome: Result[Any]
        try:
            await self.hooks.run_before_each(task)
        except Exception as exc:
            outcome = Err(exc)
        else:
            outcome = await self.execute(task)

        match outcome:
            case Ok(value):
                try:
                    await self.hooks.run_after_each(None, value, task)
                except Exception as exc:
                    await self._fail(exc, task, next, run_after_each=False)
                    return
                logger.debug("iterator.task_settled", task=name, ok=True)
                next(None, value)
            case Err(error):
                await self._fail(error, task, next)

    async def _fail(
        self,
        error: BaseException,
        task: Any,
        next: Next,
        run_after_each: bool = True,
    ) -> None:
        try:
            await self.hooks.run_error(error, None, task)
            if run_after_each:
                await self.hooks.run_after_each(error, None, task)
        except Exception as hook_error:
            logger.warning(
                "iterator.hook_failed",
                task=task_name(task),
                error=f"{type(hook_error).__name__}: {hook_error}",
            )
            error = hook_error

        logger.debug(
            "iterator.task_settled",
            task=task_name(task),
            ok=False,
            settle=self.options.settle,
            error=f"{type(error).__name__}: {error}",
        )
        if self.options.settle:
            next(None, error)
        else:
            next(error, None)

    def __repr__(self) -> str:
        return f"TaskIterator(settle={self.options.settle}, hooks={self.hooks!r})"


class AsyncBaseIterator:
    """Holds default options and builds :class:`TaskIterator` instances.

    Defaults come from :class:`~async_base_iterator.settings.IteratorSettings`
    (``ASYNC_ITERATOR_*`` environment variables), then ``options`` and
    keyword overrides on top.  The default execution context is a fresh
    ``dict`` owned by this instance.

    Example::

        base = AsyncBaseIterator(settle=True, error=report)
        iterator = base.make_iterator(after_each=trace)   # still settle + report
    """

    def __init__(
        self,
        options: IteratorOptions | Mapping[str, Any] | None = None,
        *,
        settings: IteratorSettings | None = None,
        **overrides: Any,
    ) -> None:
        defaults = IteratorOptions.from_settings(settings or get_settings())
        self._options = defaults.merge(options, **overrides)

    @property
    def options(self) -> IteratorOptions:
        return self._options

    def configure(
        self,
        options: IteratorOptions | Mapping[str, Any] | None = None,
        **overrides: Any,
    ) -> AsyncBaseIterator:
        """Merge ``options`` into this instance's defaults; returns ``self``."""
        self._options = self._options.merge(options, **overrides)
        return self

    def make_iterator(
        self,
        options: IteratorOptions | Mapping[str, Any] | None = None,
        **overrides: Any,
    ) -> TaskIterator:
        """Build an iterator for a control-flow driver.

        Options set here override the instance defaults field by field.
        """
        return TaskIterator(self._options.merge(options, **overrides))

    def wrap_iterator(
        self,
        runner: Runner,
        options: IteratorOptions | Mapping[str, Any] | None = None,
        **overrides: Any,
    ) -> TaskIterator:
        """Build an iterator that runs each item through ``runner``.

        ``runner(item, *params)`` may return a value or an awaitable; hooks and
        settle mode apply exactly as in :meth:`make_iterator`.

        Raises:
            ConfigError: ``runner`` is not callable.
        """
        if not callable(runner):
            raise ConfigError(f"runner must be callable, got {type(runner).__name__}").with_context(
                option="runner"
            )
        return TaskIterator(self._options.merge(options, **overrides), runner=runner)

    def done_callback(self, fn: Callable[..., Any], done: Callable[..., Any]) -> Callable[..., None]:
        """Guard ``fn`` so its exceptions go to ``done``, with this instance's context bound."""
        return _guard(fn, done, context=self._options.context)

    def __repr__(self) -> str:
        return f"AsyncBaseIterator(settle={self._options.settle})"


# ── Default instance ─────────────────────────────────────────────────────

_DEFAULT: AsyncBaseIterator | None = None


def get_default_iterator() -> AsyncBaseIterator:
    """Return the shared instance behind the module-level helpers, creating it on first use."""
    global _DEFAULT

    if _DEFAULT is None:
        _DEFAULT = AsyncBaseIterator()
    return _DEFAULT


def reset_default_iterator() -> None:
    """Forget the shared instance; the next helper call builds a new one."""
    global _DEFAULT
    _DEFAULT = None


def make_iterator(
    options: IteratorOptions | Mapping[str, Any] | None = None,
    **overrides: Any,
) -> TaskIterator:
    """:meth:`AsyncBaseIterator.make_iterator` on the default instance."""
    return get_default_iterator().make_iterator(options, **overrides)


def wrap_iterator(
    runner: Runner,
    options: IteratorOptions | Mapping[str, Any] | None = None,
    **overrides: Any,
) -> TaskIterator:
    """:meth:`AsyncBaseIterator.wrap_iterator` on the default instance."""
    return get_default_iterator().wrap_iterator(runner, options, **overrides)


def done_callback(fn: Callable[..., Any], done: Callable[..., Any]) -> Callable[..., None]:
    """:meth:`AsyncBaseIterator.done_callback` on the default instance."""
    return get_default_iterator().done_callback(fn, done)


__all__ = [
    "AsyncBaseIterator",
    "TaskIterator",
    "get_default_iterator",
    "reset_default_iterator",
    "make_iterator",
    "wrap_iterator",
    "done_callback",
]
