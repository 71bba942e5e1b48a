"""Task Normalizer: one awaited result for every task calling convention.

WHY
───
Tasks handed to an iterator come in several shapes: plain functions,
coroutine functions, functions that report through a trailing
``callback(err, *results)``, and functions that return *another*
function to run next.  The iterator should not care, so every task goes
through an adapter that turns it into a single awaitable outcome.

ARCHITECTURE
────────────
::

    TaskNormalizer(letta=None, max_depth=None)
      ├── .normalize(task, extra_args, context)  ─ value or raise
      └── .settle(task, extra_args, context)     ─ Ok(value) | Err(error)

    adapter = letta or relike
    value = await adapter(task, *extra_args)
    while callable(value):                        ─ thunk chain
        value = await adapter(value, *extra_args)

    relike(task, *args):
      SYNC / COROUTINE  ─ task(*args), await if awaitable
      CALLBACK          ─ task(*args, callback) → future settled by callback

Thunk chains are unbounded unless ``max_depth`` is set; a chain that
cycles forever is a caller error.

Example::

    normalizer = TaskNormalizer()
    await normalizer.normalize(lambda: 1)                  # 1
    await normalizer.normalize(lambda cb: cb(None, 2))     # 2
    await normalizer.normalize(lambda: lambda: 3)          # 3
"""

from __future__ import annotations

import asyncio
import inspect
from collections.abc import Callable, Sequence
from typing import Any

from async_base_iterator.context import use_context
from async_base_iterator.errors import CallbackError, InvalidTaskError, ThunkDepthError
from async_base_iterator.kinds import TaskKind, classify
from async_base_iterator.logging import get_logger, task_name
from async_base_iterator.result import Err, Ok, Result

logger = get_logger(__name__)

Adapter = Callable[..., Any]


async def _resolve(value: Any) -> Any:
    if inspect.isawaitable(value):
        return await value
    return value


def as_exception(err: Any, task: Any) -> BaseException:
    """Return ``err`` itself, or a :class:`CallbackError` carrying it when it is not an exception."""
    if isinstance(err, BaseException):
        return err
    return CallbackError(f"task reported a non-exception error: {err!r}", reason=err).with_context(
        task=task_name(task)
    )


def _reject(future: asyncio.Future[Any], error: BaseException) -> None:
    # Future.set_exception refuses StopIteration
    if isinstance(error, StopIteration):
        future.set_result(Err(error))
    else:
        future.set_exception(error)


async def call_with_callback(task: Callable[..., Any], args: Sequence[Any]) -> Any:
    """Run a callback-style callable and wait for its first callback call.

    Returns the reported value. A ``StopIteration`` reported or raised by
    ``task`` comes back as an ``Err`` instead of being raised.
    """
    loop = asyncio.get_running_loop()
    future: asyncio.Future[Any] = loop.create_future()

    def _settle(err: Any, results: tuple[Any, ...]) -> None:
        if future.done():
            logger.warning("task.callback_repeated", task=task_name(task))
            return
        if err is not None:
            _reject(future, as_exception(err, task))
        elif len(results) > 1:
            future.set_result(list(results))
        elif results:
            future.set_result(results[0])
        else:
            future.set_result(None)

    def callback(err: Any = None, *results: Any) -> None:
        try:
            running = asyncio.get_running_loop()
        except RuntimeError:
            running = None
        if running is loop:
            _settle(err, results)
        else:
            loop.call_soon_threadsafe(_settle, err, results)

    try:
        task(*args, callback)
    except Exception as exc:
        if future.done():
            logger.warning(
                "task.raised_after_callback",
                task=task_name(task),
                error=f"{type(exc).__name__}: {exc}",
            )
        else:
            _reject(future, exc)

    return await future


async def relike(task: Any, *args: Any) -> Any:
    """Default adapter: call ``task`` in whatever convention it uses.

    A ``StopIteration`` raised by ``task`` cannot propagate out of a
    coroutine, so it is returned wrapped in an ``Err``.

    Args:
        task: The task callable.
        *args: Extra params passed before the completion callback.

    Raises:
        InvalidTaskError: ``task`` is not callable.
    """
    if not callable(task):
        raise InvalidTaskError(f"expected a callable task, got {type(task).__name__}")

    if classify(task, len(args)) is TaskKind.CALLBACK:
        return await call_with_callback(task, args)
    try:
        value = task(*args)
    except StopIteration as exc:
        return Err(exc)
    return await _resolve(value)


class TaskNormalizer:
    """Normalizes one task (and its thunk chain) into a single result.

    An adapter reports a failure by raising, or by returning an
    :class:`~async_base_iterator.result.Err`; the chain stops at the first
    one either way.

    Parameters
    ----------
    letta : callable, optional
        Adapter override called as ``letta(task, *extra_args)``; may return a
        value or an awaitable.  Non-callable values fall back to
        :func:`relike`.
    max_depth : int, optional
        Maximum number of thunk hops after the first call.  ``None`` means
        unbounded.
    """

    def __init__(self, letta: Adapter | None = None, max_depth: int | None = None) -> None:
        self._adapter: Adapter = letta if callable(letta) else relike
        self._max_depth = max_depth

    @property
    def adapter(self) -> Adapter:
        return self._adapter

    async def settle(
        self,
        task: Any,
        extra_args: Sequence[Any] = (),
        context: Any = None,
    ) -> Result[Any]:
        """Run ``task``, follow returned callables, and capture the outcome.

        Returns ``Ok(value)`` for the first non-callable value, or
        ``Err(error)`` holding the exact object raised or reported along
        the chain (a ``ThunkDepthError`` when the chain is longer than
        ``max_depth``).
        """
        args = list(extra_args)
        try:
            with use_context(context):
                value = await _resolve(self._adapter(task, *args))
                depth = 0
                while callable(value):
                    depth += 1
                    if self._max_depth is not None and depth > self._max_depth:
                        raise ThunkDepthError(
                            f"thunk chain exceeded {self._max_depth} hop(s)",
                            depth=self._max_depth,
                        ).with_context(task=task_name(task))
                    logger.debug("task.thunk", task=task_name(task), depth=depth)
                    value = await _resolve(self._adapter(value, *args))
        except Exception as exc:
            return Err(exc)

        if isinstance(value, Err):
            return value
        return Ok(value)

    async def normalize(
        self,
        task: Any,
        extra_args: Sequence[Any] = (),
        context: Any = None,
    ) -> Any:
        """Like :meth:`settle` but return the value or raise the error.

        Python turns a ``StopIteration`` raised from a coroutine into a
        ``RuntimeError``; use :meth:`settle` to get the original object.

        Raises:
            ThunkDepthError: the chain is longer than ``max_depth``.
            Exception: the first error raised or reported along the chain.
        """
        outcome = await self.settle(task, extra_args, context)
        return outcome.unwrap()


__all__ = ["TaskNormalizer", "relike", "call_with_callback", "as_exception"]
