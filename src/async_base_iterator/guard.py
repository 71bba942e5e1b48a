"""Guard for a driver's final completion callback.

The final callback a driver receives runs from inside the iterator's
``asyncio`` task, because the last ``next`` call is what triggers it.  If
it raises, the exception lands in that task instead of the code that
started the run.  Wrapping the callback with :func:`done_callback`
redirects such an exception to ``done``::

    map_series(tasks, make_iterator(), done_callback(on_results, on_finished))

    def on_finished(err=None):
        ...  # err is whatever on_results raised, or no argument at all
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from async_base_iterator.context import use_context
from async_base_iterator.logging import get_logger, task_name

logger = get_logger(__name__)


def done_callback(
    fn: Callable[..., Any],
    done: Callable[..., Any],
    context: Any = None,
) -> Callable[..., None]:
    """Wrap ``fn`` so an exception it raises is passed to ``done``.

    Args:
        fn: Callback receiving whatever the returned wrapper is called with.
        done: Called as ``done(err)`` when ``fn`` raises, ``done()`` otherwise.
        context: Execution context bound while ``fn`` and ``done`` run.

    Returns:
        The guarded callback.
    """

    def guarded(*args: Any, **kwargs: Any) -> None:
        with use_context(context):
            try:
                fn(*args, **kwargs)
            except Exception as exc:
                logger.debug(
                    "done_callback.caught",
                    callback=task_name(fn),
                    error=f"{type(exc).__name__}: {exc}",
                )
                done(exc)
                return
            done()

    return guarded


__all__ = ["done_callback"]
