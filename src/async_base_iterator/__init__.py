"""Async Base Iterator: hooks, settle mode and task normalization for ``(task, next)`` drivers.

WHY
───
Callback-style control-flow drivers expect an iterator ``(task, next)``
that calls ``next(err, result)`` exactly once.  This package builds that
iterator for tasks of any calling convention, with lifecycle hooks around
each task and an optional settle mode that turns failures into results.

ARCHITECTURE
────────────
::

    AsyncBaseIterator ─ defaults (IteratorOptions ← IteratorSettings)
      │
      ▼
    TaskIterator (task, next)
      ├── IterationHooks   ─ before_each / after_each / error
      ├── TaskNormalizer   ─ sync | callback | coroutine | thunk chain
      │     └── classify   ─ TaskKind dispatch
      └── Ok / Err         ─ settlement → next(...)

    done_callback(fn, done) ─ guard for the driver's final callback

Usage::

    from async_base_iterator import make_iterator, done_callback

    iterator = make_iterator(settle=True)
    map_series(tasks, iterator, done_callback(on_results, on_finished))
"""

from async_base_iterator.context import current_context, use_context
from async_base_iterator.errors import (
    CallbackError,
    ConfigError,
    ErrorCategory,
    ErrorContext,
    InvalidTaskError,
    IteratorError,
    ThunkDepthError,
)
from async_base_iterator.guard import done_callback as guard_callback
from async_base_iterator.hooks import IterationHooks
from async_base_iterator.iterator import (
    AsyncBaseIterator,
    TaskIterator,
    done_callback,
    get_default_iterator,
    make_iterator,
    reset_default_iterator,
    wrap_iterator,
)
from async_base_iterator.kinds import TaskKind, callback_task, classify, sync_task, task_kind
from async_base_iterator.logging import configure_logging, get_logger
from async_base_iterator.normalizer import TaskNormalizer, relike
from async_base_iterator.options import IteratorOptions, coerce_options
from async_base_iterator.result import Err, Ok, Result, collect_errors, partition_results
from async_base_iterator.settings import IteratorSettings, get_settings

__version__ = "0.1.0"

__all__ = [
    # Iterator
    "AsyncBaseIterator",
    "TaskIterator",
    "make_iterator",
    "wrap_iterator",
    "done_callback",
    "guard_callback",
    "get_default_iterator",
    "reset_default_iterator",
    # Building blocks
    "TaskNormalizer",
    "relike",
    "IterationHooks",
    "TaskKind",
    "classify",
    "task_kind",
    "callback_task",
    "sync_task",
    "current_context",
    "use_context",
    # Settlement
    "Ok",
    "Err",
    "Result",
    "partition_results",
    "collect_errors",
    # Configuration
    "IteratorOptions",
    "coerce_options",
    "IteratorSettings",
    "get_settings",
    "configure_logging",
    "get_logger",
    # Errors
    "IteratorError",
    "ErrorCategory",
    "ErrorContext",
    "InvalidTaskError",
    "ThunkDepthError",
    "CallbackError",
    "ConfigError",
]
