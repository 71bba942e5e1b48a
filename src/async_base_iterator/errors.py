"""
Structured error types for async-base-iterator.

Only errors the library raises on its own live here. Errors raised by
tasks and hooks are never wrapped: they reach the ``next`` continuation as
the original objects, so callers can still match on their type.

Architecture:
    ::

        ┌──────────────────────────────────────────────────────────┐
        │                      IteratorError                        │
        │           (category, context, cause, to_dict)             │
        ├──────────────────────────────────────────────────────────┤
        │  InvalidTaskError   ThunkDepthError   CallbackError       │
        │  (ADAPTER, +Type)   (ADAPTER)         (TASK)              │
        │                                                           │
        │  ConfigError                                              │
        │  (CONFIG, +Value)                                         │
        └──────────────────────────────────────────────────────────┘

Examples:
    >>> error = ThunkDepthError("thunk chain exceeded 3 hops", depth=3)
    >>> error.category
    <ErrorCategory.ADAPTER: 'ADAPTER'>
    >>> error.to_dict()["depth"]
    3

Guardrails:
    ❌ DON'T: Wrap a task's own exception in an IteratorError
    ✅ DO: Forward task and hook errors untouched

Tags:
    error-handling, exception-hierarchy, error-context, async-base-iterator
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    """
    Error categories, one per row of the error taxonomy.

    Attributes:
        TASK: Raised or reported by a task
        ADAPTER: Raised while normalizing a task's calling convention
        HOOK: Raised by a lifecycle hook
        CALLBACK: Raised inside a guarded completion callback
        CONFIG: Invalid iterator options
        INTERNAL: Bugs, unexpected state
    """

    TASK = "TASK"
    ADAPTER = "ADAPTER"
    HOOK = "HOOK"
    CALLBACK = "CALLBACK"
    CONFIG = "CONFIG"
    INTERNAL = "INTERNAL"


@dataclass
class ErrorContext:
    """
    Structured metadata attached to an :class:`IteratorError`.

    Attributes:
        task: Name of the task being processed, if any
        option: Name of the offending option, for config errors
        metadata: Additional key-value pairs
    """

    task: str | None = None
    option: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging."""
        result: dict[str, Any] = {}
        for key in ("task", "option"):
            value = getattr(self, key)
            if value is not None:
                result[key] = value
        if self.metadata:
            result.update(self.metadata)
        return result


class IteratorError(Exception):
    """
    Base exception for errors raised by the library itself.

    Subclasses set ``default_category``. Every instance carries a message,
    a category, an :class:`ErrorContext` and an optional chained cause.

    Examples:
        >>> error = IteratorError("boom").with_context(task="load")
        >>> error.context.task
        'load'
        >>> error.to_dict()["category"]
        'INTERNAL'
    """

    default_category: ErrorCategory = ErrorCategory.INTERNAL

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory | None = None,
        context: ErrorContext | None = None,
        cause: BaseException | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.category = category or self.default_category
        self.context = context or ErrorContext()
        self.cause = cause

        if cause is not None:
            self.__cause__ = cause

    def with_context(self, **kwargs: Any) -> IteratorError:
        """
        Add context to this error (fluent API).

        Usage:
            raise ConfigError("bad hook").with_context(option="before_each")
        """
        for key, value in kwargs.items():
            if key != "metadata" and hasattr(self.context, key):
                setattr(self.context, key, value)
            else:
                self.context.metadata[key] = value
        return self

    def to_dict(self) -> dict[str, Any]:
        """Serialize for structured logging."""
        result: dict[str, Any] = {
            "error_type": type(self).__name__,
            "message": self.message,
            "category": self.category.value,
        }
        context = self.context.to_dict()
        if context:
            result["context"] = context
        if self.cause is not None:
            result["cause"] = f"{type(self.cause).__name__}: {self.cause}"
        return result

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.message!r}, category={self.category.value})"


class InvalidTaskError(IteratorError, TypeError):
    """The default adapter was handed something that is not callable."""

    default_category = ErrorCategory.ADAPTER


class ThunkDepthError(IteratorError):
    """A thunk chain kept returning callables past the configured ``max_depth``."""

    default_category = ErrorCategory.ADAPTER

    def __init__(self, message: str, *, depth: int, **kwargs: Any):
        super().__init__(message, **kwargs)
        self.depth = depth

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        result["depth"] = self.depth
        return result


class CallbackError(IteratorError):
    """
    A callback-style task reported an error that is not an exception.

    The raw value handed to the callback is kept on ``reason``.
    """

    default_category = ErrorCategory.TASK

    def __init__(self, message: str, *, reason: Any = None, **kwargs: Any):
        super().__init__(message, **kwargs)
        self.reason = reason


class ConfigError(IteratorError, ValueError):
    """Iterator options failed validation."""

    default_category = ErrorCategory.CONFIG


__all__ = [
    "ErrorCategory",
    "ErrorContext",
    "IteratorError",
    "InvalidTaskError",
    "ThunkDepthError",
    "CallbackError",
    "ConfigError",
]
