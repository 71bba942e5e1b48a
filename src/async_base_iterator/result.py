"""
Settlement envelope for one task's outcome.

A task settles either as ``Ok(value)`` or ``Err(error)``. The iterator
branches on the settlement before calling ``next``; in settle mode the
``error`` object itself (not the ``Err`` wrapper) becomes the result the
driver collects, so a finished run yields a plain list where values and
exceptions sit side by side. :func:`partition_results` and
:func:`collect_errors` split such a list back apart.

Examples:
    >>> match Ok(5):
    ...     case Ok(value):
    ...         print(value)
    ...     case Err(error):
    ...         print(error)
    5

    >>> values, errors = partition_results([1, ValueError("two"), 3])
    >>> values
    [1, 3]
    >>> errors
    [ValueError('two')]

Tags:
    result-pattern, settlement, error-handling, async-base-iterator
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class Ok(Generic[T]):
    """Successful settlement containing a value."""

    value: T

    def is_ok(self) -> bool:
        return True

    def is_err(self) -> bool:
        return False

    def unwrap(self) -> T:
        """Get the value. Safe for Ok."""
        return self.value

    def unwrap_or(self, default: T) -> T:
        return self.value

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {"ok": True, "value": self.value}

    def __repr__(self) -> str:
        return f"Ok({self.value!r})"


@dataclass(frozen=True, slots=True)
class Err(Generic[T]):
    """Failed settlement containing the original exception, unmodified."""

    error: BaseException

    def is_ok(self) -> bool:
        return False

    def is_err(self) -> bool:
        return True

    def unwrap(self) -> T:
        """Re-raise the wrapped error."""
        raise self.error

    def unwrap_or(self, default: T) -> T:
        return default

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        to_dict = getattr(self.error, "to_dict", None)
        if callable(to_dict):
            return {"ok": False, "error": to_dict()}
        return {
            "ok": False,
            "error": {"error_type": type(self.error).__name__, "message": str(self.error)},
        }

    def __repr__(self) -> str:
        return f"Err({self.error!r})"


Result = Ok[T] | Err[T]


def partition_results(results: Iterable[Any]) -> tuple[list[Any], list[BaseException]]:
    """Split a settle-mode results list into ``(values, errors)``.

    An item counts as an error when it is an exception instance; order is
    preserved within each list.
    """
    values: list[Any] = []
    errors: list[BaseException] = []
    for item in results:
        if isinstance(item, BaseException):
            errors.append(item)
        else:
            values.append(item)
    return values, errors


def collect_errors(results: Iterable[Any]) -> list[BaseException]:
    """Return only the exceptions from a settle-mode results list."""
    return partition_results(results)[1]


__all__ = ["Ok", "Err", "Result", "partition_results", "collect_errors"]
