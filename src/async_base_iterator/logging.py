"""
Structured logging for async-base-iterator.

The library logs through structlog. Applications that never call
:func:`configure_logging` get structlog's defaults; calling it once at
startup switches to the processor chain below.

Architecture:
    ::

        configure_logging(level="INFO", json_format=None)
            ↓
        structlog processor chain:
          1. filter_by_level / merge_contextvars
          2. add_log_level / add_logger_name
          3. TimeStamper (iso, utc)
          4. StackInfoRenderer / format_exc_info
          5. JSONRenderer (or ConsoleRenderer for a tty)
            ↓
        stdlib logger named after the module (level set on "async_base_iterator")

Examples:
    >>> from async_base_iterator.logging import configure_logging, get_logger
    >>> configure_logging(level="DEBUG", json_format=True)
    >>> logger = get_logger(__name__)
    >>> logger.debug("iterator.task_start", task="load")

Tags:
    logging, structlog, observability, async-base-iterator
"""

from __future__ import annotations

import logging
import sys
from typing import Any

import structlog
from structlog.types import Processor

from async_base_iterator.errors import ConfigError

PACKAGE_LOGGER = "async_base_iterator"

_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

_configured = False


def configure_logging(
    level: str | None = None,
    json_format: bool | None = None,
    force: bool = False,
) -> None:
    """Configure structured logging for the application.

    Subsequent calls are no-ops unless ``force=True``.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR). Defaults to
            ``IteratorSettings.log_level``.
        json_format: True for JSON, False for console, None to use
            ``IteratorSettings.log_format`` (``auto`` means JSON if not a tty)
        force: Reconfigure even if already configured

    Raises:
        ConfigError: ``level`` is not a known log level name.
    """
    global _configured

    if _configured and not force:
        return

    from async_base_iterator.settings import get_settings

    settings = get_settings()
    log_level = (level or settings.log_level).upper()
    if log_level not in _LEVELS:
        raise ConfigError(f"unknown log level {level!r}").with_context(option="log_level")

    if json_format is None:
        if settings.log_format == "auto":
            json_format = not sys.stdout.isatty()
        else:
            json_format = settings.log_format == "json"

    processors: list[Processor] = [
        structlog.stdlib.filter_by_level,
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
    ]

    if json_format:
        processors.append(structlog.processors.format_exc_info)
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=True))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, log_level),
    )
    logging.getLogger(PACKAGE_LOGGER).setLevel(getattr(logging, log_level))

    _configured = True


def is_configured() -> bool:
    """Check if logging has been configured."""
    return _configured


def get_logger(name: str | None = None) -> Any:
    """Get a structured logger.

    Args:
        name: Logger name (usually __name__)
    """
    return structlog.get_logger(name)


def task_name(task: Any) -> str:
    """Human-readable label for a task, used as a log field."""
    name = getattr(task, "__qualname__", None) or getattr(task, "__name__", None)
    if name:
        return name
    return repr(task)


__all__ = [
    "configure_logging",
    "is_configured",
    "get_logger",
    "task_name",
]
