"""Environment-driven defaults for async-base-iterator.

``IteratorSettings`` seeds the defaults of every
:class:`~async_base_iterator.iterator.AsyncBaseIterator` built without
explicit settings, so a deployment can flip settle mode or bound thunk
chains without touching code.

Fields
──────
settle      : ASYNC_ITERATOR_SETTLE      collect errors as results
max_depth   : ASYNC_ITERATOR_MAX_DEPTH   bound on thunk-chain hops (unset = unbounded)
log_level   : ASYNC_ITERATOR_LOG_LEVEL   structlog level
log_format  : ASYNC_ITERATOR_LOG_FORMAT  json | console | auto

Examples:
    >>> from async_base_iterator.settings import IteratorSettings
    >>> IteratorSettings(settle=True).settle
    True

Tags:
    settings, configuration, pydantic, environment, async-base-iterator
"""

from __future__ import annotations

from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class IteratorSettings(BaseSettings):
    """Iterator defaults read from ``ASYNC_ITERATOR_*`` variables and ``.env``."""

    model_config = SettingsConfigDict(
        env_prefix="ASYNC_ITERATOR_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Iteration ────────────────────────────────────────────────
    settle: bool = False
    max_depth: int | None = Field(default=None, ge=1)

    # ── Observability ────────────────────────────────────────────
    log_level: LogLevel = "INFO"
    log_format: Literal["json", "console", "auto"] = "auto"

    @field_validator("log_level", mode="before")
    @classmethod
    def _upper_level(cls, value: object) -> object:
        return value.upper() if isinstance(value, str) else value


# ── Settings factory with caching ────────────────────────────────────────

_settings_cache: dict[str, IteratorSettings] = {}


def get_settings(*, _force_reload: bool = False) -> IteratorSettings:
    """Load, validate, and cache the process-wide :class:`IteratorSettings`.

    Parameters
    ----------
    _force_reload:
        Bypass cache and re-read the environment.
    """
    if not _force_reload and "default" in _settings_cache:
        return _settings_cache["default"]

    settings = IteratorSettings()
    _settings_cache["default"] = settings
    return settings


def clear_settings_cache() -> None:
    """Drop the cached settings so the next call re-reads the environment."""
    _settings_cache.clear()
