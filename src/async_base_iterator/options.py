"""
Iterator options and their merge rules.

``IteratorOptions`` is the single typed configuration of an iterator:
hooks, settle mode, execution context, extra params, adapter override and
thunk-depth bound.  An :class:`~async_base_iterator.iterator.AsyncBaseIterator`
holds one instance as its defaults; each ``make_iterator`` call merges its
own options on top, field by field.  Only fields the caller actually set
override the defaults, so ``make_iterator(settle=True)`` keeps the
instance's hooks.

Examples:
    >>> base = IteratorOptions(settle=True, params=[1])
    >>> merged = base.merge({"afterEach": print})
    >>> merged.settle, merged.params, merged.after_each is print
    (True, [1], True)

    camelCase names are accepted next to the snake_case ones:

    >>> coerce_options({"beforeEach": print}).before_each is print
    True
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from async_base_iterator.errors import ConfigError

if TYPE_CHECKING:
    from async_base_iterator.settings import IteratorSettings


class IteratorOptions(BaseModel):
    """Validated iterator configuration."""

    model_config = ConfigDict(
        extra="forbid",
        populate_by_name=True,
        arbitrary_types_allowed=True,
    )

    # ── Hooks ────────────────────────────────────────────────────
    before_each: Callable[..., Any] | None = Field(
        default=None, alias="beforeEach", description="before_each(task[, next])"
    )
    after_each: Callable[..., Any] | None = Field(
        default=None, alias="afterEach", description="after_each(err, result, task[, next])"
    )
    error: Callable[..., Any] | None = Field(
        default=None, description="error(err, result, task[, next])"
    )

    # ── Behavior ─────────────────────────────────────────────────
    settle: bool = Field(default=False, description="Pass task errors to next as results")
    context: Any = Field(default_factory=dict, description="Bound for hooks, adapter and tasks")
    params: list[Any] = Field(default_factory=list, description="Extra args passed to each task")
    letta: Any = Field(default=None, description="Adapter override letta(task, *params)")
    max_depth: int | None = Field(
        default=None, ge=1, alias="maxDepth", description="Thunk-chain bound, None = unbounded"
    )

    @field_validator("params", mode="before")
    @classmethod
    def _params_sequence(cls, value: Any) -> list[Any]:
        if isinstance(value, (list, tuple)):
            return list(value)
        return []

    @field_validator("letta", mode="before")
    @classmethod
    def _letta_callable(cls, value: Any) -> Any:
        return value if callable(value) else None

    @classmethod
    def from_settings(cls, settings: IteratorSettings) -> IteratorOptions:
        """Defaults taken from environment-driven settings."""
        return cls(settle=settings.settle, max_depth=settings.max_depth)

    def explicit(self) -> dict[str, Any]:
        """Fields the caller set explicitly, keyed by field name."""
        return {name: getattr(self, name) for name in self.model_fields_set}

    def merge(self, override: IteratorOptions | Mapping[str, Any] | None = None, **kwargs: Any) -> IteratorOptions:
        """Return a copy with the explicitly set fields of ``override`` applied.

        Fields ``override`` leaves unset keep this instance's values.
        """
        if override is None and not kwargs:
            return self
        patch = coerce_options(override, **kwargs)
        return self.model_copy(update=patch.explicit())


def coerce_options(options: IteratorOptions | Mapping[str, Any] | None = None, **overrides: Any) -> IteratorOptions:
    """Turn a mapping, options instance or keyword overrides into ``IteratorOptions``.

    Raises:
        ConfigError: an option has an invalid value or an unknown name.
    """
    if isinstance(options, IteratorOptions) and not overrides:
        return options

    data: dict[str, Any]
    if options is None:
        data = {}
    elif isinstance(options, IteratorOptions):
        data = options.explicit()
    elif isinstance(options, Mapping):
        data = dict(options)
    else:
        raise ConfigError(f"options must be a mapping or IteratorOptions, got {type(options).__name__}")
    data.update(overrides)

    try:
        return IteratorOptions.model_validate(data)
    except ValidationError as exc:
        first = exc.errors()[0]
        option = ".".join(str(part) for part in first["loc"]) or None
        raise ConfigError(
            f"invalid iterator option {option!r}: {first['msg']}", cause=exc
        ).with_context(option=option) from exc


__all__ = ["IteratorOptions", "coerce_options"]
