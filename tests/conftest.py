"""
Shared pytest fixtures and configuration for async-base-iterator tests.

This module provides:
- Settings / default-instance cleanup for test isolation
- An ``AsyncBaseIterator`` built from fixed settings (environment ignored)
- Sample tasks in each calling convention

Usage:
    Fixtures are auto-discovered by pytest. Use them as function arguments.
"""

from collections.abc import Generator
from pathlib import Path

import pytest

from async_base_iterator import AsyncBaseIterator, IteratorSettings
from async_base_iterator.iterator import reset_default_iterator
from async_base_iterator.settings import clear_settings_cache


# =============================================================================
# Test Markers Configuration
# =============================================================================


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    """Auto-mark tests based on their file name."""
    for item in items:
        test_path = Path(item.fspath).relative_to(Path(__file__).parent)

        if "integration" in str(test_path):
            item.add_marker(pytest.mark.integration)

        markers = {mark.name for mark in item.iter_markers()}
        if not markers.intersection({"unit", "integration"}):
            item.add_marker(pytest.mark.unit)


# =============================================================================
# Isolation Fixtures
# =============================================================================


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch: pytest.MonkeyPatch) -> Generator[None, None, None]:
    """
    Drop ASYNC_ITERATOR_* variables and cached state before and after each test.

    This ensures no test sees settings or a default instance left behind by
    another.
    """
    for key in ("SETTLE", "MAX_DEPTH", "LOG_LEVEL", "LOG_FORMAT"):
        monkeypatch.delenv(f"ASYNC_ITERATOR_{key}", raising=False)
    clear_settings_cache()
    reset_default_iterator()
    yield
    clear_settings_cache()
    reset_default_iterator()


@pytest.fixture
def settings() -> IteratorSettings:
    """Settings with library defaults, independent of the environment."""
    return IteratorSettings(settle=False, max_depth=None, log_level="INFO", log_format="console")


@pytest.fixture
def base(settings: IteratorSettings) -> AsyncBaseIterator:
    """A fresh AsyncBaseIterator with default options."""
    return AsyncBaseIterator(settings=settings)


# =============================================================================
# Sample Task Fixtures
# =============================================================================


def one():
    return 1


def two(done):
    done(None, 2)


def three():
    return 3


def two_err():
    raise ValueError("two err")


def three_cb(cb):
    cb(None, 3)


@pytest.fixture
def mixed_tasks() -> list:
    """``[one() -> 1, two(cb) -> 2, three() -> 3]``."""
    return [one, two, three]


@pytest.fixture
def failing_tasks() -> list:
    """``[one() -> 1, two() raises ValueError('two err'), three(cb) -> 3]``."""
    return [one, two_err, three_cb]
