"""Tests for async_base_iterator.errors module."""

from async_base_iterator.errors import (
    CallbackError,
    ConfigError,
    ErrorCategory,
    ErrorContext,
    InvalidTaskError,
    IteratorError,
    ThunkDepthError,
)


class TestErrorContext:
    def test_to_dict_skips_unset(self):
        assert ErrorContext().to_dict() == {}

    def test_to_dict_merges_metadata(self):
        context = ErrorContext(task="load", metadata={"attempt": 2})
        assert context.to_dict() == {"task": "load", "attempt": 2}


class TestIteratorError:
    def test_defaults(self):
        error = IteratorError("boom")
        assert error.message == "boom"
        assert error.category is ErrorCategory.INTERNAL
        assert error.cause is None

    def test_with_context(self):
        error = IteratorError("boom").with_context(task="load", hop=3)
        assert error.context.task == "load"
        assert error.context.metadata == {"hop": 3}

    def test_cause_is_chained(self):
        cause = OSError("disk")
        error = IteratorError("wrapped", cause=cause)
        assert error.__cause__ is cause
        assert error.to_dict()["cause"] == "OSError: disk"

    def test_to_dict(self):
        data = ConfigError("bad").with_context(option="settle").to_dict()
        assert data == {
            "error_type": "ConfigError",
            "message": "bad",
            "category": "CONFIG",
            "context": {"option": "settle"},
        }


class TestSubclasses:
    def test_invalid_task_is_type_error(self):
        error = InvalidTaskError("not callable")
        assert isinstance(error, TypeError)
        assert error.category is ErrorCategory.ADAPTER

    def test_config_error_is_value_error(self):
        assert isinstance(ConfigError("bad"), ValueError)

    def test_thunk_depth(self):
        error = ThunkDepthError("too deep", depth=5)
        assert error.depth == 5
        assert error.to_dict()["depth"] == 5

    def test_callback_error_keeps_reason(self):
        error = CallbackError("not an exception", reason={"code": 1})
        assert error.reason == {"code": 1}
        assert error.category is ErrorCategory.TASK
