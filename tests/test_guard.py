"""Tests for done_callback."""

from __future__ import annotations

from async_base_iterator import AsyncBaseIterator, current_context, done_callback, guard_callback


class TestGuardCallback:
    """The module-level guard with an explicit context."""

    def test_done_called_without_arguments(self):
        calls = []
        guarded = guard_callback(lambda *args: None, lambda *args: calls.append(args))

        guarded(None, [1, 2])
        assert calls == [()]

    def test_error_forwarded_to_done(self):
        calls = []
        error = ValueError("inside final callback")

        def fn(*args):
            raise error

        guard_callback(fn, lambda *args: calls.append(args))()
        assert calls == [(error,)]

    def test_arguments_forwarded_to_fn(self):
        received = []
        guarded = guard_callback(lambda *args, **kwargs: received.append((args, kwargs)), lambda: None)

        guarded(None, "result", extra=True)
        assert received == [((None, "result"), {"extra": True})]

    def test_context_bound(self):
        seen = []
        guarded = guard_callback(
            lambda: seen.append(current_context()),
            lambda *args: seen.append(current_context()),
            context="ctx",
        )

        guarded()
        assert seen == ["ctx", "ctx"]
        assert current_context() is None


class TestInstanceDoneCallback:
    """AsyncBaseIterator.done_callback binds the instance context."""

    def test_instance_context(self, settings):
        context = {"name": "base"}
        base = AsyncBaseIterator(settings=settings, context=context)
        seen = []

        base.done_callback(lambda: seen.append(current_context()), lambda: None)()
        assert seen[0] is context

    def test_module_level_helper(self):
        calls = []

        def fn():
            raise KeyError("k")

        done_callback(fn, lambda *args: calls.append(args))()
        assert isinstance(calls[0][0], KeyError)
