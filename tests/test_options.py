"""Tests for IteratorOptions validation and merging."""

from __future__ import annotations

import pytest

from async_base_iterator.errors import ConfigError
from async_base_iterator.options import IteratorOptions, coerce_options


def _hook(*args):
    return None


def _other_hook(*args):
    return None


class TestIteratorOptions:
    """Defaults and validation."""

    def test_defaults(self):
        options = IteratorOptions()
        assert options.before_each is None
        assert options.after_each is None
        assert options.error is None
        assert options.settle is False
        assert options.context == {}
        assert options.params == []
        assert options.letta is None
        assert options.max_depth is None

    def test_each_instance_gets_its_own_context(self):
        assert IteratorOptions().context is not IteratorOptions().context

    def test_context_identity_is_kept(self):
        context = {"shared": True}
        assert IteratorOptions(context=context).context is context

    def test_camel_case_aliases(self):
        options = coerce_options({"beforeEach": _hook, "afterEach": _other_hook, "maxDepth": 3})
        assert options.before_each is _hook
        assert options.after_each is _other_hook
        assert options.max_depth == 3

    def test_tuple_params_become_list(self):
        assert IteratorOptions(params=(1, 2)).params == [1, 2]

    def test_non_sequence_params_are_ignored(self):
        assert IteratorOptions(params="abc").params == []
        assert IteratorOptions(params=None).params == []

    def test_non_callable_letta_is_ignored(self):
        assert IteratorOptions(letta="not a function").letta is None

    def test_non_callable_hook_raises_config_error(self):
        with pytest.raises(ConfigError) as exc_info:
            coerce_options(before_each="nope")
        assert isinstance(exc_info.value, ValueError)
        assert exc_info.value.context.option is not None

    def test_max_depth_must_be_positive(self):
        with pytest.raises(ConfigError):
            coerce_options(max_depth=0)

    def test_unknown_option(self):
        with pytest.raises(ConfigError):
            coerce_options({"befor_each": _hook})

    def test_options_must_be_mapping(self):
        with pytest.raises(ConfigError):
            coerce_options(["settle"])

    def test_coerce_passes_instances_through(self):
        options = IteratorOptions(settle=True)
        assert coerce_options(options) is options


class TestMerge:
    """Field-by-field merge of overrides onto defaults."""

    def test_unset_fields_keep_defaults(self):
        defaults = IteratorOptions(before_each=_hook, error=_other_hook, settle=False)
        merged = defaults.merge(settle=True)

        assert merged.settle is True
        assert merged.before_each is _hook
        assert merged.error is _other_hook

    def test_set_fields_replace_defaults(self):
        defaults = IteratorOptions(before_each=_hook)
        merged = defaults.merge({"beforeEach": _other_hook})
        assert merged.before_each is _other_hook

    def test_explicit_none_clears_hook(self):
        defaults = IteratorOptions(after_each=_hook)
        assert defaults.merge(after_each=None).after_each is None

    def test_merge_does_not_mutate_defaults(self):
        defaults = IteratorOptions(settle=False)
        defaults.merge(settle=True)
        assert defaults.settle is False

    def test_merge_with_options_instance(self):
        defaults = IteratorOptions(params=[1], settle=True)
        merged = defaults.merge(IteratorOptions(after_each=_hook))

        assert merged.params == [1]
        assert merged.settle is True
        assert merged.after_each is _hook

    def test_empty_merge_returns_self(self):
        defaults = IteratorOptions()
        assert defaults.merge() is defaults

    def test_context_survives_merge(self):
        context = {"k": "v"}
        merged = IteratorOptions(context=context).merge(settle=True)
        assert merged.context is context

    def test_explicit_lists_only_set_fields(self):
        assert IteratorOptions(settle=True).explicit() == {"settle": True}
