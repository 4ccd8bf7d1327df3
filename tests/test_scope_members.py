import functools

import pytest

from replscope.scope_datatypes import ReflectiveAccessError
from replscope.scope_members import (
    RECEIVER_FIELD, RESULT_FIELD, SOURCE_FIELD, VARS_CACHE_FIELD,
    declared_members, is_data_member, is_internal, resolve_function, synthetic,
)


@pytest.mark.parametrize("name", [
    RECEIVER_FIELD,
    VARS_CACHE_FIELD,
    SOURCE_FIELD,
    RESULT_FIELD,
    "$$implicitReceiver12",
    "outer$$replVars",
    "script$helper",
])
def test_internal_markers_are_recognised(name):
    assert is_internal(name)


@pytest.mark.parametrize("name", ["x", "script", "replVars", "implicitReceiver", "_private", "__dunder__"])
def test_user_names_are_not_internal(name):
    assert not is_internal(name)


def plain(x):
    return x


def test_resolve_plain_function_is_identity():
    assert resolve_function(plain) is plain


def test_resolve_unwraps_static_and_class_methods():
    assert resolve_function(staticmethod(plain)) is plain
    assert resolve_function(classmethod(plain)) is plain


def test_resolve_unwraps_bound_methods():
    class Holder:
        def method(self):
            return 1

    assert resolve_function(Holder().method) is Holder.__dict__["method"]


def test_resolve_follows_functools_wraps_chains():
    def deco(fn):
        @functools.wraps(fn)
        def wrapper(*args, **kwargs):
            return fn(*args, **kwargs)
        return wrapper

    decorated = deco(plain)
    assert resolve_function(decorated) is plain
    assert resolve_function(functools.lru_cache(plain)) is plain


def test_resolve_rejects_members_without_python_declaration():
    assert resolve_function(len) is None
    assert resolve_function(object.__repr__) is None
    assert resolve_function(staticmethod(len)) is None
    assert resolve_function(functools.partial(plain, 1)) is None
    assert resolve_function(42) is None


def test_resolve_rejects_synthetic_accessors():
    @synthetic
    def accessor(self):
        return None

    assert resolve_function(accessor) is None
    assert resolve_function(staticmethod(accessor)) is None


def test_is_data_member_filters_class_namespace_entries():
    class Sample:
        value = 1
        label = "x"

        def method(self):
            pass

        @property
        def prop(self):
            return 1

        class Nested:
            pass

    ns = vars(Sample)
    assert is_data_member("value", ns["value"])
    assert is_data_member("label", ns["label"])
    assert not is_data_member("method", ns["method"])
    assert not is_data_member("prop", ns["prop"])
    assert not is_data_member("Nested", ns["Nested"])
    assert not is_data_member("__module__", ns["__module__"])


def test_declared_members_of_slotted_object_is_a_reflective_failure():
    class Slotted:
        __slots__ = ("a",)

    with pytest.raises(ReflectiveAccessError):
        declared_members(Slotted())


def test_declared_members_is_a_copy():
    class Plain:
        pass

    obj = Plain()
    obj.a = 1
    members = declared_members(obj)
    members["b"] = 2
    assert not hasattr(obj, "b")
    assert members == {"a": 1, "b": 2}
