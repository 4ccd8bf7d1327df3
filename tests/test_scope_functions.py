from replscope.scope_datatypes import FunctionInfo
from replscope.scope_functions import exposed_callables, is_baseline, rebuild_functions
from replscope.scope_members import synthetic


def greet(name: str) -> str:
    return f"hello {name}"


def add(a, b):
    return a + b


def main():
    return 0


def make_unit(name="Line", **functions):
    """A compiled-line stand-in whose class exposes the given functions."""
    members = {fn_name: staticmethod(fn) for fn_name, fn in functions.items()}
    return type(name, (), members)()


def names(registry):
    return sorted(info.name for info in registry)


def test_user_functions_are_collected():
    registry = set()
    rebuild_functions([make_unit(greet=greet), make_unit(add=add)], registry)
    assert names(registry) == ["add", "greet"]
    assert FunctionInfo(greet) in registry


def test_baseline_object_methods_never_appear():
    registry = set()
    rebuild_functions([make_unit(), make_unit(), make_unit()], registry)
    assert registry == set()


def test_baseline_is_checked_by_identity():
    assert is_baseline("__repr__", object.__dict__["__repr__"])
    assert not is_baseline("__repr__", greet)


def test_entry_point_never_appears():
    registry = set()
    rebuild_functions([make_unit(main=main, greet=greet), make_unit(main=main)], registry)
    assert names(registry) == ["greet"]


def test_custom_entry_point_name():
    registry = set()
    rebuild_functions([make_unit(run=main, main=greet)], registry, entry_point="run")
    assert names(registry) == ["greet"]


def test_same_function_on_two_units_appears_once():
    registry = set()
    rebuild_functions([make_unit(greet=greet), make_unit(greet=greet)], registry)
    assert len(registry) == 1


def test_unresolvable_callable_is_skipped():
    @synthetic
    def foo(self):
        return None

    unit = type("Line", (), {"foo": foo, "size": staticmethod(len)})()
    registry = set()
    rebuild_functions([unit], registry)
    assert registry == set()


def test_methods_and_classmethods_resolve_to_their_functions():
    class Line:
        def method(self):
            return 1

        @classmethod
        def factory(cls):
            return cls()

    registry = set()
    rebuild_functions([Line()], registry)
    assert names(registry) == ["factory", "method"]


def test_registry_is_cleared_before_rebuild():
    registry = {FunctionInfo(add)}
    rebuild_functions([make_unit(greet=greet)], registry)
    assert names(registry) == ["greet"]


def test_exposed_callables_skip_data_attributes():
    unit = type("Line", (), {"value": 3, "greet": staticmethod(greet)})()
    exposed = dict(exposed_callables(unit))
    assert "value" not in exposed
    assert "greet" in exposed


def test_marker_named_callables_never_appear():
    unit = make_unit(**{
        "script$body": add,
        "$$replVars0": add,
        "$$implicitReceiver0": add,
        "greet": greet,
    })
    registry = set()
    rebuild_functions([unit], registry)
    assert names(registry) == ["greet"]
