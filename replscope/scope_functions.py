"""
Rebuilds the function registry from the compiled lines of a session.
"""

import inspect
from typing import Any, Iterator, MutableSet, Sequence, Tuple

from replscope.scope_datatypes import FunctionInfo
from replscope.scope_members import ENTRY_POINT, is_internal, resolve_function

# Every class inherits these; they never describe user code.
_OBJECT_BASELINE = dict(vars(object))
_MISSING = object()


def is_baseline(name: str, member: Any) -> bool:
    return _OBJECT_BASELINE.get(name, _MISSING) is member


def exposed_callables(unit: Any) -> Iterator[Tuple[str, Any]]:
    """Yield (name, raw member) for every callable the unit's class exposes."""
    cls = type(unit)
    for name in dir(cls):
        member = inspect.getattr_static(cls, name)
        if callable(member) or isinstance(member, (staticmethod, classmethod)):
            yield name, member


def rebuild_functions(units: Sequence[Any],
                      registry: MutableSet[FunctionInfo],
                      *, entry_point: str = ENTRY_POINT) -> None:
    """Replace the contents of `registry` with the user functions of `units`."""
    registry.clear()
    for unit in units:
        for name, member in exposed_callables(unit):
            if is_baseline(name, member) or name == entry_point or is_internal(name):
                continue
            function = resolve_function(member)
            if function is None:
                continue
            registry.add(FunctionInfo(function))
