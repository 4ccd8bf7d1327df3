"""
Classification of the members produced by the line compiler.

Every compiled line carries a handful of fields and methods that exist only
because of the evaluation strategy (the link to the shared receiver, the
wrapped source, the line result, ...). Their names contain a marker no user
identifier can contain, so they can be recognised and hidden.
"""

import functools
import inspect
from typing import Any, Callable, Dict, Optional

from replscope.scope_datatypes import ReflectiveAccessError

# Name fragments of compiler-generated members.
RECEIVER_MARKER = "$$implicitReceiver"
VARS_CACHE_MARKER = "$$replVars"
SCRIPT_MARKER = "script$"

INTERNAL_MARKERS = (RECEIVER_MARKER, VARS_CACHE_MARKER, SCRIPT_MARKER)

# Exact field names written by the compiler.
RECEIVER_FIELD = f"{RECEIVER_MARKER}0"
VARS_CACHE_FIELD = f"{VARS_CACHE_MARKER}0"
SOURCE_FIELD = f"{SCRIPT_MARKER}source"
RESULT_FIELD = f"{SCRIPT_MARKER}result"

ENTRY_POINT = "main"

_SYNTHETIC_FLAG = "_is_repl_synthetic"


def is_internal(name: str) -> bool:
    """True if `name` belongs to the evaluation strategy rather than the user."""
    return any(marker in name for marker in INTERNAL_MARKERS)


def synthetic(func: Callable) -> Callable:
    """A decorator marking a compiler-generated method as having no user declaration."""
    setattr(func, _SYNTHETIC_FLAG, True)
    return func


def is_synthetic(func: Any) -> bool:
    return bool(getattr(func, _SYNTHETIC_FLAG, False))


def is_dunder(name: str) -> bool:
    return len(name) > 4 and name.startswith("__") and name.endswith("__")


def declared_members(obj: Any) -> Dict[str, Any]:
    """The members `obj` declares itself, ignoring anything its class provides."""
    try:
        return dict(vars(obj))
    except TypeError as e:
        raise ReflectiveAccessError(
            f"{type(obj).__name__} object exposes no declared members") from e


def class_annotations(cls: type) -> Dict[str, Any]:
    """The annotations declared directly on `cls`."""
    try:
        return dict(inspect.get_annotations(cls))
    except NameError:
        # unresolvable forward reference
        return {}


def is_data_member(name: str, value: Any) -> bool:
    """True for a plain data attribute found in a class namespace."""
    if is_dunder(name):
        return False
    if inspect.isroutine(value) or inspect.isclass(value):
        return False
    if isinstance(value, (staticmethod, classmethod, property)):
        return False
    return not (inspect.isdatadescriptor(value) or inspect.ismethoddescriptor(value))


def resolve_function(member: Any) -> Optional[Callable]:
    """Map a raw class member to the plain Python function that declares it.

    Unwraps staticmethod/classmethod objects, bound methods and
    functools.wraps chains. Returns None for anything without a Python-level
    declaration: builtins, slot wrappers and synthetic accessors.
    """
    func = member
    # staticmethod, classmethod and bound methods all keep the target in __func__
    while isinstance(func, (staticmethod, classmethod)) or inspect.ismethod(func):
        func = func.__func__
    if isinstance(func, functools.partial) or is_synthetic(func):
        return None
    try:
        func = inspect.unwrap(func)
    except ValueError:
        # wrapper cycle
        return None
    if not inspect.isfunction(func) or is_synthetic(func):
        return None
    return func
