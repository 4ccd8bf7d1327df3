"""
Defines the data types shared by the context reconstruction.

This module provides the binding descriptors handed to completion and
inspection tooling, the declaration layers of the implicit receiver, and the
error taxonomy and report produced by a context rebuild.
"""

import enum
import inspect
from dataclasses import dataclass, field
from typing import Any, Dict, List, Literal, Optional


# =================================================================
# Errors
# =================================================================

class FailureKind(enum.Enum):
    REFLECTIVE_ACCESS = "reflective-access"
    MISSING_RECEIVER = "missing-receiver"
    NULL_HISTORY = "null-history"


class ContextError(Exception):
    """Base class for failures while rebuilding the session context."""
    kind = FailureKind.REFLECTIVE_ACCESS


class ReflectiveAccessError(ContextError):
    """A declared member could not be looked up or dereferenced."""
    kind = FailureKind.REFLECTIVE_ACCESS


class MissingReceiverError(ReflectiveAccessError):
    """The oldest compiled line has no receiver-link field."""
    kind = FailureKind.MISSING_RECEIVER


class NullHistoryError(ContextError):
    """The history, or one of its records, is absent."""
    kind = FailureKind.NULL_HISTORY


class ConfigError(ValueError):
    pass


# =================================================================
# Declarations
# =================================================================

def type_display(annotation: Any) -> str:
    if isinstance(annotation, str):
        return annotation
    return inspect.formatannotation(annotation)


@dataclass(frozen=True)
class Declaration:
    """Where a variable was declared, and its declared type if it has one."""
    name: str
    owner: type
    annotation: Any = None


@dataclass
class DeclarationLayer:
    """One set of declared members of the implicit receiver.

    Layers are ordered by precedence: the receiver's own instance members
    first, then each class of its MRO, most-derived first.
    """
    owner: type
    members: Dict[str, Any]
    annotations: Dict[str, Any] = field(default_factory=dict)

    def declaration(self, name: str) -> Declaration:
        return Declaration(name, self.owner, self.annotations.get(name))


# =================================================================
# Bindings
# =================================================================

@dataclass
class VariableInfo:
    """A snapshotted variable binding."""
    name: str
    value: Any
    declaration: Declaration

    @property
    def type_name(self) -> str:
        if self.declaration.annotation is not None:
            return type_display(self.declaration.annotation)
        return type(self.value).__name__

    def __str__(self):
        return f"{self.name}: {self.type_name} = {self.value!r}"


class FunctionInfo:
    """A user-defined function, compared by the identity of the function itself."""

    def __init__(self, function):
        self.function = function

    @property
    def name(self) -> str:
        return self.function.__name__

    @property
    def signature(self) -> Optional[inspect.Signature]:
        try:
            return inspect.signature(self.function)
        except (TypeError, ValueError):
            return None

    def __eq__(self, other):
        if not isinstance(other, FunctionInfo):
            return NotImplemented
        return self.function is other.function

    def __hash__(self):
        return id(self.function)

    def __lt__(self, other):
        if not isinstance(other, FunctionInfo):
            return NotImplemented
        return self.name < other.name

    def __repr__(self):
        return f"FunctionInfo({self.function.__qualname__})"

    def __str__(self):
        sig = self.signature
        return f"{self.name}{sig}" if sig is not None else f"{self.name}(...)"


# =================================================================
# Rebuild report
# =================================================================

@dataclass
class Failure:
    stage: str
    kind: FailureKind
    message: str
    error: Optional[BaseException] = None


@dataclass
class UpdateReport:
    """The structured result of one context rebuild."""
    status: Literal['success', 'partial', 'error']
    variables: int = 0
    functions: int = 0
    failures: List[Failure] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.status == 'success'

    def kinds(self) -> List[FailureKind]:
        return [f.kind for f in self.failures]
