"""
Rebuilds the variable registry from the compiled lines of a session.
"""

from typing import Any, Dict, Literal, MutableMapping, Sequence

from replscope.scope_datatypes import Declaration, DeclarationLayer, VariableInfo
from replscope.scope_members import class_annotations, declared_members, is_internal
from replscope.scope_receiver import declaration_layers, resolve_receiver

Shadowing = Literal['first', 'last']
SHADOWING_POLICIES = ('first', 'last')


def _collect(layer: DeclarationLayer,
             registry: MutableMapping[str, VariableInfo],
             shadowing: Shadowing):
    for name, value in layer.members.items():
        if is_internal(name):
            continue
        info = VariableInfo(name, value, layer.declaration(name))
        if shadowing == 'last':
            registry[name] = info
        else:
            registry.setdefault(name, info)


def line_layer(unit: Any) -> DeclarationLayer:
    """The members a single compiled line declares, without anything inherited."""
    owner = type(unit)
    return DeclarationLayer(owner, declared_members(unit), class_annotations(owner))


def rebuild_variables(units: Sequence[Any],
                      registry: MutableMapping[str, VariableInfo],
                      *, shadowing: Shadowing = 'first') -> None:
    """Replace the contents of `registry` with the variables of `units`.

    The receiver's layers are visited first, then every line in execution
    order. With the default 'first' policy the first binding seen for a name
    is kept, so receiver state beats line state and earlier lines beat later
    re-declarations. 'last' lets the most recent declaration win instead.
    """
    if shadowing not in SHADOWING_POLICIES:
        raise ValueError(f"Unknown shadowing policy: {shadowing!r}")
    registry.clear()

    if units:
        receiver = resolve_receiver(units[0])
        if receiver is not None:
            layers = declaration_layers(receiver)
            if shadowing == 'last':
                # lowest precedence first so the most-derived layer overwrites
                layers = list(reversed(layers))
            for layer in layers:
                _collect(layer, registry, shadowing)

    for unit in units:
        _collect(line_layer(unit), registry, shadowing)


def variable_values(registry: MutableMapping[str, VariableInfo]) -> Dict[str, Any]:
    return {name: info.value for name, info in registry.items()}
