"""
Resolution of the implicit receiver shared by all compiled lines of a session.
"""

from typing import Any, Dict, List, Optional

from replscope.scope_datatypes import DeclarationLayer, MissingReceiverError, ReflectiveAccessError
from replscope.scope_members import RECEIVER_FIELD, class_annotations, declared_members, is_data_member


def resolve_receiver(unit: Any) -> Optional[Any]:
    """Return the receiver linked from `unit`, or None if it links to none.

    A unit without the link field at all does not come from the line
    compiler and raises MissingReceiverError.
    """
    members = declared_members(unit)
    try:
        return members[RECEIVER_FIELD]
    except KeyError:
        raise MissingReceiverError(
            f"{type(unit).__name__} has no {RECEIVER_FIELD!r} field") from None


def declaration_layers(receiver: Any) -> List[DeclarationLayer]:
    """Split the receiver's state into layers, highest precedence first."""
    cls = type(receiver)
    classes = [c for c in cls.__mro__ if c is not object]

    instance_annotations: Dict[str, Any] = {}
    for c in reversed(classes):
        instance_annotations.update(class_annotations(c))

    try:
        instance_members = declared_members(receiver)
    except ReflectiveAccessError:
        # slotted receivers only carry class-level state
        instance_members = {}
    layers = [DeclarationLayer(cls, instance_members, instance_annotations)]

    for c in classes:
        members = {name: value for name, value in vars(c).items()
                   if is_data_member(name, value)}
        layers.append(DeclarationLayer(c, members, class_annotations(c)))
    return layers
