import pytest

from replscope.scope_datatypes import MissingReceiverError, ReflectiveAccessError
from replscope.scope_members import RECEIVER_FIELD, VARS_CACHE_FIELD
from replscope.scope_receiver import declaration_layers, resolve_receiver


class Line:
    def __init__(self, receiver=None):
        setattr(self, RECEIVER_FIELD, receiver)


class BaseReceiver:
    shared = "base"
    limit: int = 10

    def helper(self):
        return 1


class NotebookReceiver(BaseReceiver):
    shared = "notebook"
    title: str = "demo"

    @property
    def computed(self):
        return 2

    def __init__(self):
        self.kc = "context"
        setattr(self, VARS_CACHE_FIELD, {})


def test_resolve_receiver_returns_linked_object():
    receiver = NotebookReceiver()
    assert resolve_receiver(Line(receiver)) is receiver


def test_resolve_receiver_none_means_no_receiver():
    assert resolve_receiver(Line(None)) is None


def test_missing_link_field_is_distinguishable():
    class Foreign:
        pass

    with pytest.raises(MissingReceiverError) as info:
        resolve_receiver(Foreign())
    assert isinstance(info.value, ReflectiveAccessError)


def test_link_declared_only_on_class_is_missing():
    # The link must be the unit's own member, not something inherited
    Shared = type("Shared", (), {RECEIVER_FIELD: object()})
    with pytest.raises(MissingReceiverError):
        resolve_receiver(Shared())


def test_slotted_unit_is_reflective_failure():
    class Slotted:
        __slots__ = ()

    with pytest.raises(ReflectiveAccessError):
        resolve_receiver(Slotted())


def test_layers_are_instance_then_mro_most_derived_first():
    layers = declaration_layers(NotebookReceiver())
    assert [layer.owner for layer in layers] == [NotebookReceiver, NotebookReceiver, BaseReceiver]
    assert set(layers[0].members) == {"kc", VARS_CACHE_FIELD}
    assert layers[1].members == {"shared": "notebook", "title": "demo"}
    assert layers[2].members == {"shared": "base", "limit": 10}


def test_layers_skip_methods_and_properties():
    for layer in declaration_layers(NotebookReceiver()):
        assert "helper" not in layer.members
        assert "computed" not in layer.members
        assert "__init__" not in layer.members


def test_layers_carry_annotations():
    layers = declaration_layers(NotebookReceiver())
    assert layers[1].declaration("title").annotation is str
    assert layers[2].declaration("limit").annotation is int
    # instance layer sees annotations from the whole MRO
    assert layers[0].annotations["limit"] is int
    assert layers[1].declaration("shared").annotation is None


def test_slotted_receiver_contributes_class_layers_only():
    class SlottedReceiver:
        __slots__ = ()
        greeting = "hi"

    layers = declaration_layers(SlottedReceiver())
    assert layers[0].members == {}
    assert layers[1].members == {"greeting": "hi"}
