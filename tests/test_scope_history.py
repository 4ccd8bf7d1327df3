import pytest

from replscope.scope_datatypes import NullHistoryError, ReflectiveAccessError
from replscope.scope_history import HistoryRecord, ReplHistory, ordered_units


def test_history_stores_newest_first():
    history = ReplHistory()
    history.push("a = 1", "unit-1")
    history.push("b = 2", "unit-2")
    assert [r.unit for r in history] == ["unit-2", "unit-1"]
    assert history.peek().unit == "unit-2"
    assert history.peek().line_no == 2
    assert len(history) == 2


def test_ordered_units_are_oldest_first():
    history = ReplHistory()
    for i in range(1, 4):
        history.push(f"x{i} = {i}", f"unit-{i}")
    assert ordered_units(history) == ["unit-1", "unit-2", "unit-3"]


def test_ordered_units_ignore_storage_order():
    records = [
        HistoryRecord(3, "c", "unit-3"),
        HistoryRecord(1, "a", "unit-1"),
        HistoryRecord(2, "b", "unit-2"),
    ]
    assert ordered_units(records) == ["unit-1", "unit-2", "unit-3"]


def test_empty_history_yields_no_units():
    assert ordered_units(ReplHistory()) == []
    assert ordered_units([]) == []
    assert ReplHistory().peek() is None


def test_absent_history_is_null_history():
    with pytest.raises(NullHistoryError):
        ordered_units(None)


def test_absent_record_is_null_history():
    with pytest.raises(NullHistoryError):
        ordered_units([HistoryRecord(1, "a", "unit-1"), None])


def test_non_iterable_history_is_null_history():
    with pytest.raises(NullHistoryError):
        ordered_units(42)


def test_malformed_record_is_reflective_failure():
    with pytest.raises(ReflectiveAccessError):
        ordered_units([object()])


def test_pop_and_reset():
    history = ReplHistory()
    history.push("a = 1", "unit-1")
    history.push("b = 2", "unit-2")
    assert history.pop().unit == "unit-2"
    assert history.next_line_no == 3
    history.reset()
    assert len(history) == 0
    assert history.next_line_no == 1
