"""
The execution history of a session and its traversal into compiled lines.
"""

import collections
from dataclasses import dataclass
from typing import Any, Iterable, Iterator, List, Optional

from replscope.scope_datatypes import NullHistoryError, ReflectiveAccessError


@dataclass(frozen=True)
class HistoryRecord:
    """One successfully evaluated line and the compiled object it produced."""
    line_no: int
    source: str
    unit: Any


class ReplHistory:
    """Records of evaluated lines, stored newest first."""

    def __init__(self):
        self._records: collections.deque = collections.deque()
        self._next_line_no = 1

    def push(self, source: str, unit: Any) -> HistoryRecord:
        record = HistoryRecord(self._next_line_no, source, unit)
        self._next_line_no += 1
        self._records.appendleft(record)
        return record

    def peek(self) -> Optional[HistoryRecord]:
        """The most recent record, or None for an empty history."""
        return self._records[0] if self._records else None

    def pop(self) -> HistoryRecord:
        return self._records.popleft()

    def reset(self):
        self._records.clear()
        self._next_line_no = 1

    @property
    def next_line_no(self) -> int:
        return self._next_line_no

    def __iter__(self) -> Iterator[HistoryRecord]:
        return iter(self._records)

    def __len__(self) -> int:
        return len(self._records)


def ordered_units(history: Optional[Iterable[HistoryRecord]]) -> List[Any]:
    """Return the compiled line of every record, oldest first.

    The order comes from each record's line number, not from the way the
    history happens to store or iterate its records.
    """
    if history is None:
        raise NullHistoryError("No execution history")
    try:
        records = list(history)
    except TypeError as e:
        raise NullHistoryError(f"Unreadable execution history: {e}") from e

    keyed = []
    for record in records:
        if record is None:
            raise NullHistoryError("Execution history contains an empty record")
        try:
            keyed.append((record.line_no, record.unit))
        except AttributeError as e:
            raise ReflectiveAccessError(f"Malformed history record {record!r}") from e
    keyed.sort(key=lambda pair: pair[0])
    return [unit for _, unit in keyed]
