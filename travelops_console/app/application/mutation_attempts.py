from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass
class PendingChange:
    fields: dict[str, Any]
    origin: int | None = None
    removes: bool = False


@dataclass
class PendingRecord:
    """Last confirmed value of a record plus the changes still waiting for the server."""

    base: dict[str, Any]
    changes: dict[int, PendingChange] = field(default_factory=dict)

    def rebuild(self) -> dict[str, Any]:
        record = dict(self.base)
        for sequence in sorted(self.changes):
            record.update(self.changes[sequence].fields)
        return record


@dataclass
class MutationTracker:
    """Busy flags per logical action, a sequence number per record and the pending changes behind each record."""

    mutation_in_flight: set[str] = field(default_factory=set)
    latest_by_record: dict[Any, int] = field(default_factory=dict)
    pending: dict[Any, PendingRecord] = field(default_factory=dict)
    _counter: int = 0

    def begin(self, operation: str) -> bool:
        if operation in self.mutation_in_flight:
            return False
        self.mutation_in_flight.add(operation)
        return True

    def end(self, operation: str) -> None:
        self.mutation_in_flight.discard(operation)

    def is_busy(self, operation: str | None = None) -> bool:
        if operation is None:
            return bool(self.mutation_in_flight)
        return operation in self.mutation_in_flight

    def stamp(self, record_id: Any) -> int:
        self._counter += 1
        self.latest_by_record[record_id] = self._counter
        return self._counter

    def is_latest(self, record_id: Any, sequence: int) -> bool:
        return self.latest_by_record.get(record_id) == sequence

    def track(
        self,
        record_id: Any,
        current: dict[str, Any],
        fields: dict[str, Any],
        origin: int | None = None,
        removes: bool = False,
    ) -> int:
        """Stamps a mutation of ``record_id``; ``current`` becomes the base when nothing else is in flight."""
        sequence = self.stamp(record_id)
        entry = self.pending.get(record_id)
        if entry is None:
            entry = self.pending[record_id] = PendingRecord(base=dict(current))
        entry.changes[sequence] = PendingChange(fields=dict(fields), origin=origin, removes=removes)
        return sequence

    def accept(self, record_id: Any, sequence: int, server_record: dict[str, Any] | None = None) -> None:
        entry = self.pending.get(record_id)
        if entry is None:
            return
        change = entry.changes.pop(sequence, None)
        if server_record is not None:
            entry.base = dict(server_record)
        elif change is not None:
            entry.base = {**entry.base, **change.fields}
        if not entry.changes:
            del self.pending[record_id]

    def reject(self, record_id: Any, sequence: int) -> tuple[dict[str, Any], PendingChange | None] | None:
        """Drops a failed mutation and returns the record rebuilt without it."""
        entry = self.pending.get(record_id)
        if entry is None:
            return None
        change = entry.changes.pop(sequence, None)
        restored = entry.rebuild()
        if not entry.changes:
            del self.pending[record_id]
        return restored, change

    def forget(self, record_id: Any) -> None:
        self.pending.pop(record_id, None)


def create_operation() -> str:
    return "create"


def update_operation(record_id: Any, field_name: str) -> str:
    return f"update:{record_id}:{field_name}"


def delete_operation(record_id: Any) -> str:
    return f"delete:{record_id}"
