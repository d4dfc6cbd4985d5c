from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

from travelops_console.app.application.tabular_controller import Record, TabularDataController
from travelops_console.app.ui.filters import row_matches


@dataclass(frozen=True)
class KanbanColumn:
    id: str
    title: str
    message: str = ""


class KanbanBoard:
    """Status columns over a controller's source collection.

    Dragging a card is ``update_field(id, group_field, to_group)`` plus a new
    position: the card lands at ``to_index`` among the destination column's
    visible cards.
    """

    def __init__(self, controller: TabularDataController, columns: Sequence[KanbanColumn], group_field: str = "status") -> None:
        if not columns:
            raise ValueError("a kanban board needs at least one column")
        self.controller = controller
        self.column_defs = list(columns)
        self.group_field = group_field
        self._column_ids = {column.id for column in self.column_defs}

    def columns(self) -> dict[str, list[Record]]:
        grouped: dict[str, list[Record]] = {column.id: [] for column in self.column_defs}
        for record in self.controller.records:
            group = record.get(self.group_field)
            if group in grouped and self._visible(record):
                grouped[group].append(record)
        return grouped

    def column_ids(self, group: str) -> list[Any]:
        return [record["id"] for record in self.columns()[self._require_column(group)]]

    async def move_record(self, record_id: Any, from_group: str, to_group: str, to_index: int) -> Record | None:
        self._require_column(from_group)
        self._require_column(to_group)
        if to_index < 0:
            raise ValueError(f"to_index must be >= 0, got {to_index}")

        record = next((item for item in self.controller.records if item.get("id") == record_id), None)
        if record is None:
            self.controller.report_missing("move", record_id)
            return None
        if record.get(self.group_field) != from_group:
            raise ValueError(f"record {record_id!r} is in {record.get(self.group_field)!r}, not {from_group!r}")

        if from_group == to_group:
            current = self.column_ids(from_group)
            if record_id in current and current.index(record_id) == to_index:
                return None

        def _place(remaining: list[Record], moved: Record) -> int:
            return self._insertion_index(remaining, to_group, to_index)

        return await self.controller.update_fields(
            record_id,
            {self.group_field: to_group},
            place=_place,
            operation=f"move:{record_id}",
        )

    def _insertion_index(self, remaining: list[Record], to_group: str, to_index: int) -> int:
        members = [index for index, record in enumerate(remaining) if record.get(self.group_field) == to_group]
        visible = [index for index in members if self._visible(remaining[index])]
        if to_index < len(visible):
            return visible[to_index]
        if visible:
            return visible[-1] + 1
        if members:
            return members[-1] + 1
        return len(remaining)

    def _visible(self, record: Record) -> bool:
        return row_matches(record, self.controller.query.search_text, self.controller.search_fields)

    def _require_column(self, group: str) -> str:
        if group not in self._column_ids:
            raise ValueError(f"unknown column {group!r}")
        return group
