from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from travelops_console.app.ui.sorting import SortOrder


class QueryState(BaseModel):
    model_config = ConfigDict(frozen=True)

    search_text: str = ""
    sort_key: str | None = None
    sort_order: SortOrder = SortOrder.ASC
    page: int = Field(default=1, ge=1)
    page_size: int = Field(default=10, gt=0)

    def replace(self, **changes: Any) -> "QueryState":
        return QueryState.model_validate({**self.model_dump(), **changes})


@dataclass(frozen=True)
class DerivedView:
    visible_rows: tuple[dict[str, Any], ...]
    total_pages: int
    total_count: int
    page: int

    @classmethod
    def empty(cls) -> "DerivedView":
        return cls(visible_rows=(), total_pages=1, total_count=0, page=1)
