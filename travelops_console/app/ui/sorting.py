from __future__ import annotations

import unicodedata
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass
from datetime import date, datetime, timezone
from enum import Enum
from typing import Any

Collator = Callable[[str], Any]
Parser = Callable[[Any], Any]

_MISSING = 1
_PRESENT = 0
_RANK_NUMBER = 0
_RANK_DATE = 1
_RANK_TEXT = 2
_RANK_OTHER = 3


class SortOrder(str, Enum):
    ASC = "asc"
    DESC = "desc"


def coerce_order(order: SortOrder | str) -> SortOrder:
    try:
        return SortOrder(str(getattr(order, "value", order)).lower())
    except ValueError as exc:
        raise ValueError(f"sort order must be 'asc' or 'desc', got {order!r}") from exc


def toggle_order(order: SortOrder | str) -> SortOrder:
    return SortOrder.DESC if coerce_order(order) is SortOrder.ASC else SortOrder.ASC


def english_collation_key(text: str) -> tuple[str, str, str]:
    """Approximates ``en`` collation: base letters, then accents, then lowercase first."""
    decomposed = unicodedata.normalize("NFKD", text)
    base = "".join(char for char in decomposed if not unicodedata.combining(char))
    return (base.casefold(), decomposed.casefold(), base.swapcase())


def codepoint_collation_key(text: str) -> str:
    return text


def collator_for(locale_name: str) -> Collator:
    normalized = locale_name.strip().replace("-", "_").lower()
    if normalized == "en" or normalized.startswith("en_"):
        return english_collation_key
    if normalized in {"c", "posix"}:
        return codepoint_collation_key
    raise ValueError(f"unsupported collation locale {locale_name!r}; use 'en' or 'C'")


def as_datetime(value: Any) -> datetime | None:
    if value is None or isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day, tzinfo=timezone.utc)
    text = str(value).strip()
    if not text:
        return None
    try:
        return datetime.fromisoformat(text.replace("Z", "+00:00"))
    except ValueError:
        return None


def as_number(value: Any) -> float | None:
    if value is None or isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value
    try:
        return float(str(value).strip())
    except ValueError:
        return None


def value_sort_key(value: Any, collate: Collator = english_collation_key) -> tuple[int, int, Any]:
    if value is None or (isinstance(value, str) and not value.strip()):
        return (_MISSING, 0, 0)
    if isinstance(value, (bool, int, float)):
        return (_PRESENT, _RANK_NUMBER, value)
    if isinstance(value, (datetime, date)):
        moment = value if isinstance(value, datetime) else as_datetime(value)
        if moment.tzinfo is None:
            moment = moment.replace(tzinfo=timezone.utc)
        return (_PRESENT, _RANK_DATE, moment.timestamp())
    if isinstance(value, str):
        return (_PRESENT, _RANK_TEXT, collate(value))
    return (_PRESENT, _RANK_OTHER, collate(str(value)))


@dataclass(frozen=True)
class SortKey:
    name: str
    field: str
    parse: Parser | None = None

    def extract(self, row: dict[str, Any]) -> Any:
        value = row.get(self.field)
        return self.parse(value) if self.parse else value


class ComparatorRegistry:
    """Named sort keys. Sorting by a name that was never registered keeps the input order."""

    def __init__(self, collate: Collator | None = None) -> None:
        self.collate = collate or english_collation_key
        self._keys: dict[str, SortKey] = {}

    @classmethod
    def for_fields(cls, fields: Iterable[str], collate: Collator | None = None) -> "ComparatorRegistry":
        registry = cls(collate=collate)
        for field in fields:
            registry.register(field)
        return registry

    def register(self, name: str, field: str | None = None, parse: Parser | None = None) -> "ComparatorRegistry":
        self._keys[name] = SortKey(name=name, field=field or name, parse=parse)
        return self

    def has(self, name: str | None) -> bool:
        return name in self._keys

    def names(self) -> list[str]:
        return list(self._keys)

    def sort(self, rows: Sequence[dict[str, Any]], key: str | None, order: SortOrder | str = SortOrder.ASC) -> list[dict[str, Any]]:
        resolved_order = coerce_order(order)
        sort_key = self._keys.get(key) if key else None
        if sort_key is None:
            return list(rows)

        def _row_key(row: dict[str, Any]) -> tuple[int, int, Any]:
            return value_sort_key(sort_key.extract(row), self.collate)

        return sorted(rows, key=_row_key, reverse=resolved_order is SortOrder.DESC)


def sort_rows(
    rows: Sequence[dict[str, Any]],
    key: str | None,
    order: SortOrder | str,
    registry: ComparatorRegistry,
) -> list[dict[str, Any]]:
    return registry.sort(rows, key, order)
