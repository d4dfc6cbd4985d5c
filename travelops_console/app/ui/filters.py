from __future__ import annotations

from collections.abc import Iterable, Sequence
from typing import Any


def normalize_query(query: str | None) -> str:
    return (query or "").casefold()


def field_matches(value: Any, probe: str) -> bool:
    if value is None:
        return False
    if isinstance(value, (list, tuple, set)):
        return any(field_matches(item, probe) for item in value)
    return probe in str(value).casefold()


def row_matches(row: dict[str, Any], query: str | None, fields: Iterable[str]) -> bool:
    probe = normalize_query(query)
    if not probe:
        return True
    return any(field_matches(row.get(field), probe) for field in fields)


def filter_rows(rows: Sequence[dict[str, Any]], query: str | None, fields: Sequence[str]) -> list[dict[str, Any]]:
    """Keep rows where any of ``fields`` contains ``query``, ignoring case."""
    probe = normalize_query(query)
    if not probe:
        return list(rows)
    return [row for row in rows if any(field_matches(row.get(field), probe) for field in fields)]
