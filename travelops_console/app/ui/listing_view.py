from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Any

EMPTY_VALUE = "—"
SENSITIVE_FRAGMENTS = ("password", "token", "secret", "account_number", "ifsc", "card_number")


@dataclass(frozen=True)
class ColumnDef:
    key: str
    label: str


def normalize_value(value: Any) -> str:
    """Cell text for tables and exports; blanks and ``None`` render as ``EMPTY_VALUE``."""
    if value is None:
        return EMPTY_VALUE
    if isinstance(value, bool):
        return "Yes" if value else "No"
    if isinstance(value, datetime):
        return value.strftime("%Y-%m-%d %H:%M")
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, (list, tuple, set)):
        parts = [text for text in map(normalize_value, value) if text != EMPTY_VALUE]
        return ", ".join(parts) or EMPTY_VALUE
    return str(value).strip() or EMPTY_VALUE


def is_sensitive(key: str) -> bool:
    lowered = key.lower()
    return any(fragment in lowered for fragment in SENSITIVE_FRAGMENTS)


def sanitize_row(row: dict[str, Any], keys: list[str]) -> dict[str, str]:
    return {key: EMPTY_VALUE if is_sensitive(key) else normalize_value(row.get(key)) for key in keys}
