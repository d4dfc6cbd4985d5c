from __future__ import annotations

from typing import Any

from travelops_console.app.ui.listing_view import ColumnDef, normalize_value, sanitize_row


def print_table(title: str, rows: list[dict[str, Any]], columns: list[ColumnDef]) -> None:
    print(f"\n{title}")
    if not rows:
        print("(no results)")
        return

    headers = [column.key for column in columns]
    cells = [sanitize_row(row, headers) for row in rows]
    widths = [max(len(column.label), *(len(cell[column.key]) for cell in cells)) for column in columns]

    print(" | ".join(column.label.ljust(widths[idx]) for idx, column in enumerate(columns)))
    print("-+-".join("-" * width for width in widths))
    for cell in cells:
        print(" | ".join(cell[column.key].ljust(widths[idx]) for idx, column in enumerate(columns)))


def print_pager(page: int, total_pages: int, strip: list[int | str]) -> None:
    labels = [f"[{item}]" if item == page else ("…" if isinstance(item, str) else str(item)) for item in strip]
    print(f"page {page}/{total_pages}: {' '.join(labels)}")


def print_notification(payload: dict[str, Any]) -> None:
    trace_id = payload.get("trace_id") or "n/a"
    print(f"[{payload.get('level')}] {payload.get('title')}: {normalize_value(payload.get('message'))} (trace_id={trace_id})")
