from __future__ import annotations

import csv
from collections.abc import Sequence
from datetime import datetime
from pathlib import Path
from typing import Any

from travelops_console.app.application.query_state import QueryState
from travelops_console.app.ui.listing_view import ColumnDef, sanitize_row


def export_current_view(
    *,
    module: str,
    rows: Sequence[dict[str, Any]],
    columns: Sequence[ColumnDef],
    output_dir: str = "out/exports",
    query: QueryState | None = None,
) -> Path:
    """Write ``rows`` (already filtered and sorted) to a timestamped CSV under ``output_dir``."""
    exported_at = datetime.now().astimezone()
    destination = Path(output_dir)
    destination.mkdir(parents=True, exist_ok=True)
    path = destination / f"{module}_{exported_at:%Y%m%d_%H%M%S}.csv"

    keys = [column.key for column in columns]
    metadata = {
        "exported_at": exported_at.isoformat(),
        "module": module,
        "search": repr(query.search_text if query else ""),
        "sort": _describe_sort(query),
        "rows": len(rows),
    }
    with path.open("w", newline="", encoding="utf-8-sig") as handle:
        handle.writelines(f"# {name}: {value}\n" for name, value in metadata.items())
        writer = csv.writer(handle)
        writer.writerow([column.label for column in columns])
        for row in rows:
            cells = sanitize_row(row, keys)
            writer.writerow([cells[key] for key in keys])

    return path


def _describe_sort(query: QueryState | None) -> str:
    if query is None or not query.sort_key:
        return "none"
    return f"{query.sort_key} {query.sort_order.value}"
