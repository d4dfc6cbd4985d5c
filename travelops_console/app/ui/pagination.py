from __future__ import annotations

import math
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any


class PageOutOfRangeError(ValueError):
    def __init__(self, page: int, total_pages: int) -> None:
        super().__init__(f"page {page} is outside 1..{total_pages}")
        self.page = page
        self.total_pages = total_pages


@dataclass(frozen=True)
class Page:
    rows: list[dict[str, Any]]
    page: int
    total_pages: int


def count_pages(total: int, page_size: int) -> int:
    if page_size <= 0:
        raise ValueError(f"page_size must be > 0, got {page_size}")
    return max(1, math.ceil(total / page_size))


def clamp_page(page: int, total_pages: int) -> int:
    return min(max(1, page), max(1, total_pages))


def paginate(rows: Sequence[dict[str, Any]], page: int, page_size: int) -> Page:
    total_pages = count_pages(len(rows), page_size)
    if page < 1 or page > total_pages:
        raise PageOutOfRangeError(page, total_pages)
    start = (page - 1) * page_size
    return Page(rows=list(rows[start : start + page_size]), page=page, total_pages=total_pages)


def page_numbers(current: int, total_pages: int, max_visible: int = 5) -> list[int | str]:
    """Pager strip with ``"ellipsis-start"`` / ``"ellipsis-end"`` where pages are skipped."""
    if total_pages <= max_visible:
        return list(range(1, total_pages + 1))

    pages: list[int | str] = [1]
    start_page = max(2, current - (max_visible - 2) // 2)
    end_page = min(total_pages - 1, start_page + max_visible - 3)
    if current <= 2:
        end_page = min(total_pages - 1, max_visible - 1)
    if current >= total_pages - 1:
        start_page = max(2, total_pages - (max_visible - 2))
        end_page = total_pages - 1

    if start_page > 2:
        pages.append("ellipsis-start")
    pages.extend(range(start_page, end_page + 1))
    if end_page < total_pages - 1:
        pages.append("ellipsis-end")
    pages.append(total_pages)
    return pages
