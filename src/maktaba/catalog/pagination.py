"""Pure page-window arithmetic shared by browsing, search and the replica."""

from __future__ import annotations

import math

from maktaba.errors import ValidationError


ITEMS_PER_PAGE = 25


def require_page_size(page_size: int) -> None:
    if page_size <= 0:
        raise ValidationError("page_size must be positive")


def total_pages(total_items: int, page_size: int) -> int:
    """``ceil(total_items / page_size)`` with a floor of one page."""

    require_page_size(page_size)
    return max(1, math.ceil(max(0, total_items) / page_size))


def clamp_page(page: int, pages: int) -> int:
    return min(max(1, page), max(1, pages))


def page_window(page: int, page_size: int) -> tuple[int, int]:
    """Return ``(offset, limit)`` for a 1-based page."""

    require_page_size(page_size)
    return (max(1, page) - 1) * page_size, page_size
