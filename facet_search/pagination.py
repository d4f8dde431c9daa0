from __future__ import annotations

"""
Page slicing with a page number that always stays in range.
"""

import math
from typing import Sequence

from loguru import logger

from .config import Resource, ResourcePage


def total_pages(total_items: int, page_size: int) -> int:
    if total_items <= 0:
        return 0
    return math.ceil(total_items / max(1, page_size))


def clamp_page(page: int, pages: int) -> int:
    """Clamp a 1-based page number into ``[1, max(pages, 1)]``."""
    return min(max(1, int(page)), max(1, pages))


def paginate(items: Sequence[Resource], page: int, page_size: int) -> ResourcePage:
    """
    Slice ``items`` into the requested page.

    A stale page number (e.g. page 5 after a filter left two pages) is
    clamped to the last page instead of producing an empty slice.
    """
    if page_size < 1:
        logger.warning("Page size {} is not positive; using 1", page_size)
        page_size = 1
    total = len(items)
    pages = total_pages(total, page_size)
    effective = clamp_page(page, pages)
    start = (effective - 1) * page_size
    end = min(effective * page_size, total)
    return ResourcePage(
        items=list(items[start:end]),
        page=effective,
        page_size=page_size,
        total_items=total,
        total_pages=pages,
        start_index=min(start, total),
        end_index=end,
    )
