"""Page slicing for history lists. Stateless; page numbers are 1-based."""

import math
from typing import List, Sequence, TypeVar

from pydantic import BaseModel

T = TypeVar("T")

DEFAULT_PAGE_SIZE = 5


class Page(BaseModel):
    """One page of a list plus the numbers needed to render pagination."""

    items: List
    page: int
    page_size: int
    total: int
    total_pages: int


def total_pages(total: int, page_size: int = DEFAULT_PAGE_SIZE) -> int:
    return math.ceil(total / page_size) if total > 0 else 0


def paginate(items: Sequence[T], page: int = 1, page_size: int = DEFAULT_PAGE_SIZE) -> Page:
    """
    Slice items to the requested page.

    page is clamped into [1, total_pages], so deleting the last entry of the
    last page lands the caller on the new last page instead of an empty one.
    """
    if page_size < 1:
        raise ValueError(f"page_size must be >= 1, got {page_size}")
    total = len(items)
    pages = total_pages(total, page_size)
    page = min(max(page, 1), max(pages, 1))
    start = (page - 1) * page_size
    return Page(
        items=list(items[start:start + page_size]),
        page=page,
        page_size=page_size,
        total=total,
        total_pages=pages,
    )
