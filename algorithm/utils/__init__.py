"""Shared utilities for scoring, timestamps, and pagination."""

from .pagination import DEFAULT_PAGE_SIZE, Page, paginate, total_pages
from .scores import age_hours, hacker_news_score, to_datetime, to_epoch_ms

__all__ = [
    "DEFAULT_PAGE_SIZE",
    "Page",
    "age_hours",
    "hacker_news_score",
    "paginate",
    "to_datetime",
    "to_epoch_ms",
    "total_pages",
]
