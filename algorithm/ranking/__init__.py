"""
Ranking: score videos once, then sort, highlight, filter, or mine tags.

Public API: score_videos, rank_videos, top_indices, sort_scored,
filter_by_date, top_tags.
"""

from .core import (
    SORT_LATEST,
    SORT_ORDERS,
    SORT_RATING,
    by_score,
    filter_by_date,
    rank_videos,
    score_videos,
    sort_scored,
    top_indices,
)
from .tags import clean_tag, tag_frequency, top_tags

__all__ = [
    "SORT_LATEST",
    "SORT_ORDERS",
    "SORT_RATING",
    "by_score",
    "clean_tag",
    "filter_by_date",
    "rank_videos",
    "score_videos",
    "sort_scored",
    "tag_frequency",
    "top_indices",
    "top_tags",
]
