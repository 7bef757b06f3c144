"""
Channel video ranking: time-decay (Hacker News style) scoring.

Single entry point for the algorithm package:
- models/: RankingConfig, Video, ScoredVideo, TagFrequency
- ranking/: score_videos, rank_videos, top_indices, sort_scored, top_tags
- utils/: hacker_news_score, timestamp parsing, paginate
"""

from .errors import InvalidInput
from .models import DEFAULT_CONFIG, RankingConfig, ScoredVideo, TagFrequency, Video, resolve_config
from .ranking import (
    SORT_LATEST,
    SORT_RATING,
    filter_by_date,
    rank_videos,
    score_videos,
    sort_scored,
    top_indices,
    top_tags,
)
from .utils import Page, hacker_news_score, paginate

__all__ = [
    "DEFAULT_CONFIG",
    "InvalidInput",
    "Page",
    "RankingConfig",
    "SORT_LATEST",
    "SORT_RATING",
    "ScoredVideo",
    "TagFrequency",
    "Video",
    "filter_by_date",
    "hacker_news_score",
    "paginate",
    "rank_videos",
    "resolve_config",
    "score_videos",
    "sort_scored",
    "top_indices",
    "top_tags",
]
