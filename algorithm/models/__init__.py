"""Data models for the ranking code."""

from .config import DEFAULT_CONFIG, RankingConfig, resolve_config
from .scoring import ScoredVideo, TagFrequency
from .video import Video, ensure_list

__all__ = [
    "DEFAULT_CONFIG",
    "RankingConfig",
    "ScoredVideo",
    "TagFrequency",
    "Video",
    "ensure_list",
    "resolve_config",
]
