"""
Ranking orchestration: score every video once, then order, highlight, or filter.

All consumers take the list produced by score_videos so a video is scored
exactly once per request, against one fixed `now`.
"""

import logging
from datetime import datetime, timezone, tzinfo
from typing import Dict, List, Optional, Set, Union

from ..errors import InvalidInput
from ..models.config import RankingConfig, resolve_config
from ..models.scoring import ScoredVideo
from ..models.video import Video, ensure_list
from ..utils.scores import Timestamp, hacker_news_score, to_datetime

logger = logging.getLogger(__name__)

SORT_LATEST = "latest"
SORT_RATING = "rating"
SORT_ORDERS = (SORT_LATEST, SORT_RATING)


def score_videos(
    videos: List[Union[Dict, Video]],
    now: Optional[Timestamp] = None,
    config: Optional[RankingConfig] = None,
) -> List[ScoredVideo]:
    """Score each video, keeping input order and recording original_index."""
    config = resolve_config(config)
    if now is None:
        now = datetime.now(timezone.utc)
    scored: List[ScoredVideo] = []
    for i, video in enumerate(ensure_list(videos)):
        score = hacker_news_score(
            video.view_count,
            video.published_at,
            now,
            gravity=config.gravity,
            age_offset_hours=config.age_offset_hours,
            min_age_hours=config.min_age_hours,
        )
        scored.append(ScoredVideo(video=video, original_index=i, score=score))
    logger.debug("[ranking] scored %d videos", len(scored))
    return scored


def by_score(scored: List[ScoredVideo]) -> List[ScoredVideo]:
    """Highest score first. Stable, so ties keep input order."""
    return sorted(scored, key=lambda s: s.score, reverse=True)


def rank_videos(
    videos: List[Union[Dict, Video]],
    now: Optional[Timestamp] = None,
    config: Optional[RankingConfig] = None,
) -> List[ScoredVideo]:
    """Score and sort videos, highest score first."""
    return by_score(score_videos(videos, now, config))


def top_indices(scored: List[ScoredVideo], k: int) -> Set[int]:
    """Original indices of the k best-scored videos (the highlighted set)."""
    if k <= 0:
        return set()
    return {s.original_index for s in by_score(scored)[:k]}


def sort_scored(scored: List[ScoredVideo], order: str = SORT_LATEST) -> List[ScoredVideo]:
    """
    Order scored videos for display.

    "latest" keeps the input order (fetched lists are already newest first);
    "rating" sorts by score.
    """
    if order == SORT_LATEST:
        return list(scored)
    if order == SORT_RATING:
        return by_score(scored)
    raise InvalidInput(f"Unknown sort order {order!r}; expected one of {SORT_ORDERS}")


def filter_by_date(
    scored: List[ScoredVideo],
    day: Optional[str],
    tz: tzinfo = timezone.utc,
) -> List[ScoredVideo]:
    """Keep videos published on calendar day YYYY-MM-DD in tz. None keeps everything."""
    if not day:
        return list(scored)
    try:
        target = datetime.strptime(day, "%Y-%m-%d").date()
    except ValueError:
        raise InvalidInput(f"Day must be YYYY-MM-DD, got {day!r}") from None
    return [
        s for s in scored
        if to_datetime(s.video.published_at).astimezone(tz).date() == target
    ]
