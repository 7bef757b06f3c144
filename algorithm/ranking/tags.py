"""
Tag frequency over the best-performing videos.

Only the top-N scored videos contribute, so the result reflects what the
channel's winners are tagged with rather than its whole back catalogue.
"""

import re
from typing import Dict, List, Optional, Union

from ..models.config import RankingConfig, resolve_config
from ..models.scoring import ScoredVideo, TagFrequency
from ..models.video import Video
from ..utils.scores import Timestamp
from .core import by_score, score_videos

_TAG_JUNK = re.compile(r"['\"\[\]]")


def clean_tag(tag: str) -> str:
    """Strip quote and bracket characters left over from scraped tag lists."""
    return _TAG_JUNK.sub("", tag).strip()


def tag_frequency(scored: List[ScoredVideo]) -> List[TagFrequency]:
    """Count tags across the given videos, most frequent first."""
    counts: Dict[str, int] = {}
    titles: Dict[str, List[str]] = {}
    for s in scored:
        for raw in s.video.tags:
            tag = clean_tag(raw)
            if not tag:
                continue
            counts[tag] = counts.get(tag, 0) + 1
            title = s.video.title or ""
            if title not in titles.setdefault(tag, []):
                titles[tag].append(title)
    rows = [TagFrequency(tag=t, count=c, videos=titles[t]) for t, c in counts.items()]
    rows.sort(key=lambda r: r.count, reverse=True)
    return rows


def top_tags(
    videos: List[Union[Dict, Video]],
    now: Optional[Timestamp] = None,
    config: Optional[RankingConfig] = None,
    top_n: Optional[int] = None,
) -> List[TagFrequency]:
    """Tag frequency restricted to the top_n (default config.tag_top_n) best-scored videos."""
    config = resolve_config(config)
    if top_n is None:
        top_n = config.tag_top_n
    top = by_score(score_videos(videos, now, config))[:top_n]
    return tag_frequency(top)
