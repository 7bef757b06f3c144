"""
Score helpers: timestamp parsing and the time-decay popularity score.

hacker_news_score is the single source of truth for ranking; every consumer
(sorting, highlighting, tag analysis) goes through it.
"""

import math
from datetime import datetime, timezone
from typing import Optional, Union

from ..errors import InvalidInput

Timestamp = Union[str, datetime, int, float]

MS_PER_HOUR = 60 * 60 * 1000


def to_datetime(value: Timestamp) -> datetime:
    """
    Parse an ISO-8601 string, datetime, or epoch milliseconds into an aware UTC datetime.

    Naive datetimes and offset-less strings are taken as UTC.
    """
    if isinstance(value, bool):
        raise InvalidInput(f"Unparseable timestamp: {value!r}")
    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, (int, float)):
        if not math.isfinite(value):
            raise InvalidInput(f"Unparseable timestamp: {value!r}")
        dt = datetime.fromtimestamp(value / 1000, tz=timezone.utc)
    elif isinstance(value, str):
        try:
            dt = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
        except ValueError:
            raise InvalidInput(f"Unparseable timestamp: {value!r}") from None
    else:
        raise InvalidInput(f"Unparseable timestamp: {value!r}")
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def to_epoch_ms(value: Timestamp) -> float:
    """Epoch milliseconds for any accepted timestamp form."""
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        if not math.isfinite(value):
            raise InvalidInput(f"Unparseable timestamp: {value!r}")
        return float(value)
    return to_datetime(value).timestamp() * 1000


def age_hours(
    published_at: Timestamp,
    now: Optional[Timestamp] = None,
    min_age_hours: float = 1.0,
) -> float:
    """Hours between published_at and now, floored at min_age_hours."""
    now_ms = to_epoch_ms(now) if now is not None else datetime.now(timezone.utc).timestamp() * 1000
    elapsed = (now_ms - to_epoch_ms(published_at)) / MS_PER_HOUR
    return max(min_age_hours, elapsed)


def hacker_news_score(
    views: Optional[int],
    published_at: Timestamp,
    now: Optional[Timestamp] = None,
    gravity: float = 1.8,
    age_offset_hours: float = 2.0,
    min_age_hours: float = 1.0,
) -> float:
    """
    Time-decayed popularity score (Hacker News style).

    points = views + 1, so zero-view videos still rank by age.
    score = points / (max(min_age_hours, age) + age_offset_hours) ** gravity

    Only views and publish time count; likes and comments are left out.
    A missing view count is scored as zero; a negative one raises InvalidInput.
    With now=None the score keeps falling as wall-clock time advances.
    """
    if views is None:
        views = 0
    if isinstance(views, bool) or not isinstance(views, (int, float)) or not math.isfinite(views) or views < 0:
        raise InvalidInput(f"View count must be a non-negative number, got {views!r}")
    points = views + 1
    hours = age_hours(published_at, now, min_age_hours)
    return points / math.pow(hours + age_offset_hours, gravity)
