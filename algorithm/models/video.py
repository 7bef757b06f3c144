"""
Video model: typed representation of one fetched video for ranking.

Only view_count and published_at feed the score; the rest is carried through
for display and tag analysis. Built from API dicts via Video.model_validate(d).
"""

from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, field_validator


class Video(BaseModel):
    """
    Video record used across the ranking helpers.

    Missing or negative view counts are coerced to zero here, so scoring
    fetched data never raises.
    """

    model_config = ConfigDict(extra="allow")

    video_id: Optional[str] = ""
    title: Optional[str] = ""
    published_at: str
    view_count: int = 0
    like_count: Optional[int] = None
    tags: List[str] = []
    thumbnail: Optional[str] = None
    duration: Optional[str] = None
    url: Optional[str] = None

    @field_validator("view_count", mode="before")
    @classmethod
    def coerce_view_count(cls, v: Any) -> int:
        if v is None or v == "":
            return 0
        v = int(v)
        return v if v > 0 else 0

    @field_validator("tags", mode="before")
    @classmethod
    def coerce_tags(cls, v: Any) -> List[str]:
        return list(v) if v else []


def ensure_list(videos: List[Union[Dict[str, Any], "Video"]]) -> List["Video"]:
    """Convert list of dicts or Videos to list of Video models."""
    return [
        Video.model_validate(v) if isinstance(v, dict) else v
        for v in videos
    ]
