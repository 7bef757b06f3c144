"""Channel, ranking, and analyze request/response models."""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from algorithm.models.scoring import ScoredVideo, TagFrequency
from algorithm.models.video import Video

from .history import CachedReport, CachedReportSummary


class ChannelInfo(BaseModel):
    """Channel metadata as returned by the video source."""

    channel_id: str
    title: str = ""
    handle: Optional[str] = None
    description: Optional[str] = None
    avatar: Optional[str] = None
    subscriber_count: int = 0
    video_count: int = 0
    view_count: int = 0
    uploads_playlist_id: Optional[str] = None


class RankRequest(BaseModel):
    videos: List[Video]
    now: Optional[str] = None  # ISO-8601; defaults to server time
    order: str = "rating"  # "latest" | "rating"
    day: Optional[str] = None  # YYYY-MM-DD filter
    highlight_top_k: Optional[int] = Field(default=None, ge=0)


class RankedVideo(ScoredVideo):
    highlighted: bool = False


class RankResponse(BaseModel):
    videos: List[RankedVideo]
    top_indices: List[int]


class TopTagsRequest(BaseModel):
    videos: List[Video]
    now: Optional[str] = None
    top_n: Optional[int] = Field(default=None, ge=1)


class TopTagsResponse(BaseModel):
    tags: List[TagFrequency]


class AnalyzeRequest(BaseModel):
    channel: str = Field(min_length=1)  # URL, @handle, or channel id
    force: bool = False  # skip the "reuse cached report?" short-circuit
    max_videos: Optional[int] = Field(default=None, ge=1, le=200)


class AnalyzeResponse(BaseModel):
    """
    Either the cached reports found for the channel (cached=True, report=None)
    so the caller can offer reuse, or the freshly generated and saved report.
    """

    channel_id: str
    cached: bool
    cached_reports: List[CachedReportSummary] = []
    report: Optional[CachedReport] = None
