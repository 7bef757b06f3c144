"""Cached report and history models (report cache records and history routes)."""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class CachedReportSummary(BaseModel):
    """Display metadata of one cached report, without its payload."""

    channel_id: str
    timestamp: int  # epoch ms, version key within the channel
    created_at: str  # ISO-8601 mirror of timestamp
    brand_name: Optional[str] = None
    channel_avatar: Optional[str] = None


class CachedReport(CachedReportSummary):
    """One completed analysis run for one channel."""

    payload: Dict[str, Any]

    def summary(self) -> CachedReportSummary:
        return CachedReportSummary(**self.model_dump(exclude={"payload"}))


class ChannelHistorySummary(BaseModel):
    """A channel in the history index, described by its newest report."""

    channel_id: str
    timestamp: int
    created_at: str
    brand_name: Optional[str] = None
    channel_avatar: Optional[str] = None
    report_count: int


class SaveReportRequest(BaseModel):
    payload: Dict[str, Any]
    brand_name: Optional[str] = None
    channel_avatar: Optional[str] = None


class ChannelAliasRequest(BaseModel):
    channel_id: str = Field(min_length=1)


class ChannelAliasResponse(BaseModel):
    alias: str
    channel_id: str


class HistoryPage(BaseModel):
    """One page of report summaries (history list, or one channel's reports)."""

    items: List[CachedReportSummary]
    page: int
    page_size: int
    total: int
    total_pages: int
