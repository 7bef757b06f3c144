"""Pydantic request/response models for the API."""

from .analysis import (
    AnalyzeRequest,
    AnalyzeResponse,
    ChannelInfo,
    RankedVideo,
    RankRequest,
    RankResponse,
    TopTagsRequest,
    TopTagsResponse,
)
from .history import (
    CachedReport,
    CachedReportSummary,
    ChannelAliasRequest,
    ChannelAliasResponse,
    ChannelHistorySummary,
    HistoryPage,
    SaveReportRequest,
)

__all__ = [
    "AnalyzeRequest",
    "AnalyzeResponse",
    "CachedReport",
    "CachedReportSummary",
    "ChannelAliasRequest",
    "ChannelAliasResponse",
    "ChannelHistorySummary",
    "ChannelInfo",
    "HistoryPage",
    "RankRequest",
    "RankResponse",
    "RankedVideo",
    "SaveReportRequest",
    "TopTagsRequest",
    "TopTagsResponse",
]
