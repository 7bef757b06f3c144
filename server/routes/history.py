"""
Report history: list, load, save, and delete cached channel reports.

Expired reports behave exactly like absent ones. Deletes are idempotent.
Storage failures surface as 507 (see the app's exception handlers).
"""

from typing import List, Optional

from fastapi import APIRouter, HTTPException, Query, Response

from algorithm.utils.pagination import paginate

from ..models import (
    CachedReport,
    ChannelAliasRequest,
    ChannelAliasResponse,
    ChannelHistorySummary,
    HistoryPage,
    SaveReportRequest,
)
from ..services import NotFound
from ..state import get_state

router = APIRouter()


def _page(items, page: int, page_size: Optional[int]) -> HistoryPage:
    size = page_size or get_state().ranking_config.page_size
    p = paginate(items, page, size)
    return HistoryPage(**p.model_dump())


@router.get("", response_model=HistoryPage)
def list_history(page: int = Query(1, ge=1), page_size: Optional[int] = Query(None, ge=1, le=100)):
    """Every live report of every channel, newest first, one page at a time."""
    return _page(get_state().report_cache.list_history(), page, page_size)


@router.delete("", status_code=204)
def clear_history():
    """Remove every cached report. Irreversible."""
    get_state().report_cache.clear_all()
    return Response(status_code=204)


@router.get("/channels", response_model=List[ChannelHistorySummary])
def list_channels():
    return get_state().report_cache.list_channels()


@router.get("/channels/{channel_id}/reports", response_model=HistoryPage)
def list_channel_reports(
    channel_id: str,
    page: int = Query(1, ge=1),
    page_size: Optional[int] = Query(None, ge=1, le=100),
):
    return _page(get_state().report_cache.list_reports_for_channel(channel_id), page, page_size)


@router.post("/channels/{channel_id}/reports", response_model=CachedReport, status_code=201)
def save_report(channel_id: str, request: SaveReportRequest):
    """Store a finished report; evicts the channel's oldest when it is at its cap."""
    return get_state().report_cache.save(
        channel_id,
        request.payload,
        brand_name=request.brand_name,
        channel_avatar=request.channel_avatar,
    )


@router.delete("/channels/{channel_id}")
def delete_channel(channel_id: str):
    removed = get_state().report_cache.delete_channel(channel_id)
    return {"channel_id": channel_id, "removed": removed}


@router.get("/channels/{channel_id}/reports/latest", response_model=CachedReport)
def get_latest_report(channel_id: str):
    try:
        return get_state().report_cache.get_latest_report(channel_id)
    except NotFound as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.get("/channels/{channel_id}/reports/{timestamp}", response_model=CachedReport)
def get_report(channel_id: str, timestamp: int):
    try:
        return get_state().report_cache.get_report(channel_id, timestamp)
    except NotFound as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.delete("/channels/{channel_id}/reports/{timestamp}", status_code=204)
def delete_report(channel_id: str, timestamp: int):
    get_state().report_cache.delete_report(channel_id, timestamp)
    return Response(status_code=204)


@router.put("/aliases/{alias}", response_model=ChannelAliasResponse)
def set_alias(alias: str, request: ChannelAliasRequest):
    get_state().report_cache.set_channel_alias(alias, request.channel_id)
    return ChannelAliasResponse(alias=alias, channel_id=request.channel_id)


@router.get("/aliases/{alias}", response_model=ChannelAliasResponse)
def resolve_alias(alias: str):
    channel_id = get_state().report_cache.resolve_channel_id(alias)
    if channel_id is None:
        raise HTTPException(status_code=404, detail=f"Unknown alias {alias!r}")
    return ChannelAliasResponse(alias=alias, channel_id=channel_id)
