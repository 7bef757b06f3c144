"""
Analyze a channel: reuse a cached report or fetch, rank, generate, and save a new one.

Without `force`, a channel that already has live cached reports gets them
back (cached=True) so the caller can offer "reuse or re-analyze?".
"""

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, HTTPException
from fastapi.concurrency import run_in_threadpool

from algorithm.ranking import rank_videos, top_tags

from ..models import AnalyzeRequest, AnalyzeResponse
from ..services import AnalysisError, VideoSourceError, parse_channel_ref
from ..state import get_state

logger = logging.getLogger(__name__)

router = APIRouter()


def _video_source_http_error(e: VideoSourceError) -> HTTPException:
    return HTTPException(status_code=e.status_code, detail={"error_type": e.error_type, "message": str(e)})


@router.post("", response_model=AnalyzeResponse)
async def analyze(request: AnalyzeRequest):
    state = get_state()
    cache = state.report_cache
    ref = request.channel.strip()

    # Known alias or a raw channel id: the cache can answer without any API call
    channel_id = await run_in_threadpool(cache.resolve_channel_id, ref)
    if channel_id is None:
        try:
            kind, value = parse_channel_ref(ref)
        except VideoSourceError as e:
            raise _video_source_http_error(e)
        if kind == "id":
            channel_id = value

    if channel_id and not request.force:
        cached = await run_in_threadpool(cache.list_reports_for_channel, channel_id)
        if cached:
            return AnalyzeResponse(channel_id=channel_id, cached=True, cached_reports=cached)

    if state.video_source is None or state.analysis_generator is None:
        raise HTTPException(
            status_code=503,
            detail="Analysis not configured. Set YOUTUBE_API_KEY and GEMINI_API_KEY in .env.",
        )

    max_videos = request.max_videos or state.config.max_videos
    try:
        channel = await run_in_threadpool(state.video_source.resolve_channel, channel_id or ref)
        videos = await run_in_threadpool(state.video_source.get_recent_videos, channel, max_videos)
    except VideoSourceError as e:
        raise _video_source_http_error(e)

    if ref != channel.channel_id:
        await run_in_threadpool(cache.set_channel_alias, ref, channel.channel_id)
        if not request.force:
            cached = await run_in_threadpool(cache.list_reports_for_channel, channel.channel_id)
            if cached:
                return AnalyzeResponse(channel_id=channel.channel_id, cached=True, cached_reports=cached)

    config = state.ranking_config
    now = datetime.now(timezone.utc)
    ranked = rank_videos(videos, now, config)
    tags = top_tags(videos, now, config)
    try:
        analysis = await state.analysis_generator.generate(channel, ranked, tags)
    except AnalysisError as e:
        raise HTTPException(status_code=502, detail=str(e))

    payload = {
        "brand_name": channel.title,
        "channel": channel.model_dump(),
        "videos": [s.model_dump() for s in ranked],
        "top_tags": [t.model_dump() for t in tags],
        "analysis": analysis,
    }
    report = await run_in_threadpool(
        cache.save, channel.channel_id, payload, brand_name=channel.title, channel_avatar=channel.avatar
    )
    logger.info("[analyze] %s: %d videos ranked, report %d saved", channel.channel_id, len(ranked), report.timestamp)
    return AnalyzeResponse(channel_id=channel.channel_id, cached=False, report=report)
