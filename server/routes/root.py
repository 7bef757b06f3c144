"""Root and health endpoints."""

from fastapi import APIRouter

from ..state import get_state

router = APIRouter()


@router.get("/")
def root():
    state = get_state()
    return {
        "name": "Channel Report API",
        "version": "1.0.0",
        "report_cache": {
            "backend": state.config.report_cache_backend,
            "reports": state.report_cache.count(),
            "max_per_channel": state.report_cache.max_reports_per_channel,
            "ttl_hours": state.config.report_cache_ttl_hours,
        },
        "endpoints": {
            "ranking": ["/api/ranking/rank", "/api/ranking/top-tags"],
            "history": ["/api/history", "/api/history/channels", "/api/history/channels/{channel_id}/reports"],
            "analyze": ["/api/analyze"],
        },
    }


@router.get("/api/health")
def health():
    state = get_state()
    return {
        "status": "healthy",
        "youtube": {"available": state.video_source is not None},
        "analysis": {
            "available": state.analysis_generator is not None,
            "model": state.config.analysis_model,
        },
    }
