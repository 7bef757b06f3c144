"""Register all route modules on the FastAPI app."""

from fastapi import FastAPI

from .analyze import router as analyze_router
from .history import router as history_router
from .ranking import router as ranking_router
from .root import router as root_router


def register_routes(app: FastAPI) -> None:
    """Attach all API routers to the app."""
    app.include_router(root_router)
    app.include_router(ranking_router, prefix="/api/ranking", tags=["ranking"])
    app.include_router(history_router, prefix="/api/history", tags=["history"])
    app.include_router(analyze_router, prefix="/api/analyze", tags=["analyze"])
