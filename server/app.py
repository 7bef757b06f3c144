"""
Channel Report API: FastAPI app factory.

Use: uvicorn server.app:app
Or:  from server import app
"""

import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .config import get_config
from .routes import register_routes
from .services import StorageError
from .state import get_state

logger = logging.getLogger(__name__)


def create_app() -> FastAPI:
    """Build FastAPI app with logging, CORS, error handlers, routes, and startup."""
    config = get_config()
    logging.basicConfig(
        level=getattr(logging, config.log_level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app = FastAPI(
        title="Channel Report API",
        description="Time-decay video ranking and per-channel report history",
        version="1.0.0",
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(StorageError)
    async def storage_error_handler(request: Request, exc: StorageError):
        logger.error("[storage] %s %s: %s", request.method, request.url.path, exc)
        return JSONResponse(
            status_code=507,
            content={"detail": str(exc), "error_type": type(exc).__name__},
        )

    register_routes(app)

    @app.on_event("startup")
    def _startup():
        ok, errors = config.validate()
        for error in errors:
            logger.warning("[startup] config: %s", error)
        state = get_state()
        logger.info(
            "[startup] Channel Report API starting (cache=%s, reports=%d, valid_config=%s)",
            config.report_cache_backend, state.report_cache.count(), ok,
        )

    return app


app = create_app()
