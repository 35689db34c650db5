from __future__ import annotations

import time

import structlog
from fastapi import FastAPI, Request

from addonarr.infrastructure.config import AppConfig
from addonarr.interfaces.app_state import AppState
from addonarr.interfaces.composition import lifespan

log = structlog.get_logger(__name__)


def build_app(config: AppConfig) -> FastAPI:
    """Build the FastAPI app from config only.

    Resources (HTTP client, registry, use cases) are created in lifespan().
    """
    app = FastAPI(
        title="Addonarr",
        description="Addon aggregation and stream resolution engine",
        version="0.1.0",
        lifespan=lifespan,
    )

    app.state = AppState()
    app.state.config = config

    from addonarr.interfaces.api.addons.router import router as addons_router
    from addonarr.interfaces.api.errors import register_error_handlers
    from addonarr.interfaces.api.playback.router import router as playback_router
    from addonarr.interfaces.api.streams.router import router as streams_router

    app.include_router(addons_router, prefix="/api/v1")
    app.include_router(streams_router, prefix="/api/v1")
    app.include_router(playback_router, prefix="/api/v1")
    register_error_handlers(app)

    @app.get("/healthz")
    async def healthz() -> dict[str, str]:
        return {"status": "ok"}

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        start = time.perf_counter()
        try:
            response = await call_next(request)
            return response
        finally:
            duration_ms = (time.perf_counter() - start) * 1000.0
            status_code = getattr(locals().get("response", None), "status_code", 500)

            log.info(
                "http_request",
                method=request.method,
                path=request.url.path,
                query=str(request.url.query),
                status_code=status_code,
                duration_ms=round(duration_ms, 2),
                client_host=(request.client.host if request.client else None),
            )

    return app
