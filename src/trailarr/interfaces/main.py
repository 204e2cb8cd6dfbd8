from __future__ import annotations

import time

import structlog
from fastapi import FastAPI, Request

from trailarr import __version__
from trailarr.infrastructure.config import AppConfig
from trailarr.interfaces.app_state import AppState
from trailarr.interfaces.composition import lifespan

log = structlog.get_logger(__name__)


def build_app(config: AppConfig) -> FastAPI:
    """Build the FastAPI app from config only.

    Resources (HTTP client, resolver) are created in lifespan().
    """
    app = FastAPI(
        title="Trailarr",
        description="Resolves YouTube trailers into directly playable stream URLs",
        version=__version__,
        lifespan=lifespan,
    )

    app.state = AppState()
    app.state.config = config

    from trailarr.interfaces.api.trailers.router import router as trailers_router

    app.include_router(trailers_router)

    @app.get("/healthz")
    async def healthz() -> dict[str, str]:
        return {"status": "ok"}

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        start = time.perf_counter()
        status_code = 500
        try:
            response = await call_next(request)
            status_code = response.status_code
            return response
        finally:
            log.info(
                "http_request",
                method=request.method,
                path=request.url.path,
                status_code=status_code,
                duration_ms=round((time.perf_counter() - start) * 1000.0, 2),
                client_host=(request.client.host if request.client else None),
            )

    return app
