"""
FastAPI application factory.
"""

from __future__ import annotations

import importlib.metadata
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Optional

import structlog
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from .config import Settings, get_settings
from .errors import WeaveError
from .invocations import InvocationBroker
from .logs import configure_logging
from .routes import router
from .state import AppState

# Initialize structured logging
logger = structlog.get_logger("ritual_weave")


def create_app(
    state: Optional[AppState] = None, settings: Optional[Settings] = None
) -> FastAPI:
    """Build the application around ``state`` (a fresh AppState by default)."""
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        """Application lifespan manager."""
        configure_logging(settings.log_level, settings.log_format)
        logger.info(
            "server.start",
            entity="server",
            status="listening",
            meta={"environment": settings.environment},
        )
        yield
        logger.info("server.stop", entity="server", status="stopped")

    app = FastAPI(
        title=settings.app_name,
        description="Household rituals, runs, attention items and automations",
        version=importlib.metadata.version("ritual-weave"),
        lifespan=lifespan,
    )
    app.state.weave = state or AppState()
    app.state.invocations = InvocationBroker(settings.invocation_base_url)

    @app.exception_handler(WeaveError)
    async def weave_error_handler(request: Request, exc: WeaveError) -> JSONResponse:
        if exc.status_code >= 500:
            logger.error("request.failed", path=request.url.path, error=exc.code)
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(
        request: Request, exc: StarletteHTTPException
    ) -> JSONResponse:
        if exc.status_code in (404, 405):
            return JSONResponse(status_code=404, content={"status": "not_found"})
        return JSONResponse(status_code=exc.status_code, content={"status": "error"})

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception(
            "request.unhandled_error", method=request.method, path=request.url.path
        )
        return JSONResponse(status_code=500, content={"status": "error"})

    app.include_router(router)

    if settings.public_dir:
        public_dir = Path(settings.public_dir)
        if public_dir.is_dir():
            app.mount("/", StaticFiles(directory=public_dir, html=True), name="public")
        else:
            logger.warning("static.missing_directory", public_dir=str(public_dir))

    return app
