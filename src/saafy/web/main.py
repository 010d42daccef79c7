"""FastAPI application exposing the player, discovery and catalog."""

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from loguru import logger

from saafy import __version__
from saafy.context import AppContext
from saafy.core.config import Config, load_config
from saafy.domain.catalog.exceptions import ApiErrorCode, CatalogError

from .routers import catalog, discovery, library, live, player
from .schemas import HealthResponse
from .sync_manager import SyncManager


def status_for_error(error: CatalogError) -> int:
    """HTTP status to answer with for a song API failure."""
    if error.code == ApiErrorCode.INVALID_INPUT:
        return 400
    if error.code == ApiErrorCode.NETWORK_ERROR:
        return 503
    if 400 <= error.status < 500:
        return error.status
    return 502


async def catalog_error_handler(request: Request, exc: CatalogError) -> JSONResponse:
    status = status_for_error(exc)
    logger.warning(f"{request.method} {request.url.path} -> {status}: {exc.message}")
    return JSONResponse(status_code=status, content={"detail": exc.message, "error": exc.to_dict()})


def create_app(ctx: Optional[AppContext] = None, config: Optional[Config] = None) -> FastAPI:
    """Build the app around `ctx`, or around a context created at startup.

    A context passed in is owned by the caller and is not closed on shutdown.
    """
    config = ctx.config if ctx is not None else (config or load_config())
    sync_manager = SyncManager()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        owned = ctx is None
        app.state.ctx = ctx or AppContext.create(config)
        sync_manager.bind(app.state.ctx)
        logger.info("Web API started")
        try:
            yield
        finally:
            sync_manager.unbind()
            if owned:
                await app.state.ctx.aclose()
            logger.info("Web API stopped")

    app = FastAPI(title="Saafy Web API", version=__version__, lifespan=lifespan)
    app.state.sync_manager = sync_manager
    if ctx is not None:
        app.state.ctx = ctx

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.web.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(CatalogError, catalog_error_handler)

    app.include_router(player.router, prefix="/api/player", tags=["player"])
    app.include_router(discovery.router, prefix="/api/discovery", tags=["discovery"])
    app.include_router(catalog.router, prefix="/api/catalog", tags=["catalog"])
    app.include_router(library.router, prefix="/api/library", tags=["library"])
    app.include_router(live.router)

    @app.get("/health", response_model=HealthResponse)
    async def health_check():
        return {"status": "healthy"}

    return app
