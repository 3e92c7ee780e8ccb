"""FastAPI application."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from backend.docchat.api.routes.auth import router as auth_router
from backend.docchat.api.routes.chat import router as chat_router
from backend.docchat.api.routes.chats import router as chats_router
from backend.docchat.api.routes.documents import router as documents_router
from backend.docchat.api.routes.health import router as health_router
from backend.docchat.api.routes.metrics import router as metrics_router
from backend.docchat.api.routes.settings import router as settings_router
from backend.docchat.api.routes.summary import router as summary_router
from backend.docchat.api.routes.upload import router as upload_router
from backend.docchat.config import Settings, get_settings
from backend.docchat.db.engine import create_async_engine_from_settings, create_session_factory
from backend.docchat.db.inmemory import build_in_memory_stores
from backend.docchat.db.seed_dev import seed_admin
from backend.docchat.errors import DocChatError
from backend.docchat.middleware.error_handler import docchat_exception_handler
from backend.docchat.utils.logging import configure_logging

logger = logging.getLogger(__name__)

VERSION = "0.1.0"


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Seed the in-memory admin on startup; dispose the engine on shutdown."""
    if app.state.engine is None:
        await seed_admin(app.state.stores.users, app.state.settings)

    yield

    if app.state.engine is not None:
        await app.state.engine.dispose()


def create_app(settings: Settings | None = None) -> FastAPI:
    """Build the application.

    Args:
        settings: Explicit settings (defaults to environment-based settings)

    Returns:
        FastAPI app with SQL stores when DATABASE_URL is set, otherwise
        fresh in-memory stores owned by this app instance
    """
    settings = settings or get_settings()
    configure_logging(settings.log_level)

    app = FastAPI(title="DocChat API", version=VERSION, lifespan=lifespan)
    app.state.settings = settings

    if settings.use_database:
        engine = create_async_engine_from_settings(settings)
        app.state.engine = engine
        app.state.session_factory = create_session_factory(engine)
        logger.info("Using SQL stores")
    else:
        app.state.engine = None
        app.state.session_factory = None
        app.state.stores = build_in_memory_stores()
        logger.info("DATABASE_URL not set, using in-memory stores")

    app.add_exception_handler(DocChatError, docchat_exception_handler)

    # Register routes
    app.include_router(health_router, tags=["health"])
    app.include_router(metrics_router, tags=["metrics"])
    app.include_router(auth_router)
    app.include_router(upload_router)
    app.include_router(chat_router)
    app.include_router(chats_router)
    app.include_router(documents_router)
    app.include_router(settings_router)
    app.include_router(summary_router)

    @app.get("/")
    async def root() -> dict[str, str]:
        """Root endpoint."""
        return {"message": "DocChat API", "version": VERSION}

    return app


app = create_app()
