"""FastAPI application factory for the threadboard REST API."""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from fastapi import FastAPI

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from threadboard.config.schema import ThreadboardConfig


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Lifespan handler: set up the DB on startup, dispose it on shutdown."""
    from threadboard.store.database import create_db

    config: ThreadboardConfig = app.state.config
    factory, engine = await create_db(config)

    app.state.db_factory = factory
    app.state.engine = engine

    yield

    await engine.dispose()


def create_app(config: ThreadboardConfig | None = None) -> FastAPI:
    """Create and configure the FastAPI application."""
    from threadboard import __version__
    from threadboard.config.loader import load_config

    if config is None:
        config = load_config()

    app = FastAPI(
        title="threadboard",
        description="Threaded discussion API",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.config = config

    from fastapi.middleware.cors import CORSMiddleware

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.api.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    from threadboard.api.errors import install_error_handlers

    install_error_handlers(app)

    from threadboard.api.auth import router as auth_router
    from threadboard.api.health import router as health_router
    from threadboard.api.routes.comments import router as comments_router
    from threadboard.api.routes.posts import router as posts_router

    app.include_router(auth_router)
    app.include_router(posts_router)
    app.include_router(comments_router)
    app.include_router(health_router)

    return app
