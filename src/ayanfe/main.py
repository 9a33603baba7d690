"""FastAPI application factory."""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from ayanfe.achievements.catalog import load_catalog
from ayanfe.achievements.router import router as achievements_router
from ayanfe.achievements.seed import seed_all
from ayanfe.chat.router import router as chat_router
from ayanfe.config import get_settings
from ayanfe.database import close_db, get_session_factory, init_db
from ayanfe.health.router import router as health_router
from ayanfe.middleware import setup_middleware
from ayanfe.redis_client import close_redis, init_redis
from ayanfe.usage.router import router as usage_router
from ayanfe.users.router import router as users_router

logger = logging.getLogger(__name__)


async def load_achievement_state(app: FastAPI, *, seed: bool = True) -> None:
    """Seed definitions (idempotent) and load the catalog onto ``app.state``."""
    async with get_session_factory()() as db:
        if seed:
            await seed_all(db)
        app.state.catalog = await load_catalog(db)
    logger.info(
        "Achievement catalog loaded: %d badges, %d achievements",
        len(app.state.catalog.badges),
        len(app.state.catalog.achievements),
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup and shutdown lifecycle."""
    settings = get_settings()
    await init_db(settings.database_url)
    await init_redis(settings)

    try:
        await load_achievement_state(app, seed=settings.seed_on_startup)
    except Exception:
        logger.warning("Achievement catalog load failed (tables may not exist yet)", exc_info=True)

    yield

    await close_db()
    await close_redis()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title="AYANFE AI API",
        description="Chat history, content classification and achievements for AYANFE AI",
        version=settings.app_version,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        lifespan=lifespan,
    )

    setup_middleware(app, settings)
    app.include_router(health_router, tags=["Health"])
    app.include_router(users_router)
    app.include_router(chat_router)
    app.include_router(usage_router)
    app.include_router(achievements_router)

    return app


app = create_app()
