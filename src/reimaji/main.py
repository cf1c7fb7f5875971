"""FastAPI application factory."""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from reimaji.analytics.router import router as analytics_router
from reimaji.bookmarks.router import router as bookmarks_router
from reimaji.config import get_settings
from reimaji.content.news_router import router as news_router
from reimaji.content.research_router import router as research_router
from reimaji.content.router import router as content_router
from reimaji.database import close_db, get_session, init_db
from reimaji.gamification.router import router as gamification_router
from reimaji.gamification.seed import seed_badges
from reimaji.health.router import router as health_router
from reimaji.lms.progress_router import router as progress_router
from reimaji.lms.router import router as lms_router
from reimaji.middleware import setup_middleware
from reimaji.onboarding.router import router as onboarding_router
from reimaji.redis_client import close_redis, init_redis
from reimaji.users.router import router as users_router


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup and shutdown lifecycle."""
    settings = get_settings()
    await init_db(settings.database_url)
    await init_redis(settings.redis_url)

    # Seed badge definitions (idempotent)
    try:
        async for db in get_session():
            await seed_badges(db)
            break
    except Exception:
        logging.getLogger(__name__).warning(
            "Badge seeding failed (tables may not exist yet)", exc_info=True
        )

    yield

    await close_db()
    await close_redis()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title="Reimaji API",
        description="Backend API for Reimaji: AI news, research summaries and courses",
        version=settings.app_version,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        lifespan=lifespan,
    )

    setup_middleware(app, settings)
    app.include_router(health_router, tags=["Health"])
    app.include_router(users_router)
    app.include_router(news_router)
    app.include_router(research_router)
    app.include_router(content_router)
    app.include_router(lms_router)
    app.include_router(progress_router)
    app.include_router(gamification_router)
    app.include_router(bookmarks_router)
    app.include_router(onboarding_router)
    app.include_router(analytics_router)

    return app


app = create_app()
