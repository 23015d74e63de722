from __future__ import annotations

"""Application factory for the FastAPI app.

Builds the app together with its long-lived collaborators (story store,
rate limiter, story service) and keeps them on ``app.state``. Nothing is
module-global, so tests can build as many isolated apps as they need.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from story_api import __version__
from story_api.adapters.storage.base import AbstractStoryStore
from story_api.adapters.storage.sqlalchemy_store import SqlAlchemyStoryStore
from story_api.api.routes import health_router, stories_router
from story_api.core.config import Settings, parse_csv, settings as default_settings
from story_api.core.exception_handlers import setup_exception_handlers
from story_api.core.logging import configure_logging
from story_api.core.middleware import request_id_middleware
from story_api.core.rate_limit import build_rate_limiter, rate_limit_middleware
from story_api.services.story_service import StoryService
from story_api.utils.profanity import ProfanityClassifier

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    yield
    app.state.story_store.dispose()


def create_app(
    settings: Settings | None = None,
    *,
    store: AbstractStoryStore | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application instance.

    Args:
        settings: Settings to build the app from; defaults to the global
            settings loaded from the environment.
        store: Optional story store; a SQLAlchemy store on
            ``settings.app.database_url`` is created when omitted.

    Returns:
        Configured FastAPI app with middleware, handlers and routers.
    """
    settings = settings or default_settings

    # Logging first so subsequent init logs are formatted as desired
    configure_logging(settings.log)

    app = FastAPI(
        title="Story API",
        description=(
            "Anonymous story submissions. Stories are stripped of markup, "
            "auto-flagged against an offensive word list and listed newest first; "
            "flagged stories are only visible through /api/flagged."
        ),
        version=__version__,
        debug=settings.app.debug,
        lifespan=lifespan,
    )

    story_store = store or SqlAlchemyStoryStore(settings.app.database_url)
    story_store.init_schema()

    app.state.settings = settings
    app.state.story_store = story_store
    app.state.rate_limiter = build_rate_limiter(settings.app)
    app.state.story_service = StoryService(
        store=story_store,
        classifier=ProfanityClassifier(parse_csv(settings.app.extra_flag_words)),
        max_chars=settings.app.max_text_chars,
        default_username=settings.app.default_username,
    )

    # Middleware (last registered runs first: CORS, request id, rate limit)
    app.middleware("http")(rate_limit_middleware)
    app.middleware("http")(request_id_middleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=parse_csv(settings.app.cors_origins) or ["*"],
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
        expose_headers=[settings.log.request_id_header],
    )

    # Exception handlers
    setup_exception_handlers(app)

    # Routers
    app.include_router(stories_router, prefix="/api")
    app.include_router(health_router)

    logger.info(
        "app.created",
        extra={
            "app_env": settings.app_env,
            "rate_limit_enabled": settings.app.rate_limit_enabled,
            "rate_limit_requests": settings.app.rate_limit_requests,
            "rate_limit_window_s": settings.app.rate_limit_window_seconds,
        },
    )
    return app
