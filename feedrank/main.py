"""Feedrank API — FastAPI application entry point.

Invariants:
    - Routes registered explicitly (no auto-discovery)
    - Global error handlers map FeedError → structured JSON responses
    - CORS configured from settings (not hardcoded)
    - Database initialized on startup via lifespan context manager
    - One TrendingCache per process, shared by every request

Design Decisions:
    - Lifespan over @app.on_event: FastAPI recommended pattern, cleaner cleanup
    - The trending cache is attached to app.state at import, so it exists even when the
      app is driven without lifespan events (ASGI test transports)
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from feedrank.api.error_handlers import register_error_handlers
from feedrank.api.routes import health, posts, timeline
from feedrank.config import get_settings
from feedrank.core.trending_cache import TrendingCache
from feedrank.infrastructure import database
from feedrank.infrastructure.observability import setup_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle."""
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)
    database.init_db(
        settings.database_url,
        pool_size=settings.database_pool_size,
        max_overflow=settings.database_max_overflow,
    )
    logger.info("Feedrank API started")
    yield
    if database.db_manager:
        await database.db_manager.dispose()
    logger.info("Feedrank API shutting down")


app = FastAPI(
    title="Feedrank API", version="1.0.0", lifespan=lifespan,
)

settings = get_settings()
app.state.trending_cache = TrendingCache(settings.trending_cache_ttl)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["GET"],
    allow_headers=["*"],
)

# Routes — explicit registration
app.include_router(health.router)
app.include_router(timeline.router)
app.include_router(posts.router)

register_error_handlers(app)
