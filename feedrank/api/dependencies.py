"""Route Dependencies — viewer identity, assembler wiring, and the per-request deadline.

Invariants:
    - Viewer identity comes only from the X-Viewer-Id header set by the auth gateway
    - A malformed X-Viewer-Id is an InvalidArgumentError, never an anonymous request
    - One TimelineAssembler per request, sharing the app-wide TrendingCache
    - with_deadline fails the whole operation on expiry (no partial feed)

Design Decisions:
    - Token validation lives upstream: this service trusts the gateway header
    - asyncio.wait_for cancels the in-flight store query when the deadline passes
"""

import asyncio
import logging
from typing import Awaitable, TypeVar
from uuid import UUID

from fastapi import Depends, Header, Request
from sqlalchemy.ext.asyncio import AsyncSession

from feedrank.config import get_settings
from feedrank.core.domain_types import AccountId, FeedKind
from feedrank.core.errors import FeedTimeoutError, InvalidArgumentError
from feedrank.core.trending_cache import TrendingCache
from feedrank.infrastructure.content_store import SqlContentStore
from feedrank.infrastructure.database import get_db
from feedrank.services.timeline_assembler import TimelineAssembler

logger = logging.getLogger(__name__)

T = TypeVar("T")


def get_viewer_id(
    x_viewer_id: str | None = Header(None),
) -> AccountId | None:
    """Viewer from the gateway header; None for anonymous requests."""
    if not x_viewer_id:
        return None
    try:
        return AccountId(UUID(x_viewer_id))
    except ValueError:
        raise InvalidArgumentError(
            "X-Viewer-Id must be a UUID", field="X-Viewer-Id",
        )


def get_trending_cache(request: Request) -> TrendingCache:
    return request.app.state.trending_cache


async def get_assembler(
    db: AsyncSession = Depends(get_db),
    cache: TrendingCache = Depends(get_trending_cache),
) -> TimelineAssembler:
    return TimelineAssembler(
        SqlContentStore(db), cache, get_settings().trending_window,
    )


def resolve_limit(limit: int | None) -> int:
    return limit if limit is not None else get_settings().default_feed_limit


async def with_deadline(operation: Awaitable[T], feed: FeedKind) -> T:
    timeout = get_settings().feed_timeout_seconds
    try:
        return await asyncio.wait_for(operation, timeout)
    except asyncio.TimeoutError:
        logger.error(
            f"{feed.value} feed exceeded {timeout}s deadline",
            extra={"feed": feed.value},
        )
        raise FeedTimeoutError(feed.value, timeout)
