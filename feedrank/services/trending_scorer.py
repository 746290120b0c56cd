"""Trending Scorer — read-through cached ranking over the Content Store's recent window.

Invariants:
    - Cache hit → no Content Store call; cache miss → exactly one get_trending_candidates call
    - The cached value is the ranked, undecorated list; viewer flags are applied later
    - Limit validated before the cache is consulted

Design Decisions:
    - TrendingCache injected, never module-level: one per app in production, one per test
    - Blend variant (24h, exponent 1.2, higher floor) shares the same cache under its own key
"""

import logging
from datetime import datetime, timedelta

from feedrank.core.domain_types import (
    BLEND_DECAY_EXPONENT, BLEND_WINDOW, DEFAULT_FEED_LIMIT,
    TRENDING_DECAY_EXPONENT, TRENDING_WINDOW,
)
from feedrank.core.pagination import validate_limit
from feedrank.core.posts import PostRecord
from feedrank.core.repository_protocols import ContentStore
from feedrank.core.trending import (
    ANY_ENGAGEMENT, BLEND_ENGAGEMENT_FLOOR, TrendingParams, rank_trending,
)
from feedrank.core.trending_cache import TrendingCache

logger = logging.getLogger(__name__)


class TrendingScorer:
    """Ranks recent posts by time-decayed engagement."""

    def __init__(self, store: ContentStore, cache: TrendingCache):
        self.store = store
        self.cache = cache

    async def top(self, params: TrendingParams, now: datetime) -> list[PostRecord]:
        validate_limit(params.limit)
        cached = self.cache.get(params, now)
        if cached is not None:
            logger.debug(
                "Trending cache hit",
                extra={"feed": "trending", "limit": params.limit, "cache_hit": True},
            )
            return list(cached)

        candidates = await self.store.get_trending_candidates(now - params.window)
        ranked = rank_trending(candidates, now, params)
        self.cache.put(params, ranked, now)
        logger.info(
            f"Ranked {len(ranked)} of {len(candidates)} trending candidates",
            extra={
                "feed": "trending", "limit": params.limit,
                "cache_hit": False, "item_count": len(ranked),
            },
        )
        return ranked

    async def global_trending(
        self,
        now: datetime,
        limit: int = DEFAULT_FEED_LIMIT,
        window: timedelta = TRENDING_WINDOW,
    ) -> list[PostRecord]:
        return await self.top(
            TrendingParams(
                window=window, limit=limit,
                exponent=TRENDING_DECAY_EXPONENT, floor=ANY_ENGAGEMENT,
            ),
            now,
        )

    async def blend_trending(self, now: datetime, limit: int) -> list[PostRecord]:
        """Softer-decay, higher-floor ranking used as the personalized feed's trending stream."""
        return await self.top(
            TrendingParams(
                window=BLEND_WINDOW, limit=limit,
                exponent=BLEND_DECAY_EXPONENT, floor=BLEND_ENGAGEMENT_FLOOR,
            ),
            now,
        )
