"""Feed Blender — gathers the four personalized candidate streams and blends them.

Invariants:
    - Streams: FOLLOWED (40%), TRENDING (30%), AFFINITY (20%), DISCOVERY (10%)
    - Every stream is limited to listable posts created within BLEND_WINDOW of `now`
    - FOLLOWED and AFFINITY fetch activated authors only, so `quota` counts eligible rows
    - Empty followee set → empty FOLLOWED and DISCOVERY streams, no store call for them
    - No recent likes → empty AFFINITY stream
    - Backfill from the global recent pool only when the interleave came up short

Design Decisions:
    - Store calls are awaited sequentially: one AsyncSession cannot run concurrent queries
    - Backfill fetches `limit` recent posts: at most len(blended) of them can be already seen,
      which leaves enough unseen posts to fill the remainder when the pool allows
"""

import logging
from datetime import datetime

from feedrank.core.blend import (
    BlendedItem, backfill, blend_quotas, composition, filter_stream,
    interleave, select_discovery,
)
from feedrank.core.domain_types import (
    AccountId, BlendSource,
    AFFINITY_LOOKBACK, AFFINITY_MAX_AUTHORS, BLEND_WINDOW,
)
from feedrank.core.posts import PostRecord
from feedrank.core.repository_protocols import ContentStore
from feedrank.services.trending_scorer import TrendingScorer

logger = logging.getLogger(__name__)


class FeedBlender:
    """Builds the deterministic "for you" candidate sequence for one viewer."""

    def __init__(self, store: ContentStore, scorer: TrendingScorer):
        self.store = store
        self.scorer = scorer

    async def blend(
        self, viewer_id: AccountId, limit: int, now: datetime,
    ) -> list[BlendedItem]:
        quotas = blend_quotas(limit)
        since = now - BLEND_WINDOW
        followees = await self.store.get_followees(viewer_id)

        streams: list[tuple[BlendSource, list[PostRecord]]] = [
            (BlendSource.FOLLOWED, await self._followed(
                followees, since, quotas[BlendSource.FOLLOWED],
            )),
            (BlendSource.TRENDING, await self.scorer.blend_trending(
                now, quotas[BlendSource.TRENDING],
            )),
            (BlendSource.AFFINITY, await self._affinity(
                viewer_id, now, since, quotas[BlendSource.AFFINITY],
            )),
            (BlendSource.DISCOVERY, await self._discovery(
                viewer_id, followees, since, quotas[BlendSource.DISCOVERY],
            )),
        ]

        blended = interleave(streams, limit)
        if len(blended) < limit:
            pool = await self.store.get_global_recent(limit)
            blended = backfill(blended, pool, limit)

        logger.info(
            f"Blended {len(blended)}/{limit} items: {composition(blended)}",
            extra={
                "feed": "personalized", "viewer_id": str(viewer_id),
                "limit": limit, "item_count": len(blended),
            },
        )
        return blended

    async def _followed(
        self, followees: list[AccountId], since: datetime, quota: int,
    ) -> list[PostRecord]:
        if not followees:
            return []
        posts = await self.store.get_posts_by_authors(
            followees, since, quota, activated_only=True,
        )
        return filter_stream(posts, since, quota)

    async def _affinity(
        self, viewer_id: AccountId, now: datetime, since: datetime, quota: int,
    ) -> list[PostRecord]:
        authors = await self.store.get_recent_liked_authors(
            viewer_id, now - AFFINITY_LOOKBACK, AFFINITY_MAX_AUTHORS,
        )
        if not authors:
            return []
        posts = await self.store.get_posts_by_authors(
            authors[:AFFINITY_MAX_AUTHORS], since, quota, activated_only=True,
        )
        return filter_stream(posts, since, quota)

    async def _discovery(
        self,
        viewer_id: AccountId,
        followees: list[AccountId],
        since: datetime,
        quota: int,
    ) -> list[PostRecord]:
        if not followees:
            return []
        likes = await self.store.get_likers_among_followees(viewer_id, since)
        if not likes:
            return []
        liked_ids = list(dict.fromkeys(like.post_id for like in likes))
        posts_by_id = await self.store.get_posts_by_ids(liked_ids)
        return select_discovery(
            likes, posts_by_id, set(followees), since, quota,
        )
