"""Timeline Assembler — the public read operations, composing scorer, blender and resolver.

Invariants:
    - Limit is validated before any Content Store call (InvalidArgumentError otherwise)
    - home, personalized and bookmarks require a viewer id; the rest accept an anonymous viewer
    - Every returned item has passed through ViewerStateResolver
    - No post id appears twice in a single response
    - Tombstoned posts never appear at the top level of a feed
    - A store failure propagates; no partially assembled feed is returned

Design Decisions:
    - `now` is an explicit argument of every time-dependent operation (ADR: determinism)
    - Chronological feeds page with an opaque (created_at, id) cursor; the cursor is
      computed from the raw store page so that filtered rows do not end pagination early
    - The bookmarks cursor positions on bookmark time, matching its store ordering
    - get_post refreshes counters through get_engagement_counts: a single post view
      shows live counts even when the row snapshot lags
"""

import dataclasses
import logging
from datetime import datetime, timedelta

from feedrank.core.blend import is_listable
from feedrank.core.domain_types import (
    AccountId, FeedKind, PostId, DEFAULT_FEED_LIMIT, TRENDING_WINDOW,
)
from feedrank.core.errors import ErrorContext, InvalidArgumentError, NotFoundError
from feedrank.core.pagination import (
    bookmark_cursor_after, cursor_after, decode_cursor, validate_limit,
)
from feedrank.core.posts import PostRecord, PostSummary, Timeline
from feedrank.core.repository_protocols import ContentStore
from feedrank.core.trending_cache import TrendingCache
from feedrank.core.viewer_state import dedupe
from feedrank.services.feed_blender import FeedBlender
from feedrank.services.trending_scorer import TrendingScorer
from feedrank.services.viewer_state_resolver import ViewerStateResolver

logger = logging.getLogger(__name__)


def _require_viewer(viewer_id: AccountId | None, feed: FeedKind) -> AccountId:
    if viewer_id is None:
        raise InvalidArgumentError(
            f"{feed.value} feed requires a viewer id",
            field="viewer_id",
            context=ErrorContext(feed=feed.value),
        )
    return viewer_id


class TimelineAssembler:
    """Entry point for every feed read and the single-post view."""

    def __init__(
        self,
        store: ContentStore,
        trending_cache: TrendingCache,
        trending_window: timedelta = TRENDING_WINDOW,
    ):
        self.store = store
        self.trending_window = trending_window
        self.scorer = TrendingScorer(store, trending_cache)
        self.blender = FeedBlender(store, self.scorer)
        self.resolver = ViewerStateResolver(store)

    async def home(
        self,
        viewer_id: AccountId | None,
        limit: int = DEFAULT_FEED_LIMIT,
        cursor: str | None = None,
    ) -> Timeline:
        """Viewer's own posts and followees' posts, newest first."""
        validate_limit(limit)
        viewer_id = _require_viewer(viewer_id, FeedKind.HOME)
        before = decode_cursor(cursor)

        followees = await self.store.get_followees(viewer_id)
        authors = list(dict.fromkeys([viewer_id, *followees]))
        page = await self.store.get_posts_by_authors(authors, None, limit, before)
        return await self._page(
            FeedKind.HOME, page, limit, viewer_id, cursor_after(page, limit),
        )

    async def global_feed(
        self,
        viewer_id: AccountId | None = None,
        limit: int = DEFAULT_FEED_LIMIT,
        cursor: str | None = None,
    ) -> Timeline:
        """Newest posts by activated accounts."""
        validate_limit(limit)
        before = decode_cursor(cursor)
        page = await self.store.get_global_recent(limit, before)
        visible = [p for p in page if is_listable(p)]
        return await self._page(
            FeedKind.GLOBAL, visible, limit, viewer_id, cursor_after(page, limit),
        )

    async def trending(
        self,
        now: datetime,
        viewer_id: AccountId | None = None,
        limit: int = DEFAULT_FEED_LIMIT,
    ) -> Timeline:
        validate_limit(limit)
        ranked = await self.scorer.global_trending(now, limit, self.trending_window)
        items = await self.resolver.resolve(dedupe(ranked), viewer_id)
        self._log(FeedKind.TRENDING, viewer_id, limit, items)
        return Timeline(items=items)

    async def personalized(
        self,
        viewer_id: AccountId | None,
        now: datetime,
        limit: int = DEFAULT_FEED_LIMIT,
    ) -> Timeline:
        """Blended "for you" feed. Anonymous callers are rejected, not degraded."""
        validate_limit(limit)
        viewer_id = _require_viewer(viewer_id, FeedKind.PERSONALIZED)
        blended = await self.blender.blend(viewer_id, limit, now)
        posts = dedupe([item.post for item in blended])
        items = await self.resolver.resolve(posts, viewer_id)
        self._log(FeedKind.PERSONALIZED, viewer_id, limit, items)
        return Timeline(items=items)

    async def author_posts(
        self,
        author_id: AccountId,
        viewer_id: AccountId | None = None,
        limit: int = DEFAULT_FEED_LIMIT,
        cursor: str | None = None,
    ) -> Timeline:
        """One author's posts, newest first."""
        validate_limit(limit)
        before = decode_cursor(cursor)
        page = await self.store.get_posts_by_authors([author_id], None, limit, before)
        return await self._page(
            FeedKind.AUTHOR, page, limit, viewer_id, cursor_after(page, limit),
        )

    async def replies(
        self,
        post_id: PostId,
        viewer_id: AccountId | None = None,
        limit: int = DEFAULT_FEED_LIMIT,
        cursor: str | None = None,
    ) -> Timeline:
        """Direct replies to a post, newest first. Unknown parent → NotFoundError.

        A deleted parent still lists its replies.
        """
        validate_limit(limit)
        before = decode_cursor(cursor)
        if await self.store.get_post_by_id(post_id) is None:
            raise NotFoundError(
                "Post", str(post_id), context=ErrorContext(feed=FeedKind.REPLIES.value),
            )
        page = await self.store.get_replies(post_id, limit, before)
        return await self._page(
            FeedKind.REPLIES, page, limit, viewer_id, cursor_after(page, limit),
        )

    async def bookmarks(
        self,
        viewer_id: AccountId | None,
        limit: int = DEFAULT_FEED_LIMIT,
        cursor: str | None = None,
    ) -> Timeline:
        """The viewer's bookmarked posts, most recently bookmarked first."""
        validate_limit(limit)
        viewer_id = _require_viewer(viewer_id, FeedKind.BOOKMARKS)
        before = decode_cursor(cursor)
        page = await self.store.get_bookmarked_posts(viewer_id, limit, before)
        return await self._page(
            FeedKind.BOOKMARKS, [b.post for b in page], limit, viewer_id,
            bookmark_cursor_after(page, limit),
        )

    async def get_post(
        self, post_id: PostId, viewer_id: AccountId | None = None,
    ) -> PostSummary:
        """Single post with live counters. Absent or tombstoned → NotFoundError."""
        post = await self.store.get_post_by_id(post_id)
        if post is None or post.tombstoned:
            raise NotFoundError(
                "Post", str(post_id), context=ErrorContext(feed=FeedKind.POST.value),
            )
        counts = await self.store.get_engagement_counts(post_id)
        if counts is not None:
            post = dataclasses.replace(post, counters=counts)
        [summary] = await self.resolver.resolve([post], viewer_id)
        return summary

    async def _page(
        self,
        feed: FeedKind,
        posts: list[PostRecord],
        limit: int,
        viewer_id: AccountId | None,
        next_cursor: str | None,
    ) -> Timeline:
        visible = [p for p in posts if not p.tombstoned]
        items = await self.resolver.resolve(dedupe(visible), viewer_id)
        self._log(feed, viewer_id, limit, items)
        return Timeline(items=items, next_cursor=next_cursor)

    @staticmethod
    def _log(
        feed: FeedKind,
        viewer_id: AccountId | None,
        limit: int,
        items: list[PostSummary],
    ) -> None:
        logger.info(
            f"Assembled {feed.value} feed: {len(items)} items",
            extra={
                "feed": feed.value,
                "viewer_id": str(viewer_id) if viewer_id else None,
                "limit": limit,
                "item_count": len(items),
            },
        )
