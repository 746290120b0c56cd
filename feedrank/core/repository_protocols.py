"""Boundary Protocols — the read-only Content Store contract between core and shell.

Invariants:
    - Core NEVER imports from shell — dependency arrows point inward only
    - The Content Store is read-only from this service's point of view
    - Listing reads (get_posts_by_authors, get_global_recent, get_trending_candidates)
      never return tombstoned posts
    - get_posts_by_authors(activated_only=True) filters to activated authors before `limit` applies
    - get_bookmarked_posts is ordered by bookmark time; its cursor positions on that time
    - Point reads (get_post_by_id, get_posts_by_ids) DO return tombstoned posts so that
      references can be rendered as unavailable stubs
    - Listing reads return newest first by (created_at, id)
    - Any backend failure surfaces as ContentStoreUnavailableError

Design Decisions:
    - Protocol over ABC: structural subtyping, the in-memory test store needs no base class
    - Async in Protocol: implementations do IO; core pure functions that consume the
      results are never async themselves — services orchestrate the awaits
    - get_viewer_interactions is one call per batch: per-item existence checks are not
      part of the contract
"""

from datetime import datetime
from typing import Protocol

from feedrank.core.domain_types import AccountId, PostId
from feedrank.core.pagination import FeedCursor
from feedrank.core.posts import (
    BookmarkedPost, EngagementCounts, LikeEdge, PostRecord, ViewerInteractions,
)


class ContentStore(Protocol):
    """Contract for post, follow and interaction reads — implemented by shell."""

    async def get_followees(self, viewer_id: AccountId) -> list[AccountId]: ...

    async def get_posts_by_authors(
        self,
        author_ids: list[AccountId],
        since: datetime | None,
        limit: int,
        before: FeedCursor | None = None,
        activated_only: bool = False,
    ) -> list[PostRecord]: ...

    async def get_engagement_counts(
        self, post_id: PostId,
    ) -> EngagementCounts | None: ...

    async def get_recent_liked_authors(
        self, viewer_id: AccountId, since: datetime, limit: int,
    ) -> list[AccountId]: ...

    async def get_likers_among_followees(
        self, viewer_id: AccountId, since: datetime,
    ) -> list[LikeEdge]: ...

    async def get_global_recent(
        self, limit: int, before: FeedCursor | None = None,
    ) -> list[PostRecord]: ...

    async def get_post_by_id(self, post_id: PostId) -> PostRecord | None: ...

    async def get_posts_by_ids(
        self, post_ids: list[PostId],
    ) -> dict[PostId, PostRecord]: ...

    async def get_trending_candidates(
        self, since: datetime,
    ) -> list[PostRecord]: ...

    async def get_viewer_interactions(
        self, viewer_id: AccountId, post_ids: list[PostId],
    ) -> ViewerInteractions: ...

    async def get_replies(
        self, parent_id: PostId, limit: int, before: FeedCursor | None = None,
    ) -> list[PostRecord]: ...

    async def get_bookmarked_posts(
        self, viewer_id: AccountId, limit: int, before: FeedCursor | None = None,
    ) -> list[BookmarkedPost]: ...