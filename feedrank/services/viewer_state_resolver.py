"""Viewer State Resolver — batched lookups feeding the pure viewer_state decoration.

Invariants:
    - At most two Content Store calls per batch, independent of batch size:
      one get_posts_by_ids for referenced posts, one get_viewer_interactions for flags
    - No viewer → get_viewer_interactions is never called and every flag is False
    - Nested resolution is one level; referenced posts' own targets are not fetched

Design Decisions:
    - Interactions fetched for outer AND nested ids in the same call (ADR: O(1) round trips)
"""

import logging

from feedrank.core.domain_types import AccountId, MAX_NESTED_DEPTH
from feedrank.core.posts import PostRecord, PostSummary
from feedrank.core.repository_protocols import ContentStore
from feedrank.core.viewer_state import decorate, flag_ids, referenced_ids

logger = logging.getLogger(__name__)


class ViewerStateResolver:
    """Attaches viewer flags and one-level nested summaries to a batch of posts."""

    def __init__(self, store: ContentStore):
        self.store = store

    async def resolve(
        self,
        posts: list[PostRecord],
        viewer_id: AccountId | None,
        depth: int = MAX_NESTED_DEPTH,
    ) -> list[PostSummary]:
        if not posts:
            return []

        targets = referenced_ids(posts) if depth > 0 else []
        referenced = await self.store.get_posts_by_ids(targets) if targets else {}

        interactions = None
        if viewer_id is not None:
            interactions = await self.store.get_viewer_interactions(
                viewer_id, flag_ids(posts, referenced),
            )

        logger.debug(
            f"Resolved viewer state for {len(posts)} posts ({len(targets)} referenced)",
            extra={"viewer_id": str(viewer_id) if viewer_id else None},
        )
        return decorate(posts, interactions, referenced, depth)
