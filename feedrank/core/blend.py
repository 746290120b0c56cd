"""Feed Blend — deterministic interleave of ranked candidate streams for the personalized feed.

Invariants:
    - Streams are visited in fixed priority order FOLLOWED → TRENDING → AFFINITY → DISCOVERY
    - Every round advances every non-exhausted stream's cursor by exactly one position,
      whether or not the item at that position was already seen
    - Duplicates are dropped, never substituted
    - Output length <= limit and no post id appears twice
    - Backfill only appends unseen, listable posts after the interleave has finished
    - Same inputs → same output: no randomness, no clock reads

Design Decisions:
    - Advance-always cursors: a stream front-loaded with duplicates under-contributes that
      round instead of borrowing a later item (ADR: preserves the stated share semantics)
    - Stop condition is "all cursors exhausted", not "a round added nothing": a round made
      entirely of duplicates does not end the blend early
    - Quotas use ceil so every stream gets at least one slot for any limit >= 1
"""

import math
from dataclasses import dataclass
from datetime import datetime

from feedrank.core.domain_types import AccountId, BlendSource, PostId, BLEND_SHARES
from feedrank.core.posts import LikeEdge, PostRecord


@dataclass(frozen=True)
class BlendedItem:
    post: PostRecord
    source: BlendSource


def stream_quota(limit: int, share: float) -> int:
    """Candidates requested from one stream. round() strips float noise before ceil."""
    return math.ceil(round(limit * share, 6))


def blend_quotas(limit: int) -> dict[BlendSource, int]:
    return {source: stream_quota(limit, share) for source, share in BLEND_SHARES.items()}


def is_listable(post: PostRecord, since: datetime | None = None) -> bool:
    """Not tombstoned, activated author, and (when `since` is given) created after it."""
    if post.tombstoned or not post.author.is_activated:
        return False
    if since is not None and post.created_at <= since:
        return False
    return True


def filter_stream(
    posts: list[PostRecord], since: datetime, quota: int,
) -> list[PostRecord]:
    """Keep listable posts in their given order, capped at quota."""
    return [p for p in posts if is_listable(p, since)][:quota]


def select_discovery(
    likes: list[LikeEdge],
    posts_by_id: dict[PostId, PostRecord],
    followees: set[AccountId],
    since: datetime,
    quota: int,
) -> list[PostRecord]:
    """Posts liked by followees, authored by someone not followed, most recent like first."""
    selected: list[PostRecord] = []
    seen: set[PostId] = set()
    for like in likes:
        if len(selected) >= quota:
            break
        if like.post_id in seen:
            continue
        seen.add(like.post_id)
        post = posts_by_id.get(like.post_id)
        if post is None or post.author_id in followees:
            continue
        if is_listable(post, since):
            selected.append(post)
    return selected


def interleave(
    streams: list[tuple[BlendSource, list[PostRecord]]], limit: int,
) -> list[BlendedItem]:
    """Round-robin the streams in the given order until limit or exhaustion."""
    cursors = [0] * len(streams)
    seen: set[PostId] = set()
    blended: list[BlendedItem] = []

    def _exhausted() -> bool:
        return all(cursors[i] >= len(posts) for i, (_, posts) in enumerate(streams))

    while len(blended) < limit and not _exhausted():
        for i, (source, posts) in enumerate(streams):
            if cursors[i] >= len(posts):
                continue
            post = posts[cursors[i]]
            cursors[i] += 1
            if post.id in seen:
                continue
            seen.add(post.id)
            blended.append(BlendedItem(post=post, source=source))
            if len(blended) >= limit:
                break
    return blended


def backfill(
    blended: list[BlendedItem],
    pool: list[PostRecord],
    limit: int,
) -> list[BlendedItem]:
    """Append the most recent unseen listable posts from pool until limit."""
    result = list(blended)
    seen = {item.post.id for item in blended}
    for post in pool:
        if len(result) >= limit:
            break
        if post.id in seen or not is_listable(post):
            continue
        seen.add(post.id)
        result.append(BlendedItem(post=post, source=BlendSource.BACKFILL))
    return result


def composition(items: list[BlendedItem]) -> dict[str, int]:
    """Per-source item counts, for logging."""
    counts = {source.value: 0 for source in BlendSource}
    for item in items:
        counts[item.source.value] += 1
    return counts
