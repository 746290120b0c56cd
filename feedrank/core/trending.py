"""Trending Score — time-decayed engagement scoring and deterministic ranking.

Invariants:
    - score = (likes*1 + replies*2 + reposts*3) / (hours_since_post + 2) ** exponent
    - Strictly decreasing in elapsed time, strictly increasing in engagement
    - Posts with zero total engagement are excluded, never scored as zero
    - Only listable posts (not tombstoned, activated author, inside the window) are ranked
    - Ordering is total: score DESC, created_at DESC, id bytes ASC

Design Decisions:
    - Pure functions over PostRecord with explicit `now`: no clock reads in core
    - Elapsed hours clamped at 0: a post stamped slightly in the future scores as brand-new
    - EngagementFloor is optional: the global view uses "any engagement", the blend a higher bar
"""

from dataclasses import dataclass
from datetime import datetime, timedelta

from feedrank.core.domain_types import (
    TrendingScore, DECAY_OFFSET_HOURS, TRENDING_DECAY_EXPONENT,
)
from feedrank.core.posts import EngagementCounts, PostRecord


@dataclass(frozen=True)
class EngagementFloor:
    """A post qualifies when it meets ANY of the minimums."""
    min_likes: int = 1
    min_replies: int = 1
    min_reposts: int = 1

    def admits(self, counters: EngagementCounts) -> bool:
        return (
            counters.like_count >= self.min_likes
            or counters.reply_count >= self.min_replies
            or counters.repost_count >= self.min_reposts
        )


ANY_ENGAGEMENT = EngagementFloor()
BLEND_ENGAGEMENT_FLOOR = EngagementFloor(min_likes=2, min_replies=1, min_reposts=1)


@dataclass(frozen=True)
class TrendingParams:
    """Everything that changes a ranking — doubles as the cache key."""
    window: timedelta
    limit: int
    exponent: float = TRENDING_DECAY_EXPONENT
    floor: EngagementFloor = ANY_ENGAGEMENT


def hours_since(created_at: datetime, now: datetime) -> float:
    return max((now - created_at).total_seconds() / 3600.0, 0.0)


def trending_score(
    counters: EngagementCounts,
    hours_elapsed: float,
    exponent: float = TRENDING_DECAY_EXPONENT,
) -> TrendingScore:
    """Score one post. Pure."""
    return TrendingScore(
        counters.weighted / (hours_elapsed + DECAY_OFFSET_HOURS) ** exponent,
    )


def is_trending_eligible(
    post: PostRecord, now: datetime, window: timedelta, floor: EngagementFloor,
) -> bool:
    if post.tombstoned or not post.author.is_activated:
        return False
    if post.created_at <= now - window:
        return False
    if post.counters.total == 0:
        return False
    return floor.admits(post.counters)


def rank_trending(
    candidates: list[PostRecord], now: datetime, params: TrendingParams,
) -> list[PostRecord]:
    """Filter, score and order candidates; return the top `params.limit`."""
    scored = [
        (trending_score(p.counters, hours_since(p.created_at, now), params.exponent), p)
        for p in candidates
        if is_trending_eligible(p, now, params.window, params.floor)
    ]
    scored.sort(key=lambda sp: (-sp[0], -sp[1].created_at.timestamp(), sp[1].id.bytes))

    ranked: list[PostRecord] = []
    seen = set()
    for _, post in scored:
        if post.id in seen:
            continue
        seen.add(post.id)
        ranked.append(post)
        if len(ranked) >= params.limit:
            break
    return ranked
