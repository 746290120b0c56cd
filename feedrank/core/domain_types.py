"""Domain Types — rich types and ranking constants shared across the codebase.

Invariants:
    - PostId and AccountId wrap UUIDs — never use bare UUID in ranking logic
    - Feed limits are bounded MIN_FEED_LIMIT–MAX_FEED_LIMIT inclusive
    - BLEND_SHARES sum to 1.0 and are listed in stream priority order
    - All valid states encoded as Enums — no raw string matching

Design Decisions:
    - NewType over dataclass wrappers: zero runtime cost, full type-checker support
    - str Enums: serialize to JSON without custom encoders
    - Windows as timedelta constants: the caller supplies `now`, core only subtracts
"""

from datetime import timedelta
from enum import Enum
from typing import NewType
from uuid import UUID


# ─── Identity Types ──────────────────────────────────────────────

PostId = NewType("PostId", UUID)
AccountId = NewType("AccountId", UUID)


# ─── Value Types ─────────────────────────────────────────────────

TrendingScore = NewType("TrendingScore", float)   # >= 0.0


# ─── Enums ───────────────────────────────────────────────────────

class PostKindName(str, Enum):
    """Wire name of each post kind variant."""
    ORIGINAL = "original"
    REPLY = "reply"
    REPOST = "repost"
    QUOTE = "quote"


class FeedKind(str, Enum):
    """The public read operations — used for logging and cache keys."""
    HOME = "home"
    GLOBAL = "global"
    TRENDING = "trending"
    PERSONALIZED = "personalized"
    AUTHOR = "author"
    REPLIES = "replies"
    BOOKMARKS = "bookmarks"
    POST = "post"


class BlendSource(str, Enum):
    """Candidate streams of the personalized feed, in priority order."""
    FOLLOWED = "followed"
    TRENDING = "trending"
    AFFINITY = "affinity"
    DISCOVERY = "discovery"
    BACKFILL = "backfill"


# ─── Limits ──────────────────────────────────────────────────────

MIN_FEED_LIMIT: int = 1
MAX_FEED_LIMIT: int = 100
DEFAULT_FEED_LIMIT: int = 20


# ─── Trending ────────────────────────────────────────────────────

LIKE_WEIGHT: int = 1
REPLY_WEIGHT: int = 2
REPOST_WEIGHT: int = 3
DECAY_OFFSET_HOURS: float = 2.0
TRENDING_DECAY_EXPONENT: float = 1.5
TRENDING_WINDOW: timedelta = timedelta(hours=48)
TRENDING_CACHE_TTL: timedelta = timedelta(minutes=5)


# ─── Personalized blend ──────────────────────────────────────────

BLEND_WINDOW: timedelta = timedelta(hours=24)
AFFINITY_LOOKBACK: timedelta = timedelta(days=7)
AFFINITY_MAX_AUTHORS: int = 10
BLEND_DECAY_EXPONENT: float = 1.2

BLEND_SHARES: dict[BlendSource, float] = {
    BlendSource.FOLLOWED: 0.4,
    BlendSource.TRENDING: 0.3,
    BlendSource.AFFINITY: 0.2,
    BlendSource.DISCOVERY: 0.1,
}


# ─── Nested resolution ───────────────────────────────────────────

MAX_NESTED_DEPTH: int = 1
