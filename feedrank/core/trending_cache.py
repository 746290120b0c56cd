"""Trending Cache — injected read-through TTL cache keyed by TrendingParams.

Invariants:
    - An entry is served only while now < stored_at + ttl
    - Values are immutable tuples of PostRecord — callers cannot corrupt a shared entry
    - No write path from clients: only TrendingScorer fills it after a recompute

Design Decisions:
    - Explicit `now` on every call instead of reading the clock: expiry is deterministic in tests
    - No lock: concurrent misses both recompute the same idempotent result (bounded duplication)
    - Expired entries evicted lazily on lookup
"""

from datetime import datetime, timedelta

from feedrank.core.domain_types import TRENDING_CACHE_TTL
from feedrank.core.posts import PostRecord
from feedrank.core.trending import TrendingParams


class TrendingCache:
    """Short-TTL cache for ranked (undecorated) trending results."""

    def __init__(self, ttl: timedelta = TRENDING_CACHE_TTL):
        if ttl <= timedelta(0):
            raise ValueError("ttl must be positive")
        self.ttl = ttl
        self._entries: dict[TrendingParams, tuple[datetime, tuple[PostRecord, ...]]] = {}

    def get(self, key: TrendingParams, now: datetime) -> tuple[PostRecord, ...] | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        stored_at, value = entry
        if now >= stored_at + self.ttl:
            self._entries.pop(key, None)
            return None
        return value

    def put(
        self, key: TrendingParams, value: list[PostRecord], now: datetime,
    ) -> tuple[PostRecord, ...]:
        frozen = tuple(value)
        self._entries[key] = (now, frozen)
        return frozen

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)
