"""Service test fixtures — in-memory content store and a fresh trending cache per test."""

import pytest

from feedrank.core.trending_cache import TrendingCache
from feedrank.services.timeline_assembler import TimelineAssembler
from tests.services.fake_store import InMemoryContentStore


@pytest.fixture
def store():
    return InMemoryContentStore()


@pytest.fixture
def cache():
    return TrendingCache()


@pytest.fixture
def assembler(store, cache):
    return TimelineAssembler(store, cache)
