"""API test fixtures — FastAPI test client over an in-memory SQLite database.

Invariants:
    - get_db dependency overridden to use the test DB session
    - db_manager patched so the readiness check sees the test engine
    - Each test starts with an empty trending cache
"""

import pytest
from httpx import ASGITransport, AsyncClient

from feedrank.core.trending_cache import TrendingCache
from feedrank.infrastructure.database import get_db, DatabaseSessionManager
import feedrank.infrastructure.database as db_module
from feedrank.main import app


@pytest.fixture
async def client(test_engine, test_session_factory):
    """FastAPI test client with DB dependency overridden."""
    async def override_get_db():
        async with test_session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.state.trending_cache = TrendingCache()

    original_manager = db_module.db_manager
    fake_manager = DatabaseSessionManager.__new__(DatabaseSessionManager)
    fake_manager.engine = test_engine
    fake_manager._session_factory = test_session_factory
    db_module.db_manager = fake_manager

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        yield c

    app.dependency_overrides.clear()
    db_module.db_manager = original_manager
