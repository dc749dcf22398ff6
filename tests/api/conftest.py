"""API test fixtures: admin app around the test site with get_db overridden.

Invariants:
    - Each request gets its own session from the test session factory
    - Settings are built explicitly, never read from the process cache
"""

import pytest
from httpx import ASGITransport, AsyncClient

from entity_admin.config import Settings
from entity_admin.infrastructure.database import get_db
from entity_admin.main import create_app


@pytest.fixture
def settings():
    return Settings(
        database_url="sqlite+aiosqlite:///:memory:",
        admin_title="Library Admin",
        log_format="text",
    )


@pytest.fixture
def admin_app(site, settings, test_session_factory):
    app = create_app(site, settings)

    async def override_get_db():
        async with test_session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    yield app
    app.dependency_overrides.clear()


@pytest.fixture
async def client(admin_app):
    async with AsyncClient(
        transport=ASGITransport(app=admin_app), base_url="http://test",
    ) as c:
        yield c


@pytest.fixture
async def fetch(test_session_factory):
    """Load a row in a fresh session, so assertions see committed state only."""
    async def _fetch(model, primary_key, *options):
        async with test_session_factory() as db:
            return await db.get(model, primary_key, options=list(options))
    return _fetch
