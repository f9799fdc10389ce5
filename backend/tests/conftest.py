"""
Centralized Test Configuration.
"""

import pytest
from httpx import AsyncClient, ASGITransport

from backend.app.core.jwt import create_access_token
from backend.app.db.state import build_state
from backend.app.main import create_app
from backend.app.services.seed import seed_demo_data, seed_users
import backend.app.core.redis_client as redis_client_module

ADMIN_ID = "admin_user_456"
DEMO_ID = "demo_user_123"


# Mock Redis for reliability in CI/CD
class MockRedis:
    def __init__(self):
        self.store = {}
        self.ttls = {}
        self._closed = False

    async def ping(self):
        if self._closed:
            return False
        return True

    async def setex(self, key, ttl, value):
        if self._closed:
            raise ConnectionError("Redis connection closed")
        self.store[key] = value
        self.ttls[key] = ttl
        return True

    async def exists(self, key):
        if self._closed:
            raise ConnectionError("Redis connection closed")
        return 1 if key in self.store else 0

    async def flushdb(self):
        if not self._closed:
            self.store = {}
            self.ttls = {}

    async def aclose(self):
        self._closed = True
        self.store = {}


@pytest.fixture
def mock_redis(monkeypatch):
    """Patch the global redis client used for token revocation."""
    fake = MockRedis()
    monkeypatch.setattr(redis_client_module, "redis_client", fake)
    return fake


@pytest.fixture
def state():
    """Fresh state with the demo accounts but no shipping data."""
    fresh = build_state()
    seed_users(fresh)
    return fresh


@pytest.fixture
def seeded_state(state):
    seed_demo_data(state)
    return state


@pytest.fixture
def app(seeded_state, mock_redis):
    return create_app(seeded_state)


@pytest.fixture
async def client(app):
    """Async client for testing."""
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


def make_token(user_id: str, role: str) -> str:
    return create_access_token(data={"sub": f"{user_id}@test", "user_id": user_id, "role": role})


@pytest.fixture
def admin_headers():
    return {"Authorization": f"Bearer {make_token(ADMIN_ID, 'admin')}"}


@pytest.fixture
def user_headers():
    return {"Authorization": f"Bearer {make_token(DEMO_ID, 'demo')}"}


@pytest.fixture(name="make_token")
def make_token_fixture():
    return make_token
