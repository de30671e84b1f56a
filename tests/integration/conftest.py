"""
Fixtures for API tests.

The app is built with create_app() and its record store, capability
resolver and current user are overridden with fakes.
"""
import pytest
from fastapi.testclient import TestClient

from api.deps import get_capability_resolver, get_current_user, get_record_store
from backend.main import create_app
from tests.fakes import COACH_CAPABILITIES, FakeCapabilityResolver


class AuthState:
    """Mutable current user; tests switch actors by assigning user_id."""

    def __init__(self, user_id: str = "coach-1"):
        self.user_id = user_id


@pytest.fixture
def auth() -> AuthState:
    return AuthState()


@pytest.fixture
def resolver() -> FakeCapabilityResolver:
    return FakeCapabilityResolver({
        "coach-1": COACH_CAPABILITIES,
        "coach-2": COACH_CAPABILITIES,
    })


@pytest.fixture
def client(record_store, resolver, auth, test_settings):
    """Create a test client with fake dependencies."""
    app = create_app(settings=test_settings)

    async def mock_user():
        return auth.user_id

    app.dependency_overrides[get_current_user] = mock_user
    app.dependency_overrides[get_record_store] = lambda: record_store
    app.dependency_overrides[get_capability_resolver] = lambda: resolver

    yield TestClient(app)

    app.dependency_overrides.clear()
