"""
Fixtures for API route tests.

Routes are exercised through a fresh app with services and the caller
swapped out via dependency_overrides.
"""

import pytest
from unittest.mock import AsyncMock, MagicMock
from fastapi import Request
from fastapi.testclient import TestClient

from api.app import create_app
from api.dependencies import get_auth_service
from api.middleware.auth import get_portal_user
from api.session import get_session_client, get_session_store
from modules.auth.models import Profile, ProfileResolution, ResolutionKind
from modules.auth.profile_resolver import ProfileResolver
from modules.auth.service import AuthService
from modules.auth.session_client import SessionClient
from tests.conftest import make_settings


def distributor_resolution(user_id: str = "test-user-123") -> ProfileResolution:
    return ProfileResolution(
        kind=ResolutionKind.DISTRIBUTOR,
        record=Profile(id=user_id, full_name="Dana Rep", distributor_id="dist-1"),
        table="user_profiles",
    )


def sign_in_as(app, user) -> None:
    """Skip token validation and profile lookup for routes under test."""
    app.dependency_overrides[get_portal_user] = lambda: user


@pytest.fixture
def app():
    """Create a fresh app for each test."""
    app = create_app()
    yield app
    app.dependency_overrides.clear()


@pytest.fixture
def client(app) -> TestClient:
    return TestClient(app)


@pytest.fixture
def resolver() -> ProfileResolver:
    """Real access rules over a database double; resolve() is scripted per test."""
    resolver = ProfileResolver(MagicMock(), "dual")
    resolver.resolve = AsyncMock(return_value=distributor_resolution())
    return resolver


@pytest.fixture
def auth_service(app, resolver) -> AuthService:
    """Real token validation against the test secret."""
    service = AuthService(resolver=resolver, settings=make_settings())
    app.dependency_overrides[get_auth_service] = lambda: service
    return service


@pytest.fixture
def supabase_auth(app) -> MagicMock:
    """
    Supabase auth API double behind the per-request session client.

    Like a provider client that signed in during the same request, the
    double reports the stored session as its own.
    """
    client = MagicMock()

    def session_client(request: Request) -> SessionClient:
        store = get_session_store(request)
        client.auth.get_session.side_effect = store.load
        return SessionClient(client, store)

    app.dependency_overrides[get_session_client] = session_client
    return client.auth
