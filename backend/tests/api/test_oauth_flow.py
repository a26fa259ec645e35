"""
OAuth sign-in across two HTTP requests.

The real per-request session client is used; only the Auth API at the
far end of the supabase client is simulated.
"""

import pytest
from unittest.mock import AsyncMock, MagicMock, patch

from api.dependencies import get_activity_service, get_profile_resolver
from tests.modules.auth.conftest import AuthServer, provider_client

VERIFIER_COOKIE = "sb-auth-token-code-verifier"


@pytest.fixture
def auth_server(app, resolver) -> AuthServer:
    server = AuthServer()
    activity = MagicMock()
    activity.record_login = AsyncMock()
    app.dependency_overrides[get_profile_resolver] = lambda: resolver
    app.dependency_overrides[get_activity_service] = lambda: activity

    def anon_client(storage=None):
        return provider_client(server, storage)

    with patch("api.session.get_supabase_anon_client", side_effect=anon_client):
        yield server


def set_cookies(response) -> dict[str, str]:
    cookies = {}
    for header in response.headers.get_list("set-cookie"):
        name = header.split("=", 1)[0]
        cookies[name] = header
    return cookies


class TestOAuthAcrossRequests:
    def test_start_sets_verifier_cookie(self, client, auth_service, auth_server):
        response = client.get("/api/auth/oauth/google")

        assert response.status_code == 200
        assert "code_challenge=" in response.json()["url"]
        cookie = set_cookies(response)[VERIFIER_COOKIE]
        assert "HttpOnly" in cookie
        assert "Max-Age=600" in cookie
        assert auth_server.requests == []

    def test_callback_exchanges_code_with_verifier(self, client, auth_service, auth_server):
        start = client.get("/api/auth/oauth/google")
        verifier = set_cookies(start)[VERIFIER_COOKIE].split(";")[0].split("=", 1)[1]

        client.cookies.set(VERIFIER_COOKIE, verifier)
        response = client.post("/api/auth/callback", json={"query": "code=auth-code"})

        outcome = response.json()
        assert outcome["state"] == "granted"
        assert outcome["redirect_to"] == "/portal"
        assert auth_server.body(0) == {"auth_code": "auth-code", "code_verifier": verifier}

        cookies = set_cookies(response)
        assert "Max-Age=0" not in cookies["sb-auth-token"]
        assert "Max-Age=0" in cookies[VERIFIER_COOKIE]

    def test_callback_without_verifier_is_denied(self, client, auth_service, auth_server):
        response = client.post("/api/auth/callback", json={"query": "code=auth-code"})

        outcome = response.json()
        assert outcome["state"] == "denied"
        assert outcome["reason"] == "session_exchange_failed"
        assert "sb-auth-token" not in set_cookies(response)
