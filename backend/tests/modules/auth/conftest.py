"""
Supabase Auth over an httpx mock transport.

Lets tests drive a real supabase client: requests are recorded and
answered like the Auth API would answer them.
"""

import json
from typing import Optional

import httpx
import pytest
from supabase import Client, ClientOptions, create_client
from supabase_auth import SyncSupportedStorage

from tests.conftest import create_test_token

SUPABASE_URL = "https://project.supabase.co"

USER = {
    "id": "test-user-123",
    "aud": "authenticated",
    "email": "test@example.com",
    "app_metadata": {"provider": "google"},
    "user_metadata": {},
    "created_at": "2025-01-01T00:00:00Z",
}


def issued_session() -> dict:
    return {
        "access_token": create_test_token(),
        "refresh_token": "issued-refresh",
        "expires_in": 3600,
        "token_type": "bearer",
        "user": USER,
    }


class AuthServer:
    """Records auth requests and answers them like Supabase Auth."""

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []

    def calls(self) -> list[tuple[str, str]]:
        return [(r.method, r.url.path) for r in self.requests]

    def body(self, index: int) -> dict:
        return json.loads(self.requests[index].content)

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path
        if path == "/auth/v1/user":
            return httpx.Response(200, json=USER)
        if path == "/auth/v1/logout":
            return httpx.Response(204)
        if path == "/auth/v1/token":
            body = json.loads(request.content)
            if request.url.params.get("grant_type") == "pkce" and not body.get("code_verifier"):
                return httpx.Response(
                    400,
                    json={
                        "error_code": "validation_failed",
                        "msg": "code challenge does not match previously saved code verifier",
                    },
                )
            return httpx.Response(200, json=issued_session())
        return httpx.Response(404, json={"msg": "not found"})


def provider_client(server: AuthServer, storage: Optional[SyncSupportedStorage] = None) -> Client:
    """A real anon client, configured like get_supabase_anon_client, talking to server."""
    options = ClientOptions(
        auto_refresh_token=False,
        httpx_client=httpx.Client(transport=httpx.MockTransport(server)),
    )
    if storage is not None:
        options.storage = storage
    return create_client(SUPABASE_URL, "anon-key", options=options)


@pytest.fixture
def auth_server() -> AuthServer:
    return AuthServer()
