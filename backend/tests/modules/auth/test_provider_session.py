"""
SessionClient over a real Supabase client.

Each test builds clients the way api.session does, one per request, so
nothing but the session store links one request to the next.
"""

import base64
import hashlib
import json
from urllib.parse import parse_qs, urlparse

import pytest

from modules.auth.exceptions import SessionExchangeError
from modules.auth.session_client import SessionClient
from modules.auth.session_store import MemorySessionStore, ProviderStorage
from tests.conftest import create_test_token, make_session
from tests.modules.auth.conftest import AuthServer, provider_client


def session_client(server: AuthServer, store: MemorySessionStore) -> SessionClient:
    return SessionClient(provider_client(server, ProviderStorage(store)), store)


def stored_session():
    return make_session().model_copy(update={"access_token": create_test_token()})


class TestStoredSession:
    @pytest.mark.asyncio
    async def test_update_password_uses_cookie_session(self, auth_server):
        stored = stored_session()
        client = session_client(auth_server, MemorySessionStore(session=stored))

        await client.update_password("Abcdefg1")

        assert auth_server.calls() == [("GET", "/auth/v1/user"), ("PUT", "/auth/v1/user")]
        update = auth_server.requests[1]
        assert update.headers["authorization"] == f"Bearer {stored.access_token}"
        assert json.loads(update.content) == {"password": "Abcdefg1"}

    @pytest.mark.asyncio
    async def test_sign_out_revokes_at_provider(self, auth_server):
        stored = stored_session()
        store = MemorySessionStore(session=stored)

        await session_client(auth_server, store).sign_out()

        assert auth_server.calls()[-1] == ("POST", "/auth/v1/logout")
        assert auth_server.requests[-1].headers["authorization"] == f"Bearer {stored.access_token}"
        assert store.load() is None

    @pytest.mark.asyncio
    async def test_password_then_sign_out_in_one_request(self, auth_server):
        client = session_client(auth_server, MemorySessionStore(session=stored_session()))

        await client.update_password("Abcdefg1")
        await client.sign_out()

        assert auth_server.calls() == [
            ("GET", "/auth/v1/user"),
            ("PUT", "/auth/v1/user"),
            ("POST", "/auth/v1/logout"),
        ]

    @pytest.mark.asyncio
    async def test_update_password_without_any_session(self, auth_server):
        client = session_client(auth_server, MemorySessionStore())

        with pytest.raises(SessionExchangeError):
            await client.update_password("Abcdefg1")

        assert auth_server.requests == []


class TestOAuthRoundTrip:
    @pytest.mark.asyncio
    async def test_verifier_reaches_the_callback_request(self, auth_server):
        start_store = MemorySessionStore()
        url = await session_client(auth_server, start_store).sign_in_with_oauth(
            "google", "http://localhost:5173/auth/callback"
        )
        verifier = start_store.load_code_verifier()
        assert verifier
        assert start_store.verifier_dirty

        challenge = parse_qs(urlparse(url).query)["code_challenge"][0]
        digest = hashlib.sha256(verifier.encode()).digest()
        assert challenge == base64.urlsafe_b64encode(digest).decode().rstrip("=")

        callback_store = MemorySessionStore(code_verifier=verifier)
        session = await session_client(auth_server, callback_store).exchange_code("auth-code")

        assert auth_server.body(0) == {"auth_code": "auth-code", "code_verifier": verifier}
        assert session.user.id == "test-user-123"
        assert callback_store.load() is session
        assert callback_store.load_code_verifier() is None

    @pytest.mark.asyncio
    async def test_callback_without_verifier_is_rejected(self, auth_server):
        client = session_client(auth_server, MemorySessionStore())

        with pytest.raises(SessionExchangeError, match="code verifier"):
            await client.exchange_code("auth-code")
