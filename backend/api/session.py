"""
Browser session cookie handling.

The Supabase session for a browser travels in one HttpOnly cookie. Each
request gets a MemorySessionStore seeded from that cookie; whatever the
route leaves in the store is written back on the way out.

A second, short-lived cookie carries the PKCE code verifier from the
request that starts an OAuth sign-in to the callback request.
"""

import base64
import binascii
import logging
from typing import Optional

from fastapi import Request, Response
from pydantic import ValidationError as PydanticValidationError

from shared.config import get_settings
from shared.database import get_supabase_anon_client
from modules.auth.models import Session
from modules.auth.session_client import SessionClient
from modules.auth.session_store import CODE_VERIFIER_SUFFIX, MemorySessionStore, ProviderStorage

logger = logging.getLogger(__name__)


def encode_session(session: Session) -> str:
    return base64.urlsafe_b64encode(session.model_dump_json().encode()).decode()


def decode_session(value: str) -> Optional[Session]:
    """Parse a cookie value; a damaged cookie counts as no session."""
    try:
        raw = base64.urlsafe_b64decode(value.encode())
        return Session.model_validate_json(raw)
    except (binascii.Error, ValueError, PydanticValidationError):
        logger.warning("Ignoring unreadable session cookie")
        return None


def read_session_cookie(request: Request) -> Optional[Session]:
    value = request.cookies.get(get_settings().session_cookie_name)
    if not value:
        return None
    return decode_session(value)


def get_session_store(request: Request) -> MemorySessionStore:
    """Per-request store, created once and kept on request.state."""
    store = getattr(request.state, "session_store", None)
    if store is None:
        settings = get_settings()
        key = settings.session_cookie_name
        store = MemorySessionStore(
            session=read_session_cookie(request),
            key=key,
            code_verifier=request.cookies.get(f"{key}{CODE_VERIFIER_SUFFIX}") or None,
        )
        request.state.session_store = store
    return store


def get_session_client(request: Request) -> SessionClient:
    """
    FastAPI dependency: session operations bound to this browser.

    The Supabase client writes its PKCE verifier into the store through
    ProviderStorage, so an OAuth start survives until the callback.
    """
    store = get_session_store(request)
    return SessionClient(get_supabase_anon_client(storage=ProviderStorage(store)), store)


def apply_session_cookie(response: Response, store: MemorySessionStore) -> None:
    """Write the store's session onto the response, or delete the cookie."""
    settings = get_settings()
    session = store.load()
    if session is None:
        response.delete_cookie(store.key, path="/")
        return
    response.set_cookie(
        store.key,
        encode_session(session),
        max_age=settings.session_cookie_max_age,
        path="/",
        httponly=True,
        secure=settings.session_cookie_secure,
        samesite="lax",
    )


def apply_verifier_cookie(response: Response, store: MemorySessionStore) -> None:
    """Write the pending PKCE verifier, or delete the cookie once it is spent."""
    settings = get_settings()
    verifier = store.load_code_verifier()
    if verifier is None:
        response.delete_cookie(store.verifier_key, path="/")
        return
    response.set_cookie(
        store.verifier_key,
        verifier,
        max_age=settings.code_verifier_max_age,
        path="/",
        httponly=True,
        secure=settings.session_cookie_secure,
        samesite="lax",
    )


async def persist_session_cookie(request: Request, call_next):
    """HTTP middleware: flush a changed session store to the cookies."""
    response = await call_next(request)
    store = getattr(request.state, "session_store", None)
    if store is None:
        return response
    if store.dirty:
        apply_session_cookie(response, store)
    if store.verifier_dirty:
        apply_verifier_cookie(response, store)
    return response
