"""
Session client.

Thin wrapper around the Supabase Auth client that keeps the current
session in an injected SessionStore. Every call is a single attempt;
provider errors are re-raised as auth module exceptions carrying the
provider's message unchanged.

The Supabase client is built per request, so it starts out knowing
nothing about the browser's session. Calls that act as the signed-in
user first hand it the stored token pair.
"""

import logging
from typing import Any, Optional

from supabase import AuthError, Client

from .models import Session
from .session_store import REFRESH_FAILED_ROUTE, SIGNED_OUT_ROUTE, SessionStore
from .exceptions import ExpiredTokenError, InvalidCredentialsError, SessionExchangeError

logger = logging.getLogger(__name__)


def _to_session(raw: Any) -> Optional[Session]:
    """Convert a supabase-py session object (or plain dict) to our Session model."""
    if raw is None:
        return None
    data = raw if isinstance(raw, dict) else raw.model_dump()
    return Session.model_validate(data)


class SessionClient:
    """
    Session operations for one browser session.

    Args:
        client: Supabase client created with the anon key
        store: Where the current session is cached
    """

    def __init__(self, client: Client, store: SessionStore) -> None:
        self._client = client
        self._store = store

    @property
    def store(self) -> SessionStore:
        return self._store

    def _remember(self, raw: Any, operation: str) -> Session:
        session = _to_session(raw)
        if session is None:
            raise SessionExchangeError(operation, "No session was returned by the auth provider")
        self._store.save(session)
        return session

    def _bind_stored_session(self, operation: str) -> None:
        """
        Make the provider client act as the stored session.

        A no-op when nothing is stored or the client already holds the
        same access token. The provider may refresh an expired pair while
        adopting it; the refreshed pair replaces the stored one.
        """
        stored = self._store.load()
        if stored is None:
            return
        try:
            current = self._client.auth.get_session()
            if current is not None and current.access_token == stored.access_token:
                return
            response = self._client.auth.set_session(stored.access_token, stored.refresh_token)
        except AuthError as e:
            raise SessionExchangeError(operation, e.message) from e
        self._remember(response.session, operation)

    async def get_session(self) -> Optional[Session]:
        """Return the cached session, falling back to the provider's own state."""
        session = self._store.load()
        if session is not None:
            return session

        try:
            session = _to_session(self._client.auth.get_session())
        except AuthError as e:
            logger.warning("Could not read session from auth provider: %s", e)
            return None

        if session is not None:
            self._store.save(session)
        return session

    async def set_session(self, access_token: str, refresh_token: str) -> Session:
        """Adopt an access/refresh token pair delivered in a redirect."""
        try:
            response = self._client.auth.set_session(access_token, refresh_token)
        except AuthError as e:
            raise SessionExchangeError("set_session", e.message) from e
        return self._remember(response.session, "set_session")

    async def exchange_code(self, code: str) -> Session:
        """
        Exchange a PKCE authorization code for a session.

        The verifier saved when the sign-in started is sent with the code
        and forgotten afterwards, whether or not the exchange succeeds.
        """
        params: dict[str, str] = {"auth_code": code}
        verifier = self._store.load_code_verifier()
        if verifier:
            params["code_verifier"] = verifier
        try:
            response = self._client.auth.exchange_code_for_session(params)
        except AuthError as e:
            raise SessionExchangeError("exchange_code", e.message) from e
        finally:
            self._store.save_code_verifier(None)
        return self._remember(response.session, "exchange_code")

    async def verify_otp(self, token_hash: str, otp_type: str) -> Optional[Session]:
        """
        Verify a one-time token hash from an invite, recovery or signup email.

        Signup confirmations may legitimately return no session.
        """
        try:
            response = self._client.auth.verify_otp({"token_hash": token_hash, "type": otp_type})
        except AuthError as e:
            raise SessionExchangeError("verify_otp", e.message) from e

        session = _to_session(response.session)
        if session is not None:
            self._store.save(session)
        return session

    async def sign_in_with_password(self, email: str, password: str) -> Session:
        """Password sign-in."""
        try:
            response = self._client.auth.sign_in_with_password(
                {"email": email, "password": password}
            )
        except AuthError as e:
            raise InvalidCredentialsError(e.message) from e
        return self._remember(response.session, "sign_in_with_password")

    async def sign_in_with_oauth(
        self,
        provider: str,
        redirect_to: str,
        query_params: Optional[dict[str, str]] = None,
    ) -> str:
        """
        Start an OAuth sign-in.

        The provider client writes the PKCE code verifier through its
        storage into the session store, where exchange_code finds it.

        Returns:
            The provider authorization URL the browser must be redirected to
        """
        options: dict[str, Any] = {"redirect_to": redirect_to}
        if query_params:
            options["query_params"] = query_params
        try:
            response = self._client.auth.sign_in_with_oauth(
                {"provider": provider, "options": options}
            )
        except AuthError as e:
            raise SessionExchangeError("sign_in_with_oauth", e.message) from e
        return response.url

    async def sign_out(self) -> None:
        """
        Sign out at the provider and drop the cached session.

        The provider revokes the refresh token of the stored session, so
        an invite or recovery pair cannot be replayed. The cache is
        cleared even if the provider call fails.
        """
        try:
            self._bind_stored_session("sign_out")
            self._client.auth.sign_out()
        except SessionExchangeError as e:
            logger.warning("Sign-out could not adopt the stored session: %s", e.message)
        except AuthError as e:
            logger.warning("Sign-out reported an error: %s", e.message)
        finally:
            self._store.clear(SIGNED_OUT_ROUTE)

    async def update_password(self, password: str) -> None:
        """Set a new password for the signed-in user."""
        self._bind_stored_session("update_password")
        try:
            self._client.auth.update_user({"password": password})
        except AuthError as e:
            raise SessionExchangeError("update_password", e.message) from e

    async def send_password_reset(self, email: str, redirect_to: str) -> None:
        """Ask the provider to email a recovery link."""
        try:
            self._client.auth.reset_password_for_email(email, {"redirect_to": redirect_to})
        except AuthError as e:
            raise SessionExchangeError("send_password_reset", e.message) from e

    async def refresh_session(self) -> Session:
        """
        Trade the cached refresh token for a new session.

        Raises:
            ExpiredTokenError: If there is nothing to refresh or the provider refuses
        """
        current = self._store.load()
        if current is None:
            raise ExpiredTokenError("No session to refresh")
        try:
            response = self._client.auth.refresh_session(current.refresh_token)
        except AuthError as e:
            self.handle_refresh_failure()
            raise ExpiredTokenError(e.message) from e
        session = _to_session(response.session)
        if session is None:
            self.handle_refresh_failure()
            raise ExpiredTokenError()
        self._store.save(session)
        return session

    def handle_refresh_failure(self) -> None:
        """Forget a session whose refresh was rejected and send the browser home."""
        logger.warning("Token refresh failed, clearing stored session")
        self._store.clear(REFRESH_FAILED_ROUTE)
