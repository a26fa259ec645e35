"""
Authentication service implementation.

Validates Supabase JWT tokens, resolves portal users and drives the
password, OAuth, forgot-password and sign-out flows.
"""

import logging
from datetime import datetime, timezone
from typing import Optional
import jwt

from shared.config import Settings, get_settings
from shared.exceptions import AuthorizationError, ValidationError
from shared.models import AuthenticatedUser, PortalUser, UserRole

from .interfaces import IAuthService, LoginRecorder
from .models import JWTPayload, LoginResponse, OAuthStartResponse, Profile, ProfileResolution
from .profile_resolver import ProfileResolver
from .session_client import SessionClient
from .callback import HOME_ROUTES
from .exceptions import (
    InvalidTokenError,
    ExpiredTokenError,
    MissingTokenError,
    InsufficientPermissionsError,
)

logger = logging.getLogger(__name__)

OAUTH_PROVIDERS = ("azure", "google")
CALLBACK_ROUTE = "/auth/callback"
RESET_PASSWORD_ROUTE = "/reset-password"

# Admin Google sign-in asks for a refresh token and always shows consent
ADMIN_OAUTH_QUERY_PARAMS = {"access_type": "offline", "prompt": "consent"}


class AuthService(IAuthService):
    """
    Implementation of the authentication service.

    Uses Supabase JWT tokens for authentication and the profile resolver
    for authorization. Session-bound operations take the caller's
    SessionClient because sessions belong to a browser, not the service.
    """

    def __init__(
        self,
        resolver: ProfileResolver,
        settings: Optional[Settings] = None,
        record_login: Optional[LoginRecorder] = None,
    ):
        self._settings = settings or get_settings()
        self._resolver = resolver
        self._record_login = record_login

    @property
    def resolver(self) -> ProfileResolver:
        return self._resolver

    async def validate_token(self, token: str) -> AuthenticatedUser:
        """
        Validate a JWT token and return the authenticated user.

        This implementation validates Supabase JWTs using the JWT secret.
        """
        if not token:
            raise MissingTokenError()

        try:
            # Decode and validate the JWT
            payload = jwt.decode(
                token,
                self._settings.supabase_jwt_secret,
                algorithms=["HS256"],
                audience="authenticated",
            )

            jwt_payload = JWTPayload(**payload)

            return AuthenticatedUser(
                id=jwt_payload.sub,
                email=jwt_payload.email or None,
                email_verified=jwt_payload.email_confirmed_at is not None,
                last_sign_in=datetime.fromtimestamp(jwt_payload.iat, tz=timezone.utc),
            )

        except jwt.ExpiredSignatureError:
            raise ExpiredTokenError()
        except jwt.InvalidTokenError as e:
            raise InvalidTokenError(str(e))

    async def get_portal_user(self, user: AuthenticatedUser) -> PortalUser:
        """Resolve and authorize an authenticated user."""
        resolution = await self._resolver.resolve(user.id, user.email or None)
        self._resolver.authorize(resolution, user.id)
        return _to_portal_user(resolution, user.id, user.email)

    async def login(
        self,
        session_client: SessionClient,
        email: str,
        password: str,
        portal: UserRole,
    ) -> LoginResponse:
        """
        Password sign-in followed by the same authorization check as OAuth.

        The admin portal only admits admins. An admin signing in through the
        distributor portal is sent to the admin dashboard.
        """
        session = await session_client.sign_in_with_password(email, password)
        user = session.user

        resolution = await self._resolver.resolve(user.id, user.email)
        try:
            self._resolver.authorize(resolution, user.id)
            if portal == UserRole.ADMIN and resolution.role != UserRole.ADMIN:
                raise InsufficientPermissionsError(UserRole.ADMIN.value, resolution.role.value)
        except AuthorizationError as e:
            logger.warning("Rejected %s portal login for %s: %s", portal.value, user.id, e.code)
            await session_client.sign_out()
            raise

        role = resolution.role
        if role == UserRole.DISTRIBUTOR and self._record_login is not None:
            await self._record_login(session)

        logger.info("User %s signed in to the %s portal", user.id, portal.value)
        return LoginResponse(
            user_id=user.id,
            email=user.email,
            role=role,
            redirect_to=HOME_ROUTES[role],
            expires_at=session.expires_at,
        )

    async def start_oauth(
        self,
        session_client: SessionClient,
        provider: str,
        portal: UserRole = UserRole.DISTRIBUTOR,
    ) -> OAuthStartResponse:
        """Return the provider URL that starts an OAuth sign-in."""
        if provider not in OAUTH_PROVIDERS:
            raise ValidationError(
                f"Unsupported sign-in provider: {provider}",
                details={"supported": list(OAUTH_PROVIDERS)},
            )

        query_params = None
        if portal == UserRole.ADMIN and provider == "google":
            query_params = ADMIN_OAUTH_QUERY_PARAMS

        url = await session_client.sign_in_with_oauth(
            provider,
            self._frontend_url(CALLBACK_ROUTE),
            query_params,
        )
        return OAuthStartResponse(provider=provider, url=url)

    async def request_password_reset(self, session_client: SessionClient, email: str) -> None:
        """Email a recovery link pointing at the reset-password screen."""
        await session_client.send_password_reset(email, self._frontend_url(RESET_PASSWORD_ROUTE))
        logger.info("Password reset requested")

    async def sign_out(self, session_client: SessionClient) -> None:
        await session_client.sign_out()

    def _frontend_url(self, route: str) -> str:
        return self._settings.frontend_url.rstrip("/") + route


def _to_portal_user(resolution: ProfileResolution, user_id: str, email: Optional[str]) -> PortalUser:
    record = resolution.record
    distributor_id = None
    if isinstance(record, Profile) and resolution.role == UserRole.DISTRIBUTOR:
        distributor_id = record.distributor_id or record.id
    return PortalUser(
        id=user_id,
        email=email or (record.email if record else None) or "",
        role=resolution.role,
        full_name=record.full_name if record else None,
        distributor_id=distributor_id,
    )
