"""
Authentication module interface.

Other modules should depend on IAuthService, not the concrete implementation.
This enables testing with mocks and future extraction to a microservice.
"""

from typing import Awaitable, Callable, Protocol, runtime_checkable

from shared.models import AuthenticatedUser, PortalUser, UserRole
from .models import LoginResponse, OAuthStartResponse, Session
from .session_client import SessionClient

# Hook invoked after a distributor signs in (activity tracking)
LoginRecorder = Callable[[Session], Awaitable[None]]


@runtime_checkable
class IAuthService(Protocol):
    """
    Interface for authentication operations.

    This protocol defines the contract that the auth module exposes
    to other modules. Implementations must provide all these methods.
    """

    async def validate_token(self, token: str) -> AuthenticatedUser:
        """
        Validate a JWT token and return the authenticated user.

        Args:
            token: JWT access token from Supabase Auth

        Returns:
            AuthenticatedUser with user ID and basic info

        Raises:
            AuthenticationError: If token is invalid or expired
        """
        ...

    async def get_portal_user(self, user: AuthenticatedUser) -> PortalUser:
        """
        Resolve and authorize an authenticated user.

        Raises:
            AuthorizationError: Unknown, conflicting or inactive account
        """
        ...

    async def login(
        self,
        session_client: SessionClient,
        email: str,
        password: str,
        portal: UserRole,
    ) -> LoginResponse:
        """
        Password sign-in for the distributor or admin portal.

        Raises:
            InvalidCredentialsError: Provider rejected the credentials
            AuthorizationError: Account may not use this portal (signed out first)
        """
        ...

    async def start_oauth(
        self,
        session_client: SessionClient,
        provider: str,
        portal: UserRole,
    ) -> OAuthStartResponse:
        """Return the provider URL that starts an OAuth sign-in."""
        ...

    async def request_password_reset(self, session_client: SessionClient, email: str) -> None:
        """Email a recovery link pointing at the reset-password screen."""
        ...

    async def sign_out(self, session_client: SessionClient) -> None:
        """End the browser's session."""
        ...
