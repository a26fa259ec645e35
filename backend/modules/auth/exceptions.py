"""
Authentication module exceptions.

These exceptions are raised by the auth module and can be caught
by API error handlers to return appropriate HTTP responses.
"""

from typing import Optional

from shared.exceptions import AuthenticationError, AuthorizationError


class InvalidTokenError(AuthenticationError):
    """Raised when a JWT token is invalid or malformed."""

    def __init__(self, message: str = "Invalid authentication token"):
        super().__init__(message, code="INVALID_TOKEN")


class ExpiredTokenError(AuthenticationError):
    """Raised when a JWT token has expired."""

    def __init__(self, message: str = "Authentication token has expired"):
        super().__init__(message, code="TOKEN_EXPIRED")


class MissingTokenError(AuthenticationError):
    """Raised when no authentication token is provided."""

    def __init__(self, message: str = "Authentication required"):
        super().__init__(message, code="MISSING_TOKEN")


class InvalidCredentialsError(AuthenticationError):
    """Raised when a password sign-in is rejected by the provider."""

    def __init__(self, message: str = "Invalid email or password"):
        super().__init__(message, code="INVALID_CREDENTIALS")


class SessionExchangeError(AuthenticationError):
    """Raised when a code, OTP or token pair could not be turned into a session."""

    def __init__(self, operation: str, message: str):
        super().__init__(
            message,
            code="SESSION_EXCHANGE_FAILED",
            details={"operation": operation},
        )
        self.operation = operation


class ExpiredOrInvalidTokenError(AuthenticationError):
    """Raised when an invite, recovery or signup link no longer works."""

    def __init__(self, flow: str, message: Optional[str] = None):
        super().__init__(
            message or f"The {flow} link is invalid or has expired",
            code="EXPIRED_OR_INVALID_TOKEN",
            details={"flow": flow},
        )
        self.flow = flow


class ProfileNotFoundError(AuthorizationError):
    """Raised when the user has no authorization record at all."""

    def __init__(self, user_id: str):
        super().__init__(
            "Your account is not authorized. Please contact your administrator for access.",
            code="PROFILE_NOT_FOUND",
            details={"user_id": user_id},
        )


class ProfileConflictError(AuthorizationError):
    """Raised when the user appears in both authorization tables."""

    def __init__(self, user_id: str):
        super().__init__(
            "Your account has conflicting configurations. Please contact support.",
            code="PROFILE_CONFLICT",
            details={"user_id": user_id},
        )


class AccountInactiveError(AuthorizationError):
    """Raised when the authorization record exists but is not active."""

    def __init__(self, user_id: str, status: str):
        super().__init__(
            f"Account {status}: your account is not currently active. Please contact your administrator.",
            code="ACCOUNT_INACTIVE",
            details={"user_id": user_id, "status": status},
        )
        self.status = status


class InsufficientPermissionsError(AuthorizationError):
    """Raised when user lacks required permissions."""

    def __init__(self, required_role: str, user_role: str):
        super().__init__(
            f"Insufficient permissions. Required: {required_role}, has: {user_role}",
            code="INSUFFICIENT_PERMISSIONS",
            details={"required_role": required_role, "user_role": user_role},
        )
