"""
Base exception classes for the distributor portal backend.

Each module should define its own exceptions that inherit from these bases.
This enables consistent error handling across the application.
"""

from typing import Optional, Any


class PortalError(Exception):
    """
    Base exception for all portal errors.

    All custom exceptions should inherit from this class.
    """

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to a dictionary for API responses."""
        return {
            "error": self.code,
            "message": self.message,
            "details": self.details,
        }


class NotFoundError(PortalError):
    """Resource not found."""

    pass


class ValidationError(PortalError):
    """Input validation failed."""

    pass


class AuthenticationError(PortalError):
    """Authentication failed (invalid or missing credentials)."""

    pass


class AuthorizationError(PortalError):
    """Authorization failed (insufficient permissions)."""

    pass


class ConfigurationError(PortalError):
    """Required configuration is missing or invalid."""

    pass


class PermissionDeniedError(AuthorizationError):
    """
    The backing store silently rejected a mutation.

    Row-level security reports a blocked update as an empty result set
    rather than an error, so callers raise this when nothing came back.
    """

    def __init__(self, table: str, row_id: str):
        super().__init__(
            f"Update on {table} returned no rows; row-level security may be blocking it",
            code="PERMISSION_DENIED",
            details={"table": table, "id": row_id},
        )


class ExternalServiceError(PortalError):
    """Error communicating with an external service."""

    def __init__(
        self,
        message: str,
        service: str,
        code: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message, code, details)
        self.service = service
        self.details["service"] = service


class NetworkTimeoutError(ExternalServiceError):
    """A backend call did not complete within its deadline."""

    def __init__(self, operation: str, timeout: float):
        super().__init__(
            f"{operation} timed out after {timeout:g} seconds",
            service="supabase",
            code="NETWORK_TIMEOUT",
            details={"operation": operation, "timeout": timeout},
        )


class MalformedRowError(ExternalServiceError):
    """A row returned by the backing store failed schema validation."""

    def __init__(self, table: str, reason: str):
        super().__init__(
            f"Malformed row from {table}: {reason}",
            service="supabase",
            code="MALFORMED_ROW",
            details={"table": table},
        )
