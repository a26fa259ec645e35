"""
Shared infrastructure for the distributor portal backend.

This package contains cross-cutting concerns that are used by multiple modules:
- config: Centralized settings management
- database: Supabase client factory
- exceptions: Base exception classes
- repository: Base repository and write deadlines

Note: Business logic should NOT go here. This is for infrastructure only.
"""

from .config import Settings, get_settings
from .database import get_supabase_client, get_supabase_anon_client, reset_client_cache
from .exceptions import (
    PortalError,
    NotFoundError,
    ValidationError,
    AuthenticationError,
    AuthorizationError,
    ConfigurationError,
    PermissionDeniedError,
    ExternalServiceError,
    NetworkTimeoutError,
    MalformedRowError,
)
from .models import AuthenticatedUser, PortalUser, UserRole

__all__ = [
    "Settings",
    "get_settings",
    "get_supabase_client",
    "get_supabase_anon_client",
    "reset_client_cache",
    "PortalError",
    "NotFoundError",
    "ValidationError",
    "AuthenticationError",
    "AuthorizationError",
    "ConfigurationError",
    "PermissionDeniedError",
    "ExternalServiceError",
    "NetworkTimeoutError",
    "MalformedRowError",
    "AuthenticatedUser",
    "PortalUser",
    "UserRole",
]
