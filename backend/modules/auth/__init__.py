"""
Authentication module.

Handles JWT validation, session orchestration, auth callbacks and the
profile lookup that decides who may use which portal.

Public API:
- IAuthService / AuthService: Token validation and sign-in flows
- SessionClient, SessionStore, MemorySessionStore, ProviderStorage: Provider session handling
- ProfileResolver: Maps a user id to an admin or distributor record
- CallbackOrchestrator, CallbackParams, CallbackOutcome: Redirect handling
- check_route_access: Browser route gating
- Auth exceptions: InvalidTokenError, ProfileNotFoundError, etc.
"""

from .interfaces import IAuthService, LoginRecorder
from .models import (
    JWTPayload,
    Session,
    SessionUser,
    Profile,
    AdminUser,
    ProfileStatus,
    ProfileResolution,
    ResolutionKind,
    LoginRequest,
    LoginResponse,
    ForgotPasswordRequest,
    OAuthStartResponse,
    RouteAccess,
)
from .session_store import SessionStore, MemorySessionStore, ProviderStorage, SESSION_STORAGE_KEY
from .session_client import SessionClient
from .profile_resolver import ProfileResolver
from .callback import CallbackOrchestrator, CallbackParams, CallbackOutcome, CallbackFlow, DeniedReason
from .route_guard import check_route_access
from .service import AuthService
from .exceptions import (
    InvalidTokenError,
    ExpiredTokenError,
    MissingTokenError,
    InvalidCredentialsError,
    SessionExchangeError,
    ExpiredOrInvalidTokenError,
    ProfileNotFoundError,
    ProfileConflictError,
    AccountInactiveError,
    InsufficientPermissionsError,
)

__all__ = [
    # Interface
    "IAuthService",
    "LoginRecorder",
    "AuthService",
    # Models
    "JWTPayload",
    "Session",
    "SessionUser",
    "Profile",
    "AdminUser",
    "ProfileStatus",
    "ProfileResolution",
    "ResolutionKind",
    "LoginRequest",
    "LoginResponse",
    "ForgotPasswordRequest",
    "OAuthStartResponse",
    "RouteAccess",
    # Sessions
    "SessionStore",
    "MemorySessionStore",
    "ProviderStorage",
    "SESSION_STORAGE_KEY",
    "SessionClient",
    # Authorization
    "ProfileResolver",
    "check_route_access",
    # Callback
    "CallbackOrchestrator",
    "CallbackParams",
    "CallbackOutcome",
    "CallbackFlow",
    "DeniedReason",
    # Exceptions
    "InvalidTokenError",
    "ExpiredTokenError",
    "MissingTokenError",
    "InvalidCredentialsError",
    "SessionExchangeError",
    "ExpiredOrInvalidTokenError",
    "ProfileNotFoundError",
    "ProfileConflictError",
    "AccountInactiveError",
    "InsufficientPermissionsError",
]
