"""
JWT Authentication middleware.

Validates Supabase JWT tokens and resolves the caller's portal role.
The token comes from an Authorization: Bearer header, or failing that
from the browser's session cookie.
"""

from typing import Optional
from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from shared.exceptions import AuthenticationError
from shared.models import AuthenticatedUser, PortalUser, UserRole
from modules.auth.interfaces import IAuthService
from modules.auth.exceptions import InsufficientPermissionsError
from ..dependencies import get_auth_service
from ..session import read_session_cookie

# Bearer token extractor
bearer_scheme = HTTPBearer(auto_error=False)


class AuthError(HTTPException):
    """Authentication error with consistent format."""
    def __init__(self, detail: str):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
            headers={"WWW-Authenticate": "Bearer"},
        )


def extract_token(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials],
) -> Optional[str]:
    """Bearer header first, then the session cookie."""
    if credentials is not None:
        return credentials.credentials
    session = read_session_cookie(request)
    return session.access_token if session is not None else None


async def get_current_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    auth: IAuthService = Depends(get_auth_service),
) -> AuthenticatedUser:
    """
    Dependency that requires authentication.

    Use this for endpoints that require a logged-in user.

    Usage:
        @router.get("/protected")
        async def protected_route(user: AuthenticatedUser = Depends(get_current_user)):
            return {"user_id": user.id}
    """
    token = extract_token(request, credentials)
    if not token:
        raise AuthError("Missing authorization header")

    try:
        return await auth.validate_token(token)
    except AuthenticationError as e:
        raise AuthError(e.message)


async def get_optional_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    auth: IAuthService = Depends(get_auth_service),
) -> Optional[AuthenticatedUser]:
    """
    Dependency that optionally extracts user if authenticated.

    Use this for endpoints that work with or without authentication.
    """
    token = extract_token(request, credentials)
    if not token:
        return None

    try:
        return await auth.validate_token(token)
    except AuthenticationError:
        return None


async def get_portal_user(
    user: AuthenticatedUser = Depends(get_current_user),
    auth: IAuthService = Depends(get_auth_service),
) -> PortalUser:
    """
    Dependency that requires an active admin or distributor account.

    Unknown, conflicting and inactive accounts are rejected with 403 by
    the PortalError handler.
    """
    return await auth.get_portal_user(user)


async def require_admin(user: PortalUser = Depends(get_portal_user)) -> PortalUser:
    """Dependency that requires an admin account."""
    if user.role != UserRole.ADMIN:
        raise InsufficientPermissionsError(UserRole.ADMIN.value, user.role.value)
    return user

