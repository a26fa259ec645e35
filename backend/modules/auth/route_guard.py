"""
Browser route gating.

Decides whether the single-page app may render a route for the current
role and session, and where to send the browser when it may not.
"""

from typing import Optional

from shared.models import UserRole
from .models import RouteAccess

PUBLIC_ROUTES = frozenset(
    {
        "/login",
        "/admin/login",
        "/forgot-password",
        "/reset-password",
        "/auth/callback",
        "/set-password",
    }
)

PORTAL_PREFIX = "/portal"
ADMIN_PREFIX = "/admin"
LOGIN_ROUTE = "/login"
ADMIN_LOGIN_ROUTE = "/admin/login"


def _normalize(path: str) -> str:
    path = path.split("?", 1)[0].split("#", 1)[0]
    if not path.startswith("/"):
        path = "/" + path
    if len(path) > 1:
        path = path.rstrip("/")
    return path


def _under(path: str, prefix: str) -> bool:
    return path == prefix or path.startswith(prefix + "/")


def check_route_access(path: str, role: Optional[UserRole], has_session: bool) -> RouteAccess:
    """
    Check a browser route against the caller's role.

    Args:
        path: Route path as seen by the browser
        role: Resolved portal role, or None when unresolved
        has_session: Whether a session exists at all

    Returns:
        RouteAccess with redirect_to set when the route is not allowed
    """
    path = _normalize(path)

    if path in PUBLIC_ROUTES:
        return RouteAccess(path=path, allowed=True)

    if _under(path, ADMIN_PREFIX):
        if has_session and role == UserRole.ADMIN:
            return RouteAccess(path=path, allowed=True)
        return RouteAccess(path=path, allowed=False, redirect_to=ADMIN_LOGIN_ROUTE)

    if _under(path, PORTAL_PREFIX):
        if has_session and role == UserRole.DISTRIBUTOR:
            return RouteAccess(path=path, allowed=True)
        return RouteAccess(path=path, allowed=False, redirect_to=LOGIN_ROUTE)

    return RouteAccess(path=path, allowed=False, redirect_to=LOGIN_ROUTE)
