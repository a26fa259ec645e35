"""
Authentication endpoints.

Sign-in (password and OAuth), the auth callback, forgot-password, refresh,
sign-out and browser route gating. Session changes made here reach the
browser through the session cookie middleware.
"""

import logging
from typing import Optional
from urllib.parse import urlencode

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import RedirectResponse
from pydantic import BaseModel

from shared.config import get_settings
from shared.exceptions import AuthorizationError
from shared.models import AuthenticatedUser, UserRole
from modules.activity.service import ActivityService
from modules.auth.callback import CallbackOrchestrator, CallbackOutcome, CallbackParams
from modules.auth.interfaces import IAuthService
from modules.auth.models import (
    ForgotPasswordRequest,
    LoginRequest,
    LoginResponse,
    OAuthStartResponse,
    RouteAccess,
)
from modules.auth.profile_resolver import ProfileResolver
from modules.auth.route_guard import check_route_access
from modules.auth.session_client import SessionClient
from ..dependencies import get_activity_service, get_auth_service, get_profile_resolver
from ..middleware.auth import get_optional_user
from ..session import get_session_client

logger = logging.getLogger(__name__)

router = APIRouter()


class CallbackRequest(BaseModel):
    """Raw redirect parameters forwarded by the browser app."""

    query: str = ""
    fragment: str = ""


class MessageResponse(BaseModel):
    message: str


class RefreshResponse(BaseModel):
    expires_at: Optional[int] = None


@router.post("/login", response_model=LoginResponse)
async def login(
    request: LoginRequest,
    session_client: SessionClient = Depends(get_session_client),
    auth: IAuthService = Depends(get_auth_service),
) -> LoginResponse:
    """Distributor portal password sign-in."""
    return await auth.login(session_client, request.email, request.password, UserRole.DISTRIBUTOR)


@router.post("/admin/login", response_model=LoginResponse)
async def admin_login(
    request: LoginRequest,
    session_client: SessionClient = Depends(get_session_client),
    auth: IAuthService = Depends(get_auth_service),
) -> LoginResponse:
    """Admin portal password sign-in. Only active admins get through."""
    return await auth.login(session_client, request.email, request.password, UserRole.ADMIN)


@router.get("/oauth/{provider}", response_model=OAuthStartResponse)
async def start_oauth(
    provider: str,
    portal: UserRole = Query(default=UserRole.DISTRIBUTOR),
    session_client: SessionClient = Depends(get_session_client),
    auth: IAuthService = Depends(get_auth_service),
) -> OAuthStartResponse:
    """
    Get the provider URL for an OAuth sign-in.

    The provider redirects back to /auth/callback when done.
    """
    return await auth.start_oauth(session_client, provider, portal)


def get_callback_orchestrator(
    session_client: SessionClient = Depends(get_session_client),
    resolver: ProfileResolver = Depends(get_profile_resolver),
    activity: ActivityService = Depends(get_activity_service),
) -> CallbackOrchestrator:
    """FastAPI dependency: callback orchestrator for this browser."""
    return CallbackOrchestrator(
        session_client,
        resolver,
        get_settings(),
        record_login=activity.record_login,
    )


@router.post("/callback", response_model=CallbackOutcome)
async def handle_callback(
    request: CallbackRequest,
    orchestrator: CallbackOrchestrator = Depends(get_callback_orchestrator),
) -> CallbackOutcome:
    """
    Complete an invitation, recovery, signup or OAuth redirect.

    Always 200; the outcome says whether access was granted and where
    the browser should go next.
    """
    params = CallbackParams.parse(request.query, request.fragment)
    return await orchestrator.handle(params)


@router.get("/callback")
async def handle_callback_redirect(
    request: Request,
    orchestrator: CallbackOrchestrator = Depends(get_callback_orchestrator),
) -> RedirectResponse:
    """
    Provider-facing variant: query parameters only, answers with a redirect.

    Fragments never reach the server, so token pairs delivered in the
    fragment must go through POST /callback instead.
    """
    params = CallbackParams.parse(request.url.query)
    outcome = await orchestrator.handle(params)

    target = get_settings().frontend_url.rstrip("/") + outcome.redirect_to
    if not outcome.granted and outcome.reason is not None:
        target += "?" + urlencode({"error": outcome.reason.value})
    return RedirectResponse(target, status_code=303)


@router.post("/forgot-password", response_model=MessageResponse)
async def forgot_password(
    request: ForgotPasswordRequest,
    session_client: SessionClient = Depends(get_session_client),
    auth: IAuthService = Depends(get_auth_service),
) -> MessageResponse:
    """Send a password recovery email."""
    await auth.request_password_reset(session_client, request.email)
    return MessageResponse(message="If an account exists for that email, a reset link has been sent.")


@router.post("/refresh", response_model=RefreshResponse)
async def refresh(
    session_client: SessionClient = Depends(get_session_client),
) -> RefreshResponse:
    """
    Renew the tokens held in the session cookie.

    A rejected refresh answers 401 and clears the cookie.
    """
    session = await session_client.refresh_session()
    return RefreshResponse(expires_at=session.expires_at)


@router.post("/sign-out", status_code=204)
async def sign_out(
    session_client: SessionClient = Depends(get_session_client),
    auth: IAuthService = Depends(get_auth_service),
) -> None:
    """End the browser session and clear the session cookie."""
    await auth.sign_out(session_client)


@router.get("/route-access", response_model=RouteAccess)
async def route_access(
    path: str = Query(..., min_length=1),
    user: Optional[AuthenticatedUser] = Depends(get_optional_user),
    auth: IAuthService = Depends(get_auth_service),
) -> RouteAccess:
    """Whether the browser may show a route, and where to go if not."""
    role = None
    if user is not None:
        try:
            role = (await auth.get_portal_user(user)).role
        except AuthorizationError as e:
            logger.info("Route check for %s without an authorized account: %s", user.id, e.code)
    return check_route_access(path, role, has_session=user is not None)
