"""
Auth callback orchestration.

Handles the redirect the identity provider sends the browser back with
after an invitation, password recovery, signup confirmation or OAuth
sign-in. Parameters may arrive in the query string or in the URL
fragment; each one is looked up in the query first.

    Start -> ParsingParams -> {Invite | Recovery | Signup | OAuth | FallbackSession}
          -> Resolving -> {Granted | Denied}

The orchestrator never raises. Every path ends in a CallbackOutcome that
names the route to navigate to and how long to wait before doing so.
"""

import logging
from enum import Enum
from typing import Mapping, Optional, Union
from urllib.parse import parse_qsl

from pydantic import BaseModel, Field

from shared.config import Settings
from shared.exceptions import AuthorizationError, PortalError
from shared.models import UserRole
from .interfaces import LoginRecorder
from .models import Profile, ProfileResolution, Session
from .profile_resolver import ProfileResolver
from .session_client import SessionClient
from .exceptions import (
    AccountInactiveError,
    ProfileConflictError,
    ProfileNotFoundError,
    SessionExchangeError,
)

logger = logging.getLogger(__name__)

LOGIN_ROUTE = "/login"
SET_PASSWORD_ROUTE = "/set-password"
RESET_PASSWORD_ROUTE = "/reset-password"
ADMIN_HOME_ROUTE = "/admin/dashboard"
DISTRIBUTOR_HOME_ROUTE = "/portal"

HOME_ROUTES = {
    UserRole.ADMIN: ADMIN_HOME_ROUTE,
    UserRole.DISTRIBUTOR: DISTRIBUTOR_HOME_ROUTE,
}


class CallbackFlow(str, Enum):
    """Which branch of the callback handled the redirect."""

    INVITE = "invite"
    RECOVERY = "recovery"
    SIGNUP = "signup"
    OAUTH = "oauth"
    FALLBACK_SESSION = "fallback_session"
    UNKNOWN = "unknown"


class DeniedReason(str, Enum):
    """Why a callback ended without access."""

    INVALID_OR_EXPIRED_INVITATION = "invalid_or_expired_invitation"
    INVALID_OR_EXPIRED_RESET_LINK = "invalid_or_expired_reset_link"
    INVALID_OR_EXPIRED_CONFIRMATION = "invalid_or_expired_confirmation"
    PROFILE_NOT_FOUND = "profile_not_found"
    PROFILE_CONFLICT = "profile_conflict"
    ACCOUNT_INACTIVE = "account_inactive"
    NO_SESSION = "no_session"
    SESSION_EXCHANGE_FAILED = "session_exchange_failed"
    INVALID_LINK = "invalid_link"
    UNEXPECTED_ERROR = "unexpected_error"


# Denials that follow a successful sign-in and a failed authorization check
AUTHORIZATION_DENIALS = frozenset(
    {
        DeniedReason.PROFILE_NOT_FOUND,
        DeniedReason.PROFILE_CONFLICT,
        DeniedReason.ACCOUNT_INACTIVE,
    }
)

TOKEN_FLOW_DENIALS = {
    CallbackFlow.INVITE: DeniedReason.INVALID_OR_EXPIRED_INVITATION,
    CallbackFlow.RECOVERY: DeniedReason.INVALID_OR_EXPIRED_RESET_LINK,
    CallbackFlow.SIGNUP: DeniedReason.INVALID_OR_EXPIRED_CONFIRMATION,
}

DENIAL_MESSAGES = {
    DeniedReason.INVALID_OR_EXPIRED_INVITATION: "The invitation link may have expired or is invalid.",
    DeniedReason.INVALID_OR_EXPIRED_RESET_LINK: "The password reset link may have expired or is invalid.",
    DeniedReason.INVALID_OR_EXPIRED_CONFIRMATION: "The confirmation link may have expired or is invalid.",
    DeniedReason.NO_SESSION: "Failed to establish authenticated session",
    DeniedReason.SESSION_EXCHANGE_FAILED: "Failed to establish authenticated session",
    DeniedReason.INVALID_LINK: "Invalid authentication link",
    DeniedReason.UNEXPECTED_ERROR: "An error occurred during authentication",
}


class CallbackParams(BaseModel):
    """Redirect parameters, merged from the query string and the fragment."""

    type: Optional[str] = None
    code: Optional[str] = None
    token_hash: Optional[str] = None
    access_token: Optional[str] = None
    refresh_token: Optional[str] = None
    error: Optional[str] = None
    error_description: Optional[str] = None

    @classmethod
    def parse(
        cls,
        query: Union[str, Mapping[str, str], None] = None,
        fragment: Optional[str] = None,
    ) -> "CallbackParams":
        """
        Build params from a raw query string (or mapping) and a raw fragment.

        Empty values are treated as absent. When a name appears in both
        places the query string wins.
        """
        query_values = _to_mapping(query)
        fragment_values = _to_mapping(fragment)

        values: dict[str, str] = {}
        for name in cls.model_fields:
            value = query_values.get(name) or fragment_values.get(name)
            if value:
                values[name] = value
        return cls(**values)

    @property
    def has_token_pair(self) -> bool:
        return bool(self.access_token and self.refresh_token)


def _to_mapping(raw: Union[str, Mapping[str, str], None]) -> dict[str, str]:
    if raw is None:
        return {}
    if isinstance(raw, str):
        text = raw.lstrip("#?")
        return dict(parse_qsl(text, keep_blank_values=False))
    return dict(raw)


class CallbackOutcome(BaseModel):
    """Terminal state of a callback."""

    state: str = Field(..., description="granted or denied")
    flow: CallbackFlow
    redirect_to: str
    redirect_after: float = Field(..., description="Seconds to wait before navigating")
    role: Optional[UserRole] = None
    reason: Optional[DeniedReason] = None
    message: Optional[str] = None

    @property
    def granted(self) -> bool:
        return self.state == "granted"


class CallbackOrchestrator:
    """
    Runs one auth callback to completion.

    Args:
        session_client: Session operations for the browser that was redirected
        resolver: Authorization record lookup
        settings: Supplies the redirect delays
        record_login: Optional hook called after a distributor OAuth sign-in
    """

    def __init__(
        self,
        session_client: SessionClient,
        resolver: ProfileResolver,
        settings: Settings,
        record_login: Optional[LoginRecorder] = None,
    ) -> None:
        self._session = session_client
        self._resolver = resolver
        self._settings = settings
        self._record_login = record_login

    async def handle(self, params: CallbackParams) -> CallbackOutcome:
        """Process the redirect. Always returns an outcome."""
        flow = self._select_flow(params)
        logger.info(
            "Auth callback: flow=%s code=%s token_hash=%s token_pair=%s",
            flow.value,
            bool(params.code),
            bool(params.token_hash),
            params.has_token_pair,
        )

        try:
            if params.error:
                logger.warning("Provider returned error %s: %s", params.error, params.error_description)
                return self._denied(flow, DeniedReason.INVALID_LINK, params.error_description)

            if flow == CallbackFlow.UNKNOWN:
                logger.warning("Unknown auth callback type: %s", params.type)
                return self._denied(flow, DeniedReason.INVALID_LINK)

            if flow in TOKEN_FLOW_DENIALS:
                return await self._handle_token_flow(flow, params)

            return await self._handle_sign_in(flow, params)
        except Exception:
            logger.exception("Auth callback failed unexpectedly")
            return self._denied(flow, DeniedReason.UNEXPECTED_ERROR)

    def _select_flow(self, params: CallbackParams) -> CallbackFlow:
        if params.type:
            try:
                flow = CallbackFlow(params.type)
            except ValueError:
                return CallbackFlow.UNKNOWN
            return flow if flow in TOKEN_FLOW_DENIALS else CallbackFlow.UNKNOWN
        if params.code or params.has_token_pair:
            return CallbackFlow.OAUTH
        return CallbackFlow.FALLBACK_SESSION

    # Invite / recovery / signup

    async def _handle_token_flow(self, flow: CallbackFlow, params: CallbackParams) -> CallbackOutcome:
        try:
            session = await self._establish(flow, params)
        except SessionExchangeError as e:
            logger.warning("%s link rejected: %s", flow.value, e.message)
            return self._denied(flow, TOKEN_FLOW_DENIALS[flow])

        if flow == CallbackFlow.SIGNUP:
            return self._granted(flow, LOGIN_ROUTE, message="Email confirmed. Please sign in.")

        if session is None:
            return self._denied(flow, TOKEN_FLOW_DENIALS[flow])

        if flow == CallbackFlow.INVITE:
            return self._granted(flow, SET_PASSWORD_ROUTE, message="Invitation accepted!")
        return self._granted(flow, RESET_PASSWORD_ROUTE, message="Password reset link validated.")

    async def _establish(self, flow: CallbackFlow, params: CallbackParams) -> Optional[Session]:
        """
        Turn whichever token the link carried into a session.

        Signup links only carry a token hash or a code; confirming them
        may not produce a session.

        Raises:
            SessionExchangeError: The provider rejected the token, or no token worked
        """
        if params.code:
            return await self._session.exchange_code(params.code)

        if params.token_hash:
            session = await self._session.verify_otp(params.token_hash, flow.value)
            if session is None and flow != CallbackFlow.SIGNUP:
                raise SessionExchangeError("verify_otp", "No session was returned by the auth provider")
            return session

        if flow == CallbackFlow.SIGNUP:
            raise SessionExchangeError("verify_otp", "Confirmation link carried no token")

        if params.has_token_pair:
            return await self._session.set_session(params.access_token, params.refresh_token)

        session = await self._session.get_session()
        if session is None:
            raise SessionExchangeError(
                "get_session",
                "No valid authentication tokens found",
            )
        return session

    # OAuth and fallback

    async def _handle_sign_in(self, flow: CallbackFlow, params: CallbackParams) -> CallbackOutcome:
        if flow == CallbackFlow.OAUTH:
            try:
                if params.code:
                    session = await self._session.exchange_code(params.code)
                else:
                    session = await self._session.set_session(params.access_token, params.refresh_token)
            except SessionExchangeError as e:
                logger.warning("OAuth session exchange failed: %s", e.message)
                return self._denied(flow, DeniedReason.SESSION_EXCHANGE_FAILED)
        else:
            session = await self._session.get_session()
            if session is None:
                return self._denied(flow, DeniedReason.NO_SESSION)

        return await self._resolve(flow, session)

    async def _resolve(self, flow: CallbackFlow, session: Session) -> CallbackOutcome:
        user = session.user
        resolution = await self._resolver.resolve(user.id, user.email)

        try:
            self._resolver.authorize(resolution, user.id)
        except AuthorizationError as e:
            logger.warning(
                "Denied sign-in for %s via %s: %s",
                user.id,
                user.provider or "unknown provider",
                e.code,
            )
            await self._session.sign_out()
            return self._denied(flow, _authorization_reason(e), e.message)

        role = resolution.role
        if role == UserRole.DISTRIBUTOR and self._record_login is not None:
            await self._record_login(session)

        return self._granted(
            flow,
            HOME_ROUTES[role],
            role=role,
            message=_welcome_message(resolution, user.email),
        )

    # Outcomes

    def _granted(
        self,
        flow: CallbackFlow,
        redirect_to: str,
        role: Optional[UserRole] = None,
        message: Optional[str] = None,
    ) -> CallbackOutcome:
        return CallbackOutcome(
            state="granted",
            flow=flow,
            role=role,
            redirect_to=redirect_to,
            redirect_after=self._settings.callback_success_delay,
            message=message,
        )

    def _denied(
        self,
        flow: CallbackFlow,
        reason: DeniedReason,
        message: Optional[str] = None,
    ) -> CallbackOutcome:
        if reason in AUTHORIZATION_DENIALS:
            delay = self._settings.callback_denied_delay
        else:
            delay = self._settings.callback_error_delay
        return CallbackOutcome(
            state="denied",
            flow=flow,
            reason=reason,
            redirect_to=LOGIN_ROUTE,
            redirect_after=delay,
            message=message or DENIAL_MESSAGES.get(reason),
        )


def _authorization_reason(error: PortalError) -> DeniedReason:
    if isinstance(error, ProfileConflictError):
        return DeniedReason.PROFILE_CONFLICT
    if isinstance(error, AccountInactiveError):
        return DeniedReason.ACCOUNT_INACTIVE
    if isinstance(error, ProfileNotFoundError):
        return DeniedReason.PROFILE_NOT_FOUND
    return DeniedReason.UNEXPECTED_ERROR


def _welcome_message(resolution: ProfileResolution, email: Optional[str]) -> str:
    if resolution.role == UserRole.ADMIN:
        return "Welcome back, Admin!"
    name = resolution.record.full_name if isinstance(resolution.record, Profile) else None
    return f"Welcome back, {name or email}!"
