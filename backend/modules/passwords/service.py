"""
Password lifecycle service.

Backs the set-password screen (reached from an invitation) and the
reset-password screen (reached from a recovery link). Both commit the
new password against the session the callback established, activate a
pending authorization record, and end with a forced sign-out so the user
proves the new password by signing in again.
"""

import logging
from typing import Optional

from shared.config import Settings, get_settings
from modules.auth.exceptions import ExpiredOrInvalidTokenError
from modules.auth.profile_resolver import ProfileResolver
from modules.auth.session_client import SessionClient

from .models import PasswordChangeResult, PasswordFlow, PasswordRequirements, RecoveryLinkStatus
from .policy import validate
from .exceptions import PasswordMismatchError, PasswordPolicyViolationError

logger = logging.getLogger(__name__)

LOGIN_ROUTE = "/login"

_LINK_FLOWS = {
    PasswordFlow.SET: "invitation",
    PasswordFlow.RESET: "recovery",
}


class PasswordService:
    """
    Password operations for one browser session.

    Args:
        session_client: The caller's session
        resolver: Used to find and activate the caller's authorization record
        settings: Supplies the post-success redirect delay
    """

    def __init__(
        self,
        session_client: SessionClient,
        resolver: ProfileResolver,
        settings: Optional[Settings] = None,
    ):
        self._session = session_client
        self._resolver = resolver
        self._settings = settings or get_settings()

    def check(self, password: str) -> PasswordRequirements:
        return validate(password)

    async def check_link(self) -> RecoveryLinkStatus:
        """
        Confirm the reset screen was reached with a recovery session.

        Raises:
            ExpiredOrInvalidTokenError: No session is present
        """
        session = await self._session.get_session()
        if session is None:
            raise ExpiredOrInvalidTokenError(
                _LINK_FLOWS[PasswordFlow.RESET],
                "Invalid or expired reset link. Please request a new password reset.",
            )
        return RecoveryLinkStatus(valid=True, email=session.user.email)

    async def submit(
        self,
        password: str,
        confirm_password: str,
        flow: PasswordFlow = PasswordFlow.SET,
    ) -> PasswordChangeResult:
        """
        Commit a new password.

        Local checks run first and in this order: confirmation mismatch,
        then policy. Neither touches the network.

        Raises:
            PasswordMismatchError: Confirmation differs
            PasswordPolicyViolationError: Policy not met
            ExpiredOrInvalidTokenError: No session to update
            SessionExchangeError: Provider rejected the update
        """
        if password != confirm_password:
            raise PasswordMismatchError()

        requirements = validate(password)
        if not requirements.is_valid:
            raise PasswordPolicyViolationError(requirements)

        session = await self._session.get_session()
        if session is None:
            raise ExpiredOrInvalidTokenError(_LINK_FLOWS[flow])

        await self._session.update_password(password)
        logger.info("Password updated for user %s (%s flow)", session.user.id, flow.value)

        activated = False
        try:
            resolution = await self._resolver.resolve(session.user.id)
            activated = await self._resolver.activate(resolution)
            if activated:
                logger.info("Activated pending account %s", session.user.id)
        finally:
            await self._session.sign_out()

        return PasswordChangeResult(
            redirect_to=LOGIN_ROUTE,
            redirect_after=self._settings.password_success_delay,
            activated=activated,
        )
