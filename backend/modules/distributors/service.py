"""
Distributor management service.

Admins invite distributor companies and their users by email, then
activate or deactivate the accounts. An invitation creates the auth
user first and the profile second; if the profile cannot be written
the auth user is deleted again so the email can be invited anew.
"""

import logging
from collections import Counter
from datetime import datetime, timezone
from typing import Any, Optional

from supabase import AuthError, Client, PostgrestAPIError

from modules.auth.models import ProfileStatus
from shared.config import Settings, get_settings
from shared.exceptions import PermissionDeniedError, ValidationError
from shared.models import PortalUser, UserRole
from shared.repository import run_with_timeout
from .models import (
    Distributor,
    DistributorFilters,
    DistributorStats,
    InviteCompanyUserRequest,
    InviteDistributorRequest,
    UpdateDistributorRequest,
)
from .repository import PROFILES_TABLE, DistributorRepository
from .exceptions import DistributorExistsError, DistributorNotFoundError, InvitationError

logger = logging.getLogger(__name__)


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class DistributorService:
    """
    Distributor account management backed by Supabase.

    Args:
        supabase_client: Service-role client; invitations use the Auth admin API
        settings: Application settings (frontend URL for email links)
    """

    def __init__(self, supabase_client: Client, settings: Optional[Settings] = None):
        self._db = supabase_client
        self._repository = DistributorRepository(supabase_client)
        self._settings = settings or get_settings()

    async def list_distributors(self, filters: DistributorFilters) -> list[Distributor]:
        return self._repository.list_distributors(filters)

    async def get_distributor(self, distributor_id: str) -> Distributor:
        distributor = self._repository.get_by_id(distributor_id)
        if distributor is None:
            raise DistributorNotFoundError(distributor_id)
        return distributor

    async def _write(self, operation: str, distributor_id: str, changes: dict[str, Any]) -> Distributor:
        distributor = await run_with_timeout(
            operation,
            lambda: self._repository.update(distributor_id, changes),
            self._settings.write_timeout_seconds,
        )
        if distributor is None:
            raise PermissionDeniedError(PROFILES_TABLE, distributor_id)
        return distributor

    async def update_distributor(
        self,
        distributor_id: str,
        request: UpdateDistributorRequest,
    ) -> Distributor:
        await self.get_distributor(distributor_id)
        changes = request.model_dump(mode="json", exclude_unset=True)
        if not changes:
            raise ValidationError("No fields to update")
        return await self._write("update distributor", distributor_id, changes)

    async def activate(self, distributor_id: str) -> Distributor:
        await self.get_distributor(distributor_id)
        return await self._write(
            "activate distributor", distributor_id, {"status": ProfileStatus.ACTIVE.value}
        )

    async def deactivate(self, distributor_id: str) -> Distributor:
        await self.get_distributor(distributor_id)
        return await self._write(
            "deactivate distributor", distributor_id, {"status": ProfileStatus.INACTIVE.value}
        )

    def _send_invite(self, email: str, user_data: dict[str, Any]) -> str:
        """Create the auth user and email the invitation; returns the new user id."""
        try:
            response = self._db.auth.admin.invite_user_by_email(
                email,
                {
                    "redirect_to": f"{self._settings.frontend_url}/auth/callback?type=invite",
                    "data": user_data,
                },
            )
        except AuthError as e:
            raise InvitationError(email, e.message) from e
        if response.user is None:
            raise InvitationError(email, "no user was returned")
        return response.user.id

    def _create_profile(self, user_id: str, profile: dict[str, Any]) -> Distributor:
        """Write the profile of a freshly invited user, or delete the user again."""
        try:
            return self._repository.create({**profile, "id": user_id})
        except PostgrestAPIError:
            logger.error("Profile insert failed for invited user %s, deleting auth user", user_id)
            try:
                self._db.auth.admin.delete_user(user_id)
            except AuthError as e:
                logger.error("Could not delete auth user %s: %s", user_id, e.message)
            raise

    async def _invite(self, email: str, profile: dict[str, Any], admin: PortalUser) -> Distributor:
        email = email.lower()
        if self._repository.email_exists(email):
            raise DistributorExistsError(email)

        profile = {
            **profile,
            "email": email,
            "role": UserRole.DISTRIBUTOR.value,
            "status": ProfileStatus.PENDING.value,
            "invited_at": _now(),
        }
        user_data = {
            key: profile.get(key)
            for key in ("full_name", "company_name", "role", "territory")
            if profile.get(key) is not None
        }

        def invite() -> Distributor:
            return self._create_profile(self._send_invite(email, user_data), profile)

        distributor = await run_with_timeout(
            "invite distributor", invite, self._settings.write_timeout_seconds
        )
        logger.info("Admin %s invited %s as distributor %s", admin.id, email, distributor.id)
        return distributor

    async def invite_distributor(
        self,
        request: InviteDistributorRequest,
        admin: PortalUser,
    ) -> Distributor:
        """Invite a new distributor company by email."""
        profile = request.model_dump(mode="json", exclude_none=True, exclude={"email"})
        return await self._invite(request.email, profile, admin)

    async def invite_company_user(
        self,
        distributor_id: str,
        request: InviteCompanyUserRequest,
        admin: PortalUser,
    ) -> Distributor:
        """Invite a further user into an existing distributor company."""
        company = await self.get_distributor(distributor_id)
        profile = {
            "full_name": request.full_name,
            "company_name": company.company_name,
            "territory": company.territory,
            "distributor_id": company.distributor_id or company.id,
            "company_role": request.company_role.value,
        }
        profile = {key: value for key, value in profile.items() if value is not None}
        return await self._invite(request.email, profile, admin)

    async def resend_invitation(self, distributor_id: str) -> Distributor:
        """
        Email a fresh link for setting the password.

        Accounts that already accepted their invitation are refused so a
        working account is never put back to pending.
        """
        distributor = await self.get_distributor(distributor_id)
        if distributor.status == ProfileStatus.ACTIVE:
            raise ValidationError(
                "Invitation already accepted",
                code="INVITATION_ACCEPTED",
                details={"distributor_id": distributor_id},
            )
        if not distributor.email:
            raise ValidationError("Distributor has no email address", details={"distributor_id": distributor_id})

        try:
            self._db.auth.reset_password_for_email(
                distributor.email,
                {"redirect_to": f"{self._settings.frontend_url}/reset-password"},
            )
        except AuthError as e:
            raise InvitationError(distributor.email, e.message) from e

        logger.info("Resent invitation to distributor %s", distributor_id)
        return await self._write(
            "resend invitation",
            distributor_id,
            {"invited_at": _now(), "status": ProfileStatus.PENDING.value},
        )

    async def get_stats(self) -> DistributorStats:
        rows = self._repository.list_statuses()
        statuses = Counter(row.get("status") for row in rows)
        return DistributorStats(
            total=len(rows),
            active=statuses[ProfileStatus.ACTIVE.value],
            pending=statuses[ProfileStatus.PENDING.value],
            inactive=statuses[ProfileStatus.INACTIVE.value],
        )
