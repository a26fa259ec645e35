"""
Profile resolver.

Maps an authenticated identity to its authorization record and role.
Two table layouts exist in deployed databases and both are supported:

single: one user_profiles table whose `role` column decides admin vs
        distributor.
dual:   admin_users and user_profiles are separate, mutually exclusive
        tables. The decision table is

            admin_users  user_profiles  result
            -----------  -------------  -----------
            no           no             none
            yes          yes            conflict
            yes          no             admin
            no           yes            distributor
"""

import asyncio
import logging
from typing import Literal, Optional

from supabase import Client

from shared.models import UserRole
from .models import ProfileResolution, ProfileStatus, ResolutionKind
from .repository import (
    ADMIN_USERS_TABLE,
    PROFILES_TABLE,
    AdminUserRepository,
    ProfileRepository,
)
from .exceptions import AccountInactiveError, ProfileConflictError, ProfileNotFoundError

logger = logging.getLogger(__name__)

TableLayout = Literal["single", "dual"]


class ProfileResolver:
    """
    Resolves users against the authorization tables.

    Args:
        db: Supabase client (service role, so RLS cannot hide rows)
        layout: "single" or "dual" table layout
    """

    def __init__(self, db: Client, layout: TableLayout = "dual") -> None:
        if layout not in ("single", "dual"):
            raise ValueError(f"Unknown authorization table layout: {layout}")
        self._layout = layout
        self._profiles = ProfileRepository(db)
        self._admins = AdminUserRepository(db)

    @property
    def layout(self) -> TableLayout:
        return self._layout

    async def resolve(self, user_id: str, email: Optional[str] = None) -> ProfileResolution:
        """
        Look the user up and classify them.

        Args:
            user_id: Supabase auth user id (the primary key everywhere)
            email: Optional email used only as a diagnostic fallback

        Returns:
            ProfileResolution with kind admin, distributor, none or conflict
        """
        if self._layout == "single":
            resolution = await self._resolve_single(user_id)
        else:
            resolution = await self._resolve_dual(user_id)

        if resolution.kind == ResolutionKind.NONE and email:
            await self._check_email_fallback(user_id, email)

        logger.info("Resolved user %s as %s", user_id, resolution.kind.value)
        return resolution

    async def _resolve_single(self, user_id: str) -> ProfileResolution:
        profile = await asyncio.to_thread(self._profiles.get_by_id, user_id)
        if profile is None:
            return ProfileResolution(kind=ResolutionKind.NONE)

        kind = ResolutionKind.ADMIN if profile.role == UserRole.ADMIN else ResolutionKind.DISTRIBUTOR
        return ProfileResolution(kind=kind, record=profile, table=PROFILES_TABLE)

    async def _resolve_dual(self, user_id: str) -> ProfileResolution:
        admin, profile = await asyncio.gather(
            asyncio.to_thread(self._admins.get_by_id, user_id),
            asyncio.to_thread(self._profiles.get_by_id, user_id),
        )

        if admin is None and profile is None:
            return ProfileResolution(kind=ResolutionKind.NONE)

        if admin is not None and profile is not None:
            logger.warning(
                "User %s exists in both %s and %s", user_id, ADMIN_USERS_TABLE, PROFILES_TABLE
            )
            return ProfileResolution(kind=ResolutionKind.CONFLICT)

        if admin is not None:
            return ProfileResolution(kind=ResolutionKind.ADMIN, record=admin, table=ADMIN_USERS_TABLE)

        return ProfileResolution(kind=ResolutionKind.DISTRIBUTOR, record=profile, table=PROFILES_TABLE)

    async def _check_email_fallback(self, user_id: str, email: str) -> None:
        """
        Flag profiles keyed by email but carrying a different id.

        Lookups are standardized on id; a hit here never grants access.
        """
        by_email = await asyncio.to_thread(self._profiles.get_by_email, email)
        if by_email is not None and by_email.id != user_id:
            logger.warning(
                "Profile lookup divergence: %s matches profile %s by email but auth id is %s",
                email,
                by_email.id,
                user_id,
            )

    def authorize(self, resolution: ProfileResolution, user_id: str) -> ProfileResolution:
        """
        Apply the access rules to a resolution.

        Raises:
            ProfileNotFoundError: No authorization record
            ProfileConflictError: Records in both tables
            AccountInactiveError: Record exists but status is not active
        """
        if resolution.kind == ResolutionKind.NONE:
            raise ProfileNotFoundError(user_id)
        if resolution.kind == ResolutionKind.CONFLICT:
            raise ProfileConflictError(user_id)
        if resolution.status != ProfileStatus.ACTIVE:
            raise AccountInactiveError(user_id, resolution.status.value)
        return resolution

    async def activate(self, resolution: ProfileResolution) -> bool:
        """
        Flip a pending record to active.

        Returns:
            True if a row was updated. Records that are not pending are left alone.
        """
        if resolution.record is None or resolution.status != ProfileStatus.PENDING:
            return False

        repo = self._admins if resolution.table == ADMIN_USERS_TABLE else self._profiles
        updated = await asyncio.to_thread(repo.set_status, resolution.record.id, ProfileStatus.ACTIVE)
        if not updated:
            logger.warning(
                "Activating %s in %s returned no rows; row-level security may be blocking it",
                resolution.record.id,
                resolution.table,
            )
        return updated
