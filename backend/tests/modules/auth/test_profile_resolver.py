"""Tests for the profile resolver."""

import pytest
from unittest.mock import MagicMock

from modules.auth.exceptions import (
    AccountInactiveError,
    ProfileConflictError,
    ProfileNotFoundError,
)
from modules.auth.models import (
    AdminUser,
    Profile,
    ProfileResolution,
    ProfileStatus,
    ResolutionKind,
)
from modules.auth.profile_resolver import ProfileResolver
from modules.auth.repository import ADMIN_USERS_TABLE, PROFILES_TABLE
from shared.models import UserRole


def make_resolver(layout="dual", admin=None, profile=None, by_email=None) -> ProfileResolver:
    resolver = ProfileResolver(MagicMock(), layout)
    resolver._admins = MagicMock()
    resolver._admins.get_by_id.return_value = admin
    resolver._admins.set_status.return_value = True
    resolver._profiles = MagicMock()
    resolver._profiles.get_by_id.return_value = profile
    resolver._profiles.get_by_email.return_value = by_email
    resolver._profiles.set_status.return_value = True
    return resolver


class TestDualLayout:
    @pytest.mark.asyncio
    async def test_neither_table(self):
        resolution = await make_resolver().resolve("user-1")
        assert resolution.kind == ResolutionKind.NONE
        assert resolution.record is None

    @pytest.mark.asyncio
    async def test_both_tables_is_conflict(self):
        resolver = make_resolver(admin=AdminUser(id="user-1"), profile=Profile(id="user-1"))
        resolution = await resolver.resolve("user-1")
        assert resolution.kind == ResolutionKind.CONFLICT
        assert resolution.role is None

    @pytest.mark.asyncio
    async def test_admin_only(self):
        resolver = make_resolver(admin=AdminUser(id="user-1", full_name="Ada"))
        resolution = await resolver.resolve("user-1")
        assert resolution.kind == ResolutionKind.ADMIN
        assert resolution.role == UserRole.ADMIN
        assert resolution.table == ADMIN_USERS_TABLE

    @pytest.mark.asyncio
    async def test_profile_only(self):
        resolver = make_resolver(profile=Profile(id="user-1", status=ProfileStatus.PENDING))
        resolution = await resolver.resolve("user-1")
        assert resolution.kind == ResolutionKind.DISTRIBUTOR
        assert resolution.status == ProfileStatus.PENDING
        assert resolution.table == PROFILES_TABLE

    @pytest.mark.asyncio
    async def test_admin_role_in_profiles_ignored(self):
        """In the dual layout only the admin table makes someone an admin."""
        resolver = make_resolver(profile=Profile(id="user-1", role=UserRole.ADMIN))
        resolution = await resolver.resolve("user-1")
        assert resolution.kind == ResolutionKind.DISTRIBUTOR

    @pytest.mark.asyncio
    async def test_looks_up_both_tables_by_id(self):
        resolver = make_resolver()
        await resolver.resolve("user-1")
        resolver._admins.get_by_id.assert_called_once_with("user-1")
        resolver._profiles.get_by_id.assert_called_once_with("user-1")


class TestSingleLayout:
    @pytest.mark.asyncio
    async def test_role_column_decides(self):
        resolver = make_resolver(layout="single", profile=Profile(id="user-1", role=UserRole.ADMIN))
        resolution = await resolver.resolve("user-1")
        assert resolution.kind == ResolutionKind.ADMIN
        assert resolution.table == PROFILES_TABLE
        resolver._admins.get_by_id.assert_not_called()

    @pytest.mark.asyncio
    async def test_distributor_role(self):
        resolver = make_resolver(layout="single", profile=Profile(id="user-1"))
        resolution = await resolver.resolve("user-1")
        assert resolution.kind == ResolutionKind.DISTRIBUTOR

    @pytest.mark.asyncio
    async def test_missing_profile(self):
        resolution = await make_resolver(layout="single").resolve("user-1")
        assert resolution.kind == ResolutionKind.NONE

    def test_unknown_layout(self):
        with pytest.raises(ValueError):
            ProfileResolver(MagicMock(), "triple")


class TestEmailFallback:
    @pytest.mark.asyncio
    async def test_email_match_never_grants_access(self, caplog):
        """A profile found only by email is logged, not used."""
        resolver = make_resolver(by_email=Profile(id="legacy-id", email="rep@example.com"))
        resolution = await resolver.resolve("user-1", "rep@example.com")
        assert resolution.kind == ResolutionKind.NONE
        assert "divergence" in caplog.text

    @pytest.mark.asyncio
    async def test_not_consulted_when_id_matches(self):
        resolver = make_resolver(profile=Profile(id="user-1"))
        await resolver.resolve("user-1", "rep@example.com")
        resolver._profiles.get_by_email.assert_not_called()

    @pytest.mark.asyncio
    async def test_not_consulted_without_email(self):
        resolver = make_resolver()
        await resolver.resolve("user-1")
        resolver._profiles.get_by_email.assert_not_called()


class TestAuthorize:
    def test_none(self):
        resolver = make_resolver()
        with pytest.raises(ProfileNotFoundError):
            resolver.authorize(ProfileResolution(kind=ResolutionKind.NONE), "user-1")

    def test_conflict(self):
        resolver = make_resolver()
        with pytest.raises(ProfileConflictError):
            resolver.authorize(ProfileResolution(kind=ResolutionKind.CONFLICT), "user-1")

    @pytest.mark.parametrize("status", [ProfileStatus.PENDING, ProfileStatus.INACTIVE])
    def test_not_active(self, status):
        resolver = make_resolver()
        resolution = ProfileResolution(
            kind=ResolutionKind.DISTRIBUTOR,
            record=Profile(id="user-1", status=status),
            table=PROFILES_TABLE,
        )
        with pytest.raises(AccountInactiveError) as exc_info:
            resolver.authorize(resolution, "user-1")
        assert exc_info.value.status == status.value
        assert "not currently active" in exc_info.value.message

    def test_active_passes(self):
        resolver = make_resolver()
        resolution = ProfileResolution(
            kind=ResolutionKind.ADMIN,
            record=AdminUser(id="user-1"),
            table=ADMIN_USERS_TABLE,
        )
        assert resolver.authorize(resolution, "user-1") is resolution


class TestActivate:
    @pytest.mark.asyncio
    async def test_pending_profile_is_activated(self):
        resolver = make_resolver()
        resolution = ProfileResolution(
            kind=ResolutionKind.DISTRIBUTOR,
            record=Profile(id="user-1", status=ProfileStatus.PENDING),
            table=PROFILES_TABLE,
        )
        assert await resolver.activate(resolution) is True
        resolver._profiles.set_status.assert_called_once_with("user-1", ProfileStatus.ACTIVE)
        resolver._admins.set_status.assert_not_called()

    @pytest.mark.asyncio
    async def test_pending_admin_uses_admin_table(self):
        resolver = make_resolver()
        resolution = ProfileResolution(
            kind=ResolutionKind.ADMIN,
            record=AdminUser(id="admin-1", status=ProfileStatus.PENDING),
            table=ADMIN_USERS_TABLE,
        )
        assert await resolver.activate(resolution) is True
        resolver._admins.set_status.assert_called_once_with("admin-1", ProfileStatus.ACTIVE)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status", [ProfileStatus.ACTIVE, ProfileStatus.INACTIVE])
    async def test_non_pending_left_alone(self, status):
        resolver = make_resolver()
        resolution = ProfileResolution(
            kind=ResolutionKind.DISTRIBUTOR,
            record=Profile(id="user-1", status=status),
            table=PROFILES_TABLE,
        )
        assert await resolver.activate(resolution) is False
        resolver._profiles.set_status.assert_not_called()

    @pytest.mark.asyncio
    async def test_empty_update_reported(self, caplog):
        resolver = make_resolver()
        resolver._profiles.set_status.return_value = False
        resolution = ProfileResolution(
            kind=ResolutionKind.DISTRIBUTOR,
            record=Profile(id="user-1", status=ProfileStatus.PENDING),
            table=PROFILES_TABLE,
        )
        assert await resolver.activate(resolution) is False
        assert "returned no rows" in caplog.text
