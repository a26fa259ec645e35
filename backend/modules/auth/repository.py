"""
Authorization record repositories.

Encapsulates the Supabase queries for the two authorization tables:
- user_profiles (distributor users; every user in the single-table layout)
- admin_users (administrators in the dual-table layout)
"""

from datetime import datetime, timezone
from typing import Optional

from shared.repository import BaseRepository
from .models import AdminUser, Profile, ProfileStatus

PROFILES_TABLE = "user_profiles"
ADMIN_USERS_TABLE = "admin_users"


class ProfileRepository(BaseRepository[Profile]):
    """Data access for user_profiles."""

    table = PROFILES_TABLE
    model = Profile

    def get_by_id(self, user_id: str) -> Optional[Profile]:
        result = self._db.table(self.table).select("*").eq("id", user_id).limit(1).execute()
        return self._parse_first(result.data)

    def get_by_email(self, email: str) -> Optional[Profile]:
        result = self._db.table(self.table).select("*").eq("email", email).limit(1).execute()
        return self._parse_first(result.data)

    def set_status(self, user_id: str, status: ProfileStatus) -> bool:
        """
        Update a profile's status.

        Returns:
            False when the update matched no rows (blocked by RLS or missing)
        """
        data = {
            "status": status.value,
            "updated_at": datetime.now(timezone.utc).isoformat(),
        }
        result = self._db.table(self.table).update(data).eq("id", user_id).execute()
        return bool(result.data)


class AdminUserRepository(BaseRepository[AdminUser]):
    """Data access for admin_users."""

    table = ADMIN_USERS_TABLE
    model = AdminUser

    def get_by_id(self, user_id: str) -> Optional[AdminUser]:
        result = self._db.table(self.table).select("*").eq("id", user_id).limit(1).execute()
        return self._parse_first(result.data)

    def set_status(self, user_id: str, status: ProfileStatus) -> bool:
        data = {
            "status": status.value,
            "updated_at": datetime.now(timezone.utc).isoformat(),
        }
        result = self._db.table(self.table).update(data).eq("id", user_id).execute()
        return bool(result.data)
