"""
Distributor repository.

Distributor accounts live in user_profiles; every query here is pinned
to role distributor so admin rows of the single-table layout never leak in.
"""

from datetime import datetime, timezone
from typing import Any, Optional

from shared.models import UserRole
from shared.repository import BaseRepository, clean_search_term
from .models import Distributor, DistributorFilters

PROFILES_TABLE = "user_profiles"


class DistributorRepository(BaseRepository[Distributor]):
    """Data access for distributor profiles."""

    table = PROFILES_TABLE
    model = Distributor

    def _distributors(self, columns: str = "*"):
        return self._db.table(self.table).select(columns).eq("role", UserRole.DISTRIBUTOR.value)

    def list_distributors(self, filters: DistributorFilters) -> list[Distributor]:
        """Newest first."""
        query = self._distributors()
        if filters.statuses:
            query = query.in_("status", [status.value for status in filters.statuses])
        if filters.territories:
            query = query.in_("territory", filters.territories)

        term = clean_search_term(filters.search)
        if term:
            query = query.or_(
                f"email.ilike.%{term}%,"
                f"full_name.ilike.%{term}%,"
                f"company_name.ilike.%{term}%"
            )

        result = query.order("created_at", desc=True).execute()
        return self._parse_rows(result.data)

    def get_by_id(self, distributor_id: str) -> Optional[Distributor]:
        result = self._distributors().eq("id", distributor_id).limit(1).execute()
        return self._parse_first(result.data)

    def email_exists(self, email: str) -> bool:
        """True if any profile, distributor or not, already uses the email."""
        result = self._db.table(self.table).select("id").eq("email", email).limit(1).execute()
        return bool(result.data)

    def create(self, data: dict[str, Any]) -> Distributor:
        now = datetime.now(timezone.utc).isoformat()
        data = {**data, "created_at": now, "updated_at": now}
        result = self._db.table(self.table).insert(data).execute()
        return self._parse(result.data[0])

    def update(self, distributor_id: str, data: dict[str, Any]) -> Optional[Distributor]:
        """Returns None when the update matched no rows."""
        data = {**data, "updated_at": datetime.now(timezone.utc).isoformat()}
        result = (
            self._db.table(self.table)
            .update(data)
            .eq("id", distributor_id)
            .eq("role", UserRole.DISTRIBUTOR.value)
            .execute()
        )
        return self._parse_first(result.data)

    def list_statuses(self) -> list[dict[str, Any]]:
        return self._distributors("id, status").execute().data or []
