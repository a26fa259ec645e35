"""
Activity repository.

Tables and views:
- distributor_activity (append-only, written by track)
- distributor_activity_detailed (read by reports)
- distributors (report denominator)
"""

from datetime import datetime
from typing import Any, Optional

from pydantic import ValidationError as PydanticValidationError

from shared.exceptions import MalformedRowError
from shared.repository import BaseRepository
from .models import ActivityDetail, ActivityType, DistributorRef

ACTIVITY_TABLE = "distributor_activity"
DETAILED_VIEW = "distributor_activity_detailed"
DISTRIBUTORS_TABLE = "distributors"


class ActivityRepository(BaseRepository[ActivityDetail]):
    """Data access for activity records."""

    table = DETAILED_VIEW
    model = ActivityDetail

    def insert(self, data: dict[str, Any]) -> None:
        self._db.table(ACTIVITY_TABLE).insert(data).execute()

    def list_detailed(
        self,
        since: datetime,
        distributor_ids: Optional[list[str]] = None,
        activity_type: Optional[ActivityType] = None,
    ) -> list[ActivityDetail]:
        """Activity since a point in time, newest first."""
        query = (
            self._db.table(DETAILED_VIEW)
            .select("*")
            .gte("created_at", since.isoformat())
        )
        if distributor_ids:
            query = query.in_("distributor_id", distributor_ids)
        if activity_type is not None:
            query = query.eq("activity_type", activity_type.value)

        result = query.order("created_at", desc=True).execute()
        return self._parse_rows(result.data)

    def list_active_distributors(self, distributor_ids: Optional[list[str]] = None) -> list[DistributorRef]:
        query = (
            self._db.table(DISTRIBUTORS_TABLE)
            .select("id, company_name, territory, country, status")
            .eq("status", "active")
        )
        if distributor_ids:
            query = query.in_("id", distributor_ids)
        result = query.order("company_name").execute()
        try:
            return [DistributorRef.model_validate(row) for row in result.data or []]
        except PydanticValidationError as e:
            raise MalformedRowError(DISTRIBUTORS_TABLE, str(e)) from e
