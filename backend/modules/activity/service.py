"""
Activity service.

Recording is best effort: a failed insert is logged and swallowed so it
can never break the sign-in or download it accompanies.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

from supabase import Client

from shared.config import Settings, get_settings
from modules.auth.models import Session
from .models import ActivityDetail, ActivityReport, ActivityType, ReportFilters, ResourceType
from .repository import ActivityRepository
from . import reports

logger = logging.getLogger(__name__)


class ActivityService:
    """Records distributor activity and builds admin reports."""

    def __init__(self, supabase_client: Client, settings: Optional[Settings] = None):
        self._repository = ActivityRepository(supabase_client)
        self._settings = settings or get_settings()

    async def track(
        self,
        user_id: str,
        activity_type: ActivityType,
        page_url: Optional[str] = None,
        resource_type: Optional[ResourceType] = None,
        resource_id: Optional[str] = None,
        resource_name: Optional[str] = None,
        metadata: Optional[dict[str, Any]] = None,
        user_agent: Optional[str] = None,
    ) -> bool:
        """
        Append an activity record.

        Returns:
            True if the record was stored
        """
        if not self._settings.activity_tracking_enabled:
            return False

        data = {
            "user_id": user_id,
            "activity_type": activity_type.value,
            "page_url": page_url,
            "resource_type": resource_type.value if resource_type else None,
            "resource_id": resource_id,
            "resource_name": resource_name,
            "metadata": metadata or {},
            "user_agent": user_agent,
        }
        try:
            self._repository.insert(data)
        except Exception as e:
            logger.warning("Failed to record %s activity for %s: %s", activity_type.value, user_id, e)
            return False

        logger.debug("Recorded %s activity for %s", activity_type.value, user_id)
        return True

    async def record_login(self, session: Session) -> None:
        """Login hook for the auth module."""
        await self.track(
            session.user.id,
            ActivityType.LOGIN,
            metadata={"provider": session.user.provider or "email"},
        )

    def _fetch(self, filters: ReportFilters) -> list[ActivityDetail]:
        since = datetime.now(timezone.utc) - timedelta(days=filters.days)
        return self._repository.list_detailed(
            since,
            distributor_ids=filters.distributor_ids or None,
            activity_type=filters.activity_type,
        )

    async def build_report(self, filters: ReportFilters) -> ActivityReport:
        activities = self._fetch(filters)
        distributors = self._repository.list_active_distributors(filters.distributor_ids or None)
        return reports.build_report(activities, distributors, filters.search)

    async def export_csv(self, filters: ReportFilters) -> str:
        """CSV of the filtered activity rows."""
        activities = reports.filter_by_search(self._fetch(filters), filters.search)
        logger.info("Exporting %d activity rows", len(activities))
        return reports.to_csv(activities)
