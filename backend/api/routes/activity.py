"""
Activity tracking and reporting endpoints.
"""

from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import Response
from pydantic import BaseModel

from shared.models import PortalUser
from modules.activity.models import (
    ActivityReport,
    ActivityType,
    ReportFilters,
    TrackActivityRequest,
)
from modules.activity.service import ActivityService
from ..dependencies import get_activity_service
from ..middleware.auth import get_portal_user, require_admin

router = APIRouter()


class TrackActivityResponse(BaseModel):
    recorded: bool


def get_report_filters(
    days: int = Query(default=30, ge=1, le=365),
    distributor_id: list[str] = Query(default=[]),
    activity_type: Optional[ActivityType] = Query(default=None),
    search: str = Query(default=""),
) -> ReportFilters:
    return ReportFilters(
        days=days,
        distributor_ids=distributor_id,
        activity_type=activity_type,
        search=search,
    )


@router.post("/activity", response_model=TrackActivityResponse)
async def track_activity(
    body: TrackActivityRequest,
    request: Request,
    user: PortalUser = Depends(get_portal_user),
    service: ActivityService = Depends(get_activity_service),
) -> TrackActivityResponse:
    """
    Record a page view, search or product view from the browser.

    Tracking is best effort: a failed insert answers recorded=false
    rather than an error.
    """
    recorded = await service.track(
        user.id,
        body.activity_type,
        page_url=body.page_url,
        resource_type=body.resource_type,
        resource_id=body.resource_id,
        resource_name=body.resource_name,
        metadata=body.metadata,
        user_agent=request.headers.get("user-agent"),
    )
    return TrackActivityResponse(recorded=recorded)


@router.get("/admin/activity/report", response_model=ActivityReport)
async def activity_report(
    filters: ReportFilters = Depends(get_report_filters),
    user: PortalUser = Depends(require_admin),
    service: ActivityService = Depends(get_activity_service),
) -> ActivityReport:
    return await service.build_report(filters)


@router.get("/admin/activity/export")
async def export_activity(
    filters: ReportFilters = Depends(get_report_filters),
    user: PortalUser = Depends(require_admin),
    service: ActivityService = Depends(get_activity_service),
) -> Response:
    """Download the filtered activity rows as CSV."""
    content = await service.export_csv(filters)
    filename = f"distributor-activity-{datetime.now(timezone.utc):%Y-%m-%d}.csv"
    return Response(
        content=content,
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
