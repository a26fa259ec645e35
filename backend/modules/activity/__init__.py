"""
Activity tracking module.

Records distributor engagement (logins, downloads, page and product
views, searches) and aggregates it for the admin activity report.

Public API:
- ActivityService: track, build_report, export_csv
- ActivityType, ResourceType: Recorded activity kinds
- ActivityReport, ReportFilters: Report input and output
"""

from .models import (
    ActivityType,
    ResourceType,
    TrackActivityRequest,
    ActivityDetail,
    ReportFilters,
    ActivityReport,
)
from .service import ActivityService

__all__ = [
    "ActivityType",
    "ResourceType",
    "TrackActivityRequest",
    "ActivityDetail",
    "ReportFilters",
    "ActivityReport",
    "ActivityService",
]
