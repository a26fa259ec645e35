"""
Activity report aggregation and CSV export.

Pure functions over rows already fetched from the detailed view.
"""

import csv
import io
from collections import Counter
from datetime import datetime, timedelta, timezone
from typing import Iterable, Optional

from .models import (
    ActivityDetail,
    ActivityReport,
    ActivityType,
    DistributorRef,
    NamedCount,
    RankedResource,
)

ACTIVE_WINDOW = timedelta(days=7)
TOP_RESOURCES = 5
TOP_DISTRIBUTORS = 10

CSV_HEADERS = [
    "Date",
    "Time",
    "Distributor Company",
    "Territory",
    "User Name",
    "User Email",
    "Activity Type",
    "Resource",
    "Page",
]

_SEARCH_FIELDS = ("user_name", "user_email", "distributor_company", "resource_name", "page_url")


def filter_by_search(activities: Iterable[ActivityDetail], search: str) -> list[ActivityDetail]:
    """Case-insensitive substring match over user, company, resource and page."""
    activities = list(activities)
    needle = search.strip().lower()
    if not needle:
        return activities
    return [
        activity
        for activity in activities
        if any(needle in (getattr(activity, name) or "").lower() for name in _SEARCH_FIELDS)
    ]


def _rank_resources(activities: list[ActivityDetail], activity_type: ActivityType) -> list[RankedResource]:
    counts: Counter[str] = Counter()
    first_company: dict[str, Optional[str]] = {}
    for activity in activities:
        if activity.activity_type != activity_type or not activity.resource_name:
            continue
        counts[activity.resource_name] += 1
        first_company.setdefault(activity.resource_name, activity.distributor_company)

    return [
        RankedResource(name=name, count=count, distributor=first_company[name])
        for name, count in counts.most_common(TOP_RESOURCES)
    ]


def build_report(
    activities: list[ActivityDetail],
    distributors: list[DistributorRef],
    search: str = "",
    now: Optional[datetime] = None,
) -> ActivityReport:
    """
    Aggregate activity rows into the dashboard figures.

    Totals, rankings and the per-distributor breakdown cover every fetched
    row. The by-day and by-type breakdowns, and the returned rows, honour
    the search text.

    Args:
        activities: Rows already restricted by date range, distributor and type
        distributors: Active distributors in scope (engagement denominator)
        search: Free-text search
        now: Reference time for the seven-day activity window
    """
    now = now or datetime.now(timezone.utc)
    searched = filter_by_search(activities, search)

    cutoff = now - ACTIVE_WINDOW
    recently_logged_in = {
        activity.distributor_id
        for activity in activities
        if activity.activity_type == ActivityType.LOGIN and activity.created_at >= cutoff
    }
    active = sum(1 for distributor in distributors if distributor.id in recently_logged_in)
    total = len(distributors)
    engagement = round(active / total * 100, 1) if total else 0.0

    by_day = Counter(activity.created_at.date().isoformat() for activity in searched)
    by_distributor = Counter(activity.distributor_company or "Unknown" for activity in activities)
    by_type = Counter(activity.activity_type.value for activity in searched)

    return ActivityReport(
        total_activities=len(activities),
        active_distributors=active,
        total_distributors=total,
        engagement_rate=engagement,
        most_downloaded=_rank_resources(activities, ActivityType.DOWNLOAD),
        most_viewed=_rank_resources(activities, ActivityType.PRODUCT_VIEW),
        by_day=[NamedCount(name=day, count=count) for day, count in sorted(by_day.items())][-30:],
        by_distributor=[
            NamedCount(name=name, count=count)
            for name, count in by_distributor.most_common(TOP_DISTRIBUTORS)
        ],
        by_type=[NamedCount(name=name, count=count) for name, count in by_type.items()],
        activities=searched,
    )


def to_csv(activities: Iterable[ActivityDetail]) -> str:
    """Render activity rows as CSV with every cell quoted."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerow(CSV_HEADERS)
    for activity in activities:
        writer.writerow(
            [
                activity.created_at.date().isoformat(),
                activity.created_at.time().replace(microsecond=0).isoformat(),
                activity.distributor_company or "",
                activity.distributor_territory or "",
                activity.user_name or "",
                activity.user_email or "",
                activity.activity_type.value,
                activity.resource_name or "",
                activity.page_url or "",
            ]
        )
    return buffer.getvalue()
