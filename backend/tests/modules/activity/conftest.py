"""
Pytest fixtures for activity module tests.
"""

from datetime import datetime, timedelta, timezone

import pytest

from modules.activity.models import ActivityDetail, DistributorRef

NOW = datetime(2025, 3, 15, 12, 0, tzinfo=timezone.utc)


def make_activity(
    activity_id: str,
    activity_type: str = "login",
    distributor_id: str = "dist-1",
    company: str = "Northwind Medical",
    days_ago: int = 0,
    **fields,
) -> ActivityDetail:
    row = {
        "id": activity_id,
        "user_id": f"user-{distributor_id}",
        "user_email": f"rep@{distributor_id}.example.com",
        "user_name": "Rep",
        "distributor_id": distributor_id,
        "distributor_company": company,
        "distributor_territory": "Benelux",
        "activity_type": activity_type,
        "created_at": NOW - timedelta(days=days_ago),
    }
    row.update(fields)
    return ActivityDetail.model_validate(row)


@pytest.fixture
def distributors():
    return [
        DistributorRef(id="dist-1", company_name="Northwind Medical"),
        DistributorRef(id="dist-2", company_name="Contoso Health"),
        DistributorRef(id="dist-3", company_name="Fabrikam Care"),
    ]
