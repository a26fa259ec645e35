"""
Activity tracking data models.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field


class ActivityType(str, Enum):
    """Kinds of distributor engagement that are recorded."""

    LOGIN = "login"
    DOWNLOAD = "download"
    PAGE_VIEW = "page_view"
    SEARCH = "search"
    PRODUCT_VIEW = "product_view"


class ResourceType(str, Enum):
    """What an activity was about."""

    PRODUCT = "product"
    DOCUMENT = "document"
    MARKETING_ASSET = "marketing_asset"
    TRAINING = "training"
    SOFTWARE_RELEASE = "software_release"


class TrackActivityRequest(BaseModel):
    """Activity reported by the browser."""

    activity_type: ActivityType
    page_url: Optional[str] = None
    resource_type: Optional[ResourceType] = None
    resource_id: Optional[str] = None
    resource_name: Optional[str] = None
    metadata: dict[str, Any] = Field(default_factory=dict)


class ActivityDetail(BaseModel):
    """Row of the distributor_activity_detailed view."""

    id: str
    user_id: str
    user_email: Optional[str] = None
    user_name: Optional[str] = None
    distributor_id: Optional[str] = None
    distributor_company: Optional[str] = None
    distributor_territory: Optional[str] = None
    distributor_country: Optional[str] = None
    activity_type: ActivityType
    page_url: Optional[str] = None
    resource_type: Optional[str] = None
    resource_id: Optional[str] = None
    resource_name: Optional[str] = None
    metadata: Optional[dict[str, Any]] = None
    created_at: datetime

    model_config = {"extra": "ignore"}


class DistributorRef(BaseModel):
    """Row of the distributors table, as used by reports."""

    id: str
    company_name: str = ""
    territory: Optional[str] = None
    country: Optional[str] = None
    status: Optional[str] = None

    model_config = {"extra": "ignore"}


class ReportFilters(BaseModel):
    """Activity report filters."""

    days: int = Field(default=30, ge=1, le=365, description="Look-back window")
    distributor_ids: list[str] = Field(default_factory=list)
    activity_type: Optional[ActivityType] = None
    search: str = ""


class RankedResource(BaseModel):
    name: str
    count: int
    distributor: Optional[str] = None


class NamedCount(BaseModel):
    name: str
    count: int


class ActivityReport(BaseModel):
    """Dashboard figures for the admin activity report."""

    total_activities: int = 0
    active_distributors: int = 0
    total_distributors: int = 0
    engagement_rate: float = Field(default=0.0, description="Percent, one decimal")
    most_downloaded: list[RankedResource] = Field(default_factory=list)
    most_viewed: list[RankedResource] = Field(default_factory=list)
    by_day: list[NamedCount] = Field(default_factory=list)
    by_distributor: list[NamedCount] = Field(default_factory=list)
    by_type: list[NamedCount] = Field(default_factory=list)
    activities: list[ActivityDetail] = Field(default_factory=list)
