"""
Content library data models.

Four libraries share one shape: a list of downloadable (or viewable)
records with a title, a product, a category, a status and a counter.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field


class ContentKind(str, Enum):
    """The content libraries, by URL segment."""

    DOCUMENTS = "documents"
    TRAINING = "training"
    MARKETING = "marketing"
    SOFTWARE = "software"


class ContentStatus(str, Enum):
    """Status of documents, training materials and marketing assets."""

    DRAFT = "draft"
    PUBLISHED = "published"
    ARCHIVED = "archived"


class ReleaseStatus(str, Enum):
    """Status of software releases."""

    DRAFT = "draft"
    PUBLISHED = "published"
    DEPRECATED = "deprecated"
    RECALLED = "recalled"


class SortDirection(str, Enum):
    ASC = "asc"
    DESC = "desc"


class SortField(str, Enum):
    """Columns the library tables can be sorted by."""

    TITLE = "title"
    PRODUCT = "product"
    CATEGORY = "category"
    VERSION = "version"
    SIZE = "size"
    UPDATED = "updated"


# =============================================================================
# Records
# =============================================================================


class Document(BaseModel):
    """Row of the documentation table."""

    id: str
    title: str
    product: str = ""
    category: str = ""
    version: str = ""
    status: ContentStatus = ContentStatus.DRAFT
    language: str = "en"
    file_url: Optional[str] = None
    file_size: Optional[int] = None
    format: Optional[str] = None
    downloads: int = 0
    internal_notes: Optional[str] = None
    created_by: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"extra": "ignore"}


class TrainingMaterial(BaseModel):
    """Row of the training_materials table."""

    id: str
    title: str
    type: str = ""
    format: str = ""
    level: str = ""
    duration: Optional[str] = None
    modules: Optional[int] = None
    views: int = 0
    product: str = ""
    status: ContentStatus = ContentStatus.DRAFT
    description: Optional[str] = None
    video_url: Optional[str] = None
    file_url: Optional[str] = None
    internal_notes: Optional[str] = None
    created_by: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"extra": "ignore"}


class MarketingAsset(BaseModel):
    """Row of the marketing_assets table."""

    id: str
    name: str
    type: str = ""
    product: str = ""
    language: str = "en"
    format: str = ""
    size: Optional[int] = None
    status: ContentStatus = ContentStatus.DRAFT
    description: Optional[str] = None
    file_url: Optional[str] = None
    downloads: int = 0
    internal_notes: Optional[str] = None
    created_by: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"extra": "ignore"}


class SoftwareRelease(BaseModel):
    """Row of the software_releases table."""

    id: str
    name: str
    version: str = ""
    release_type: str = "software"
    product_id: Optional[str] = None
    product_name: Optional[str] = None
    file_url: Optional[str] = None
    file_name: Optional[str] = None
    file_size: Optional[int] = None
    checksum: Optional[str] = None
    description: Optional[str] = None
    release_notes: Optional[str] = None
    is_mandatory: bool = False
    status: ReleaseStatus = ReleaseStatus.DRAFT
    published_at: Optional[datetime] = None
    release_date: Optional[datetime] = None
    download_count: int = 0
    created_by: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"extra": "ignore"}


# =============================================================================
# Admin inputs
# =============================================================================


class DocumentCreate(BaseModel):
    title: str = Field(..., min_length=1)
    product: str
    category: str
    version: str
    status: ContentStatus = ContentStatus.DRAFT
    language: str = "en"
    file_url: Optional[str] = None
    file_size: Optional[int] = None
    format: Optional[str] = None
    internal_notes: Optional[str] = None


class DocumentUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1)
    product: Optional[str] = None
    category: Optional[str] = None
    version: Optional[str] = None
    status: Optional[ContentStatus] = None
    language: Optional[str] = None
    file_url: Optional[str] = None
    file_size: Optional[int] = None
    format: Optional[str] = None
    internal_notes: Optional[str] = None


class TrainingMaterialCreate(BaseModel):
    title: str = Field(..., min_length=1)
    type: str
    format: str
    level: str
    product: str
    status: ContentStatus = ContentStatus.DRAFT
    duration: Optional[str] = None
    modules: Optional[int] = None
    description: Optional[str] = None
    video_url: Optional[str] = None
    file_url: Optional[str] = None
    internal_notes: Optional[str] = None


class TrainingMaterialUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1)
    type: Optional[str] = None
    format: Optional[str] = None
    level: Optional[str] = None
    product: Optional[str] = None
    status: Optional[ContentStatus] = None
    duration: Optional[str] = None
    modules: Optional[int] = None
    description: Optional[str] = None
    video_url: Optional[str] = None
    file_url: Optional[str] = None
    internal_notes: Optional[str] = None


class MarketingAssetCreate(BaseModel):
    name: str = Field(..., min_length=1)
    type: str
    product: str
    language: str = "en"
    format: str
    status: ContentStatus = ContentStatus.DRAFT
    size: Optional[int] = None
    description: Optional[str] = None
    file_url: Optional[str] = None
    internal_notes: Optional[str] = None


class MarketingAssetUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    type: Optional[str] = None
    product: Optional[str] = None
    language: Optional[str] = None
    format: Optional[str] = None
    status: Optional[ContentStatus] = None
    size: Optional[int] = None
    description: Optional[str] = None
    file_url: Optional[str] = None
    internal_notes: Optional[str] = None


class SoftwareReleaseCreate(BaseModel):
    name: str = Field(..., min_length=1)
    version: str
    release_type: str = "software"
    file_url: str
    file_name: str
    product_id: Optional[str] = None
    product_name: Optional[str] = None
    file_size: Optional[int] = None
    checksum: Optional[str] = None
    description: Optional[str] = None
    release_notes: Optional[str] = None
    is_mandatory: bool = False
    status: ReleaseStatus = ReleaseStatus.DRAFT
    release_date: Optional[datetime] = None


class SoftwareReleaseUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    version: Optional[str] = None
    release_type: Optional[str] = None
    product_id: Optional[str] = None
    product_name: Optional[str] = None
    description: Optional[str] = None
    release_notes: Optional[str] = None
    is_mandatory: Optional[bool] = None
    status: Optional[ReleaseStatus] = None
    release_date: Optional[datetime] = None


# =============================================================================
# Queries and results
# =============================================================================


class ContentFilters(BaseModel):
    """
    List filters.

    Set filters are pushed to the database; search runs afterwards over
    the returned rows, case-insensitively.
    """

    search: str = ""
    products: list[str] = Field(default_factory=list)
    categories: list[str] = Field(default_factory=list)
    statuses: list[str] = Field(default_factory=list)
    languages: list[str] = Field(default_factory=list)


class ContentQuery(BaseModel):
    filters: ContentFilters = Field(default_factory=ContentFilters)
    sort_field: Optional[SortField] = None
    sort_direction: SortDirection = SortDirection.ASC


class DownloadResult(BaseModel):
    """What the browser needs to open a download."""

    id: str
    file_url: str
    count: int = Field(..., description="Counter value after this download")


class ContentListResponse(BaseModel):
    kind: ContentKind
    items: list[dict[str, Any]]
    total: int
