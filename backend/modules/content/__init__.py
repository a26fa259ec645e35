"""
Content library module.

Technical documentation, training materials, marketing assets and
software releases: listing with filters, search and sort, admin CRUD,
and download counting.

Public API:
- ContentService: list_items, get, create, update, delete, record_download
- ContentKind: Which library
- ContentQuery, ContentFilters: List parameters
- DownloadResult: Download outcome
"""

from .models import (
    ContentKind,
    ContentStatus,
    ReleaseStatus,
    ContentFilters,
    ContentQuery,
    SortField,
    SortDirection,
    DownloadResult,
    Document,
    TrainingMaterial,
    MarketingAsset,
    SoftwareRelease,
)
from .catalog import CATALOG, ContentSpec, get_spec
from .service import ContentService

__all__ = [
    "ContentKind",
    "ContentStatus",
    "ReleaseStatus",
    "ContentFilters",
    "ContentQuery",
    "SortField",
    "SortDirection",
    "DownloadResult",
    "Document",
    "TrainingMaterial",
    "MarketingAsset",
    "SoftwareRelease",
    "CATALOG",
    "ContentSpec",
    "get_spec",
    "ContentService",
]
