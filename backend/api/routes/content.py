"""
Content library endpoints.

Distributor browsing and downloads under /portal, admin management
under /admin. The library is chosen by the {kind} path segment:
documents, training, marketing or software.
"""

from typing import Any, Optional

from fastapi import APIRouter, Body, Depends, Query, Request

from shared.models import PortalUser
from modules.content.models import (
    ContentFilters,
    ContentKind,
    ContentListResponse,
    ContentQuery,
    DownloadResult,
    SortDirection,
    SortField,
)
from modules.content.service import ContentService
from ..dependencies import get_content_service
from ..middleware.auth import get_portal_user, require_admin

router = APIRouter()


def get_content_query(
    search: str = Query(default=""),
    product: list[str] = Query(default=[]),
    category: list[str] = Query(default=[]),
    status: list[str] = Query(default=[]),
    language: list[str] = Query(default=[]),
    sort: Optional[SortField] = Query(default=None),
    direction: SortDirection = Query(default=SortDirection.ASC),
) -> ContentQuery:
    """Build a list query from repeated query parameters."""
    return ContentQuery(
        filters=ContentFilters(
            search=search,
            products=product,
            categories=category,
            statuses=status,
            languages=language,
        ),
        sort_field=sort,
        sort_direction=direction,
    )


async def _list(
    kind: ContentKind,
    query: ContentQuery,
    user: PortalUser,
    service: ContentService,
) -> ContentListResponse:
    items = await service.list_items(kind, query, user)
    return ContentListResponse(
        kind=kind,
        items=[item.model_dump(mode="json") for item in items],
        total=len(items),
    )


# ============================================
# Distributor portal
# ============================================

@router.get("/portal/{kind}", response_model=ContentListResponse)
async def list_published(
    kind: ContentKind,
    query: ContentQuery = Depends(get_content_query),
    user: PortalUser = Depends(get_portal_user),
    service: ContentService = Depends(get_content_service),
) -> ContentListResponse:
    """
    List a library.

    Distributors only see published rows; a status filter cannot widen
    that.
    """
    return await _list(kind, query, user, service)


@router.get("/portal/{kind}/{item_id}")
async def get_item(
    kind: ContentKind,
    item_id: str,
    user: PortalUser = Depends(get_portal_user),
    service: ContentService = Depends(get_content_service),
) -> dict[str, Any]:
    item = await service.get(kind, item_id, user)
    return item.model_dump(mode="json")


@router.post("/portal/{kind}/{item_id}/download", response_model=DownloadResult)
async def download_item(
    kind: ContentKind,
    item_id: str,
    request: Request,
    user: PortalUser = Depends(get_portal_user),
    service: ContentService = Depends(get_content_service),
) -> DownloadResult:
    """Count a download and return the file URL to open."""
    return await service.record_download(
        kind,
        item_id,
        user,
        user_agent=request.headers.get("user-agent"),
    )


# ============================================
# Admin management
# ============================================

@router.get("/admin/{kind}", response_model=ContentListResponse)
async def admin_list(
    kind: ContentKind,
    query: ContentQuery = Depends(get_content_query),
    user: PortalUser = Depends(require_admin),
    service: ContentService = Depends(get_content_service),
) -> ContentListResponse:
    """List a library including drafts and archived rows."""
    return await _list(kind, query, user, service)


@router.post("/admin/{kind}", status_code=201)
async def admin_create(
    kind: ContentKind,
    data: dict[str, Any] = Body(...),
    user: PortalUser = Depends(require_admin),
    service: ContentService = Depends(get_content_service),
) -> dict[str, Any]:
    """
    Create a row.

    The body is checked against the library's own create model, so the
    accepted fields differ per kind.
    """
    item = await service.create(kind, data, user)
    return item.model_dump(mode="json")


@router.patch("/admin/{kind}/{item_id}")
async def admin_update(
    kind: ContentKind,
    item_id: str,
    data: dict[str, Any] = Body(...),
    user: PortalUser = Depends(require_admin),
    service: ContentService = Depends(get_content_service),
) -> dict[str, Any]:
    item = await service.update(kind, item_id, data, user)
    return item.model_dump(mode="json")


@router.delete("/admin/{kind}/{item_id}", status_code=204)
async def admin_delete(
    kind: ContentKind,
    item_id: str,
    user: PortalUser = Depends(require_admin),
    service: ContentService = Depends(get_content_service),
) -> None:
    await service.delete(kind, item_id, user)
