"""
Distributor account management endpoints (admin only).
"""

from fastapi import APIRouter, Depends, Query

from shared.models import PortalUser
from modules.auth.models import ProfileStatus
from modules.distributors.models import (
    Distributor,
    DistributorFilters,
    DistributorStats,
    InviteCompanyUserRequest,
    InviteDistributorRequest,
    UpdateDistributorRequest,
)
from modules.distributors.service import DistributorService
from ..dependencies import get_distributor_service
from ..middleware.auth import require_admin

router = APIRouter()


def get_distributor_filters(
    search: str = Query(default=""),
    status: list[ProfileStatus] = Query(default=[]),
    territory: list[str] = Query(default=[]),
) -> DistributorFilters:
    return DistributorFilters(statuses=status, territories=territory, search=search)


@router.get("", response_model=list[Distributor])
async def list_distributors(
    filters: DistributorFilters = Depends(get_distributor_filters),
    admin: PortalUser = Depends(require_admin),
    service: DistributorService = Depends(get_distributor_service),
) -> list[Distributor]:
    """List distributor accounts, newest first."""
    return await service.list_distributors(filters)


@router.post("", response_model=Distributor, status_code=201)
async def invite_distributor(
    request: InviteDistributorRequest,
    admin: PortalUser = Depends(require_admin),
    service: DistributorService = Depends(get_distributor_service),
) -> Distributor:
    """Create a pending distributor account and email the invitation."""
    return await service.invite_distributor(request, admin)


@router.get("/stats", response_model=DistributorStats)
async def distributor_stats(
    admin: PortalUser = Depends(require_admin),
    service: DistributorService = Depends(get_distributor_service),
) -> DistributorStats:
    return await service.get_stats()


@router.get("/{distributor_id}", response_model=Distributor)
async def get_distributor(
    distributor_id: str,
    admin: PortalUser = Depends(require_admin),
    service: DistributorService = Depends(get_distributor_service),
) -> Distributor:
    return await service.get_distributor(distributor_id)


@router.patch("/{distributor_id}", response_model=Distributor)
async def update_distributor(
    distributor_id: str,
    request: UpdateDistributorRequest,
    admin: PortalUser = Depends(require_admin),
    service: DistributorService = Depends(get_distributor_service),
) -> Distributor:
    return await service.update_distributor(distributor_id, request)


@router.post("/{distributor_id}/users", response_model=Distributor, status_code=201)
async def invite_company_user(
    distributor_id: str,
    request: InviteCompanyUserRequest,
    admin: PortalUser = Depends(require_admin),
    service: DistributorService = Depends(get_distributor_service),
) -> Distributor:
    """Invite another user into this distributor's company."""
    return await service.invite_company_user(distributor_id, request, admin)


@router.post("/{distributor_id}/resend-invitation", response_model=Distributor)
async def resend_invitation(
    distributor_id: str,
    admin: PortalUser = Depends(require_admin),
    service: DistributorService = Depends(get_distributor_service),
) -> Distributor:
    return await service.resend_invitation(distributor_id)


@router.post("/{distributor_id}/activate", response_model=Distributor)
async def activate_distributor(
    distributor_id: str,
    admin: PortalUser = Depends(require_admin),
    service: DistributorService = Depends(get_distributor_service),
) -> Distributor:
    return await service.activate(distributor_id)


@router.post("/{distributor_id}/deactivate", response_model=Distributor)
async def deactivate_distributor(
    distributor_id: str,
    admin: PortalUser = Depends(require_admin),
    service: DistributorService = Depends(get_distributor_service),
) -> Distributor:
    return await service.deactivate(distributor_id)
