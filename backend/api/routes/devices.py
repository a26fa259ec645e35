"""
Installed device endpoints.

Distributors see and manage only the devices of their own customers.
A device of another distributor answers 404, like a missing one.
"""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from shared.models import PortalUser
from modules.devices.models import (
    CreateDeviceRequest,
    Device,
    DeviceStats,
    LinkProductRequest,
    UpdateDeviceRequest,
)
from modules.devices.exceptions import DeviceAccessDeniedError
from modules.devices.service import WARRANTY_WINDOW_DAYS, DeviceService
from ..dependencies import get_device_service
from ..middleware.auth import get_portal_user

router = APIRouter()

DEVICE_NOT_FOUND = "Device not found"


@router.get("", response_model=list[Device])
async def list_devices(
    customer_id: Optional[str] = Query(default=None),
    distributor_id: Optional[str] = Query(default=None),
    user: PortalUser = Depends(get_portal_user),
    service: DeviceService = Depends(get_device_service),
) -> list[Device]:
    """List devices ordered by name; admins may narrow with ?distributor_id=."""
    return await service.list_devices(user, customer_id, distributor_id)


@router.post("", response_model=Device, status_code=201)
async def create_device(
    request: CreateDeviceRequest,
    user: PortalUser = Depends(get_portal_user),
    service: DeviceService = Depends(get_device_service),
) -> Device:
    return await service.create_device(request, user)


@router.get("/stats", response_model=DeviceStats)
async def device_stats(
    customer_id: Optional[str] = Query(default=None),
    distributor_id: Optional[str] = Query(default=None),
    user: PortalUser = Depends(get_portal_user),
    service: DeviceService = Depends(get_device_service),
) -> DeviceStats:
    """Counts by status and model, plus warranties ending within 90 days."""
    return await service.get_stats(user, customer_id, distributor_id)


@router.get("/search", response_model=list[Device])
async def search_devices(
    q: str = Query(default=""),
    customer_id: Optional[str] = Query(default=None),
    user: PortalUser = Depends(get_portal_user),
    service: DeviceService = Depends(get_device_service),
) -> list[Device]:
    return await service.search_devices(q, user, customer_id)


@router.get("/expiring-warranty", response_model=list[Device])
async def expiring_warranty(
    days: int = Query(default=WARRANTY_WINDOW_DAYS, ge=1, le=3650),
    customer_id: Optional[str] = Query(default=None),
    user: PortalUser = Depends(get_portal_user),
    service: DeviceService = Depends(get_device_service),
) -> list[Device]:
    return await service.list_expiring_warranty(user, days, customer_id)


@router.get("/serial/{serial_number}", response_model=Device)
async def get_device_by_serial(
    serial_number: str,
    user: PortalUser = Depends(get_portal_user),
    service: DeviceService = Depends(get_device_service),
) -> Device:
    try:
        return await service.get_device_by_serial(serial_number, user)
    except DeviceAccessDeniedError:
        raise HTTPException(status_code=404, detail=DEVICE_NOT_FOUND)


@router.get("/{device_id}", response_model=Device)
async def get_device(
    device_id: str,
    user: PortalUser = Depends(get_portal_user),
    service: DeviceService = Depends(get_device_service),
) -> Device:
    try:
        return await service.get_device(device_id, user)
    except DeviceAccessDeniedError:
        raise HTTPException(status_code=404, detail=DEVICE_NOT_FOUND)


@router.patch("/{device_id}", response_model=Device)
async def update_device(
    device_id: str,
    request: UpdateDeviceRequest,
    user: PortalUser = Depends(get_portal_user),
    service: DeviceService = Depends(get_device_service),
) -> Device:
    try:
        return await service.update_device(device_id, request, user)
    except DeviceAccessDeniedError:
        raise HTTPException(status_code=404, detail=DEVICE_NOT_FOUND)


@router.delete("/{device_id}", status_code=204)
async def delete_device(
    device_id: str,
    user: PortalUser = Depends(get_portal_user),
    service: DeviceService = Depends(get_device_service),
) -> None:
    """Delete a device and, through the database cascade, its documents."""
    try:
        await service.delete_device(device_id, user)
    except DeviceAccessDeniedError:
        raise HTTPException(status_code=404, detail=DEVICE_NOT_FOUND)


@router.put("/{device_id}/product", response_model=Device)
async def link_product(
    device_id: str,
    request: LinkProductRequest,
    user: PortalUser = Depends(get_portal_user),
    service: DeviceService = Depends(get_device_service),
) -> Device:
    try:
        return await service.link_product(device_id, request.product_id, user)
    except DeviceAccessDeniedError:
        raise HTTPException(status_code=404, detail=DEVICE_NOT_FOUND)


@router.delete("/{device_id}/product", response_model=Device)
async def unlink_product(
    device_id: str,
    user: PortalUser = Depends(get_portal_user),
    service: DeviceService = Depends(get_device_service),
) -> Device:
    try:
        return await service.unlink_product(device_id, user)
    except DeviceAccessDeniedError:
        raise HTTPException(status_code=404, detail=DEVICE_NOT_FOUND)
