"""
Customer tracking endpoints.

Distributors see and manage only their own customers. Admins see all of
them and may narrow to one distributor with ?distributor_id=.
"""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from shared.models import PortalUser
from modules.customers.models import (
    CreateCustomerRequest,
    Customer,
    CustomerStats,
    UpdateCustomerRequest,
)
from modules.customers.exceptions import CustomerAccessDeniedError
from modules.customers.service import CustomerService
from ..dependencies import get_customer_service
from ..middleware.auth import get_portal_user

router = APIRouter()


@router.get("", response_model=list[Customer])
async def list_customers(
    search: str = Query(default=""),
    distributor_id: Optional[str] = Query(default=None),
    user: PortalUser = Depends(get_portal_user),
    service: CustomerService = Depends(get_customer_service),
) -> list[Customer]:
    """List customers with their device counts, ordered by company name."""
    return await service.list_customers(user, distributor_id, search)


@router.post("", response_model=Customer, status_code=201)
async def create_customer(
    request: CreateCustomerRequest,
    user: PortalUser = Depends(get_portal_user),
    service: CustomerService = Depends(get_customer_service),
) -> Customer:
    return await service.create_customer(request, user)


@router.get("/stats", response_model=CustomerStats)
async def customer_stats(
    distributor_id: Optional[str] = Query(default=None),
    user: PortalUser = Depends(get_portal_user),
    service: CustomerService = Depends(get_customer_service),
) -> CustomerStats:
    """Counts by status and by country."""
    return await service.get_stats(user, distributor_id)


@router.get("/{customer_id}", response_model=Customer)
async def get_customer(
    customer_id: str,
    user: PortalUser = Depends(get_portal_user),
    service: CustomerService = Depends(get_customer_service),
) -> Customer:
    try:
        return await service.get_customer(customer_id, user)
    except CustomerAccessDeniedError:
        raise HTTPException(status_code=404, detail="Customer not found")


@router.patch("/{customer_id}", response_model=Customer)
async def update_customer(
    customer_id: str,
    request: UpdateCustomerRequest,
    user: PortalUser = Depends(get_portal_user),
    service: CustomerService = Depends(get_customer_service),
) -> Customer:
    try:
        return await service.update_customer(customer_id, request, user)
    except CustomerAccessDeniedError:
        raise HTTPException(status_code=404, detail="Customer not found")


@router.delete("/{customer_id}", status_code=204)
async def delete_customer(
    customer_id: str,
    user: PortalUser = Depends(get_portal_user),
    service: CustomerService = Depends(get_customer_service),
) -> None:
    """Delete a customer and, through the database cascade, its devices."""
    try:
        await service.delete_customer(customer_id, user)
    except CustomerAccessDeniedError:
        raise HTTPException(status_code=404, detail="Customer not found")
