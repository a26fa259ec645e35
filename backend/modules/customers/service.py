"""
Customer service.

Distributors manage their own customers; admins see every distributor's
and may narrow to one.
"""

import logging
from collections import Counter
from typing import Optional

from supabase import Client

from shared.config import Settings, get_settings
from shared.exceptions import PermissionDeniedError, ValidationError
from shared.models import PortalUser
from shared.repository import run_with_timeout
from .models import (
    CreateCustomerRequest,
    Customer,
    CustomerStats,
    CustomerStatus,
    UpdateCustomerRequest,
)
from .repository import CUSTOMERS_TABLE, CustomerRepository
from .exceptions import CustomerAccessDeniedError, CustomerNotFoundError

logger = logging.getLogger(__name__)


class CustomerService:
    """Customer tracking backed by Supabase."""

    def __init__(self, supabase_client: Client, settings: Optional[Settings] = None):
        self._repository = CustomerRepository(supabase_client)
        self._settings = settings or get_settings()

    def _scope(self, user: PortalUser, distributor_id: Optional[str] = None) -> Optional[str]:
        """Distributor filter for a caller: their own, or the admin's choice."""
        if user.is_admin:
            return distributor_id
        return user.distributor_id or user.id

    def _check_access(self, user: PortalUser, customer: Customer) -> None:
        if not user.is_admin and customer.distributor_id != self._scope(user):
            raise CustomerAccessDeniedError(customer.id)

    async def list_customers(
        self,
        user: PortalUser,
        distributor_id: Optional[str] = None,
        search: str = "",
    ) -> list[Customer]:
        return self._repository.list_customers(self._scope(user, distributor_id), search)

    async def get_customer(self, customer_id: str, user: PortalUser) -> Customer:
        customer = self._repository.get_by_id(customer_id)
        if customer is None:
            raise CustomerNotFoundError(customer_id)
        self._check_access(user, customer)
        return customer

    async def create_customer(self, request: CreateCustomerRequest, user: PortalUser) -> Customer:
        """New customers default to prospect and record who created them."""
        distributor_id = self._scope(user, request.distributor_id)
        if not distributor_id:
            raise ValidationError("distributor_id is required", details={"field": "distributor_id"})

        data = request.model_dump(mode="json", exclude_none=True)
        data["distributor_id"] = distributor_id
        data["status"] = (request.status or CustomerStatus.PROSPECT).value
        data["created_by"] = user.id

        customer = await run_with_timeout(
            "create customer",
            lambda: self._repository.create(data),
            self._settings.write_timeout_seconds,
        )
        logger.info("User %s created customer %s", user.id, customer.id)
        return customer

    async def update_customer(
        self,
        customer_id: str,
        request: UpdateCustomerRequest,
        user: PortalUser,
    ) -> Customer:
        await self.get_customer(customer_id, user)

        changes = request.model_dump(mode="json", exclude_unset=True)
        if not changes:
            raise ValidationError("No fields to update")

        customer = await run_with_timeout(
            "update customer",
            lambda: self._repository.update(customer_id, changes),
            self._settings.write_timeout_seconds,
        )
        if customer is None:
            raise PermissionDeniedError(CUSTOMERS_TABLE, customer_id)
        return customer

    async def delete_customer(self, customer_id: str, user: PortalUser) -> None:
        """Devices go with the customer through the database's cascade."""
        customer = await self.get_customer(customer_id, user)
        if customer.device_count:
            logger.info("Deleting customer %s with %d devices", customer_id, customer.device_count)

        await run_with_timeout(
            "delete customer",
            lambda: self._repository.delete(customer_id),
            self._settings.write_timeout_seconds,
        )

    async def get_stats(self, user: PortalUser, distributor_id: Optional[str] = None) -> CustomerStats:
        rows = self._repository.list_for_stats(self._scope(user, distributor_id))
        statuses = Counter(row.get("status") for row in rows)
        countries = Counter(row["country"] for row in rows if row.get("country"))
        return CustomerStats(
            total=len(rows),
            active=statuses[CustomerStatus.ACTIVE.value],
            inactive=statuses[CustomerStatus.INACTIVE.value],
            prospect=statuses[CustomerStatus.PROSPECT.value],
            by_country=dict(countries),
        )
