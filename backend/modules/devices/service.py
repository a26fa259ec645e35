"""
Device service.

Devices belong to a customer, and through it to a distributor.
Distributors manage the devices of their own customers; admins see
every device and may narrow to one distributor or customer.
"""

import logging
from collections import Counter
from datetime import date, timedelta
from typing import Any, Optional

from supabase import Client

from shared.config import Settings, get_settings
from shared.exceptions import PermissionDeniedError, ValidationError
from shared.models import PortalUser
from shared.repository import run_with_timeout
from modules.customers.exceptions import CustomerAccessDeniedError, CustomerNotFoundError
from modules.customers.repository import CustomerRepository
from .models import (
    CreateDeviceRequest,
    Device,
    DeviceStats,
    DeviceStatus,
    UpdateDeviceRequest,
)
from .repository import DEVICES_TABLE, DeviceRepository
from .exceptions import (
    DeviceAccessDeniedError,
    DeviceNotFoundError,
    DuplicateSerialError,
    ProductNotFoundError,
)

logger = logging.getLogger(__name__)

# Warranties ending within this many days count as expiring soon
WARRANTY_WINDOW_DAYS = 90


def _expiry(row: dict[str, Any]) -> Optional[date]:
    value = row.get("warranty_expiry")
    if not value:
        return None
    return date.fromisoformat(str(value)[:10])


class DeviceService:
    """Installed device tracking backed by Supabase."""

    def __init__(self, supabase_client: Client, settings: Optional[Settings] = None):
        self._repository = DeviceRepository(supabase_client)
        self._customers = CustomerRepository(supabase_client)
        self._settings = settings or get_settings()

    def _scope(self, user: PortalUser, distributor_id: Optional[str] = None) -> Optional[str]:
        """Distributor filter for a caller: their own, or the admin's choice."""
        if user.is_admin:
            return distributor_id
        return user.distributor_id or user.id

    def _check_access(self, user: PortalUser, device: Device) -> None:
        if not user.is_admin and device.distributor_id != self._scope(user):
            raise DeviceAccessDeniedError(device.id)

    def _check_customer(self, customer_id: str, user: PortalUser) -> None:
        customer = self._customers.get_by_id(customer_id)
        if customer is None:
            raise CustomerNotFoundError(customer_id)
        if not user.is_admin and customer.distributor_id != self._scope(user):
            raise CustomerAccessDeniedError(customer_id)

    def _product_name(self, product_id: str) -> str:
        name = self._repository.get_product_name(product_id)
        if name is None:
            raise ProductNotFoundError(product_id)
        return name

    async def _write(self, operation: str, device_id: str, changes: dict[str, Any]) -> Device:
        device = await run_with_timeout(
            operation,
            lambda: self._repository.update(device_id, changes),
            self._settings.write_timeout_seconds,
        )
        if device is None:
            raise PermissionDeniedError(DEVICES_TABLE, device_id)
        return device

    async def list_devices(
        self,
        user: PortalUser,
        customer_id: Optional[str] = None,
        distributor_id: Optional[str] = None,
    ) -> list[Device]:
        """Devices with customer names and document counts, ordered by name."""
        return self._repository.list_devices(self._scope(user, distributor_id), customer_id)

    async def search_devices(
        self,
        search: str,
        user: PortalUser,
        customer_id: Optional[str] = None,
    ) -> list[Device]:
        return self._repository.search(search, self._scope(user), customer_id)

    async def list_expiring_warranty(
        self,
        user: PortalUser,
        days: int = WARRANTY_WINDOW_DAYS,
        customer_id: Optional[str] = None,
    ) -> list[Device]:
        """Devices whose warranty ends within the next `days` days."""
        today = date.today()
        return self._repository.list_warranty_expiring(
            today, today + timedelta(days=days), self._scope(user), customer_id
        )

    async def get_device(self, device_id: str, user: PortalUser) -> Device:
        device = self._repository.get_by_id(device_id)
        if device is None:
            raise DeviceNotFoundError(device_id)
        self._check_access(user, device)
        return device

    async def get_device_by_serial(self, serial_number: str, user: PortalUser) -> Device:
        device = self._repository.get_by_serial(serial_number)
        if device is None:
            raise DeviceNotFoundError(serial_number)
        self._check_access(user, device)
        return device

    async def create_device(self, request: CreateDeviceRequest, user: PortalUser) -> Device:
        """
        Register a device for one of the caller's customers.

        Serial numbers are unique across all devices. New devices default
        to active and record who created them.
        """
        self._check_customer(request.customer_id, user)
        if self._repository.serial_taken(request.serial_number):
            raise DuplicateSerialError(request.serial_number)

        data = request.model_dump(mode="json", exclude_none=True)
        data["status"] = (request.status or DeviceStatus.ACTIVE).value
        data["created_by"] = user.id
        if request.product_id:
            data["product_name"] = self._product_name(request.product_id)

        device = await run_with_timeout(
            "create device",
            lambda: self._repository.create(data),
            self._settings.write_timeout_seconds,
        )
        logger.info("User %s registered device %s (%s)", user.id, device.id, device.serial_number)
        return device

    async def update_device(
        self,
        device_id: str,
        request: UpdateDeviceRequest,
        user: PortalUser,
    ) -> Device:
        device = await self.get_device(device_id, user)

        changes = request.model_dump(mode="json", exclude_unset=True)
        if not changes:
            raise ValidationError("No fields to update")

        serial_number = changes.get("serial_number")
        if serial_number and serial_number != device.serial_number:
            if self._repository.serial_taken(serial_number, exclude_id=device_id):
                raise DuplicateSerialError(serial_number)

        return await self._write("update device", device_id, changes)

    async def delete_device(self, device_id: str, user: PortalUser) -> None:
        """Documents attached to the device go with it through the database's cascade."""
        device = await self.get_device(device_id, user)
        if device.document_count:
            logger.warning("Deleting device %s with %d documents", device_id, device.document_count)

        await run_with_timeout(
            "delete device",
            lambda: self._repository.delete(device_id),
            self._settings.write_timeout_seconds,
        )

    async def link_product(self, device_id: str, product_id: str, user: PortalUser) -> Device:
        """Link a device to a catalogue product, copying the product's name."""
        await self.get_device(device_id, user)
        changes = {"product_id": product_id, "product_name": self._product_name(product_id)}
        return await self._write("link device to product", device_id, changes)

    async def unlink_product(self, device_id: str, user: PortalUser) -> Device:
        await self.get_device(device_id, user)
        changes = {"product_id": None, "product_name": None}
        return await self._write("unlink device from product", device_id, changes)

    async def get_stats(
        self,
        user: PortalUser,
        customer_id: Optional[str] = None,
        distributor_id: Optional[str] = None,
    ) -> DeviceStats:
        rows = self._repository.list_for_stats(self._scope(user, distributor_id), customer_id)
        statuses = Counter(row.get("status") for row in rows)
        models = Counter(row["device_model"] for row in rows if row.get("device_model"))

        today = date.today()
        horizon = today + timedelta(days=WARRANTY_WINDOW_DAYS)
        expiring = 0
        for row in rows:
            expiry = _expiry(row)
            if expiry is not None and today < expiry <= horizon:
                expiring += 1

        return DeviceStats(
            total=len(rows),
            active=statuses[DeviceStatus.ACTIVE.value],
            inactive=statuses[DeviceStatus.INACTIVE.value],
            maintenance=statuses[DeviceStatus.MAINTENANCE.value],
            decommissioned=statuses[DeviceStatus.DECOMMISSIONED.value],
            by_model=dict(models),
            warranty_expiring_soon=expiring,
        )
