"""
Installed device data models.
"""

from datetime import date, datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, field_validator


class DeviceStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    MAINTENANCE = "maintenance"
    DECOMMISSIONED = "decommissioned"


class Device(BaseModel):
    """
    Row of the devices table.

    customer_name and distributor_id come from the embedded customer;
    document_count from the embedded count on device_documents.
    """

    id: str
    customer_id: str
    serial_number: str
    device_name: Optional[str] = None
    device_model: Optional[str] = None
    product_id: Optional[str] = None
    product_name: Optional[str] = None
    installation_date: Optional[date] = None
    warranty_expiry: Optional[date] = None
    location_description: Optional[str] = None
    status: DeviceStatus = DeviceStatus.ACTIVE
    internal_notes: Optional[str] = None
    created_by: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    customer_name: Optional[str] = None
    distributor_id: Optional[str] = None
    document_count: int = 0

    model_config = {"extra": "ignore"}


class CreateDeviceRequest(BaseModel):
    customer_id: str = Field(..., min_length=1)
    serial_number: str = Field(..., min_length=1)
    device_name: str = Field(..., min_length=1)
    device_model: Optional[str] = None
    product_id: Optional[str] = None
    installation_date: Optional[date] = None
    warranty_expiry: Optional[date] = None
    location_description: Optional[str] = None
    status: Optional[DeviceStatus] = None
    internal_notes: Optional[str] = None


class UpdateDeviceRequest(BaseModel):
    """
    Partial update; fields left unset are not touched.

    The product link has its own endpoints so product_name always
    matches the linked product.
    """

    serial_number: Optional[str] = Field(None, min_length=1)
    device_name: Optional[str] = Field(None, min_length=1)
    device_model: Optional[str] = None
    installation_date: Optional[date] = None
    warranty_expiry: Optional[date] = None
    location_description: Optional[str] = None
    status: Optional[DeviceStatus] = None
    internal_notes: Optional[str] = None

    @field_validator("serial_number", "device_name", "status")
    @classmethod
    def not_cleared(cls, value):
        if value is None:
            raise ValueError("cannot be cleared")
        return value


class LinkProductRequest(BaseModel):
    product_id: str = Field(..., min_length=1)


class DeviceStats(BaseModel):
    total: int = 0
    active: int = 0
    inactive: int = 0
    maintenance: int = 0
    decommissioned: int = 0
    by_model: dict[str, int] = Field(default_factory=dict)
    warranty_expiring_soon: int = 0
