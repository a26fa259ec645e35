"""
Customer tracking data models.
"""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, field_validator


class CustomerStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    PROSPECT = "prospect"


class Customer(BaseModel):
    """Row of the customers table, with its device count when listed."""

    id: str
    distributor_id: str
    company_name: str
    contact_name: Optional[str] = None
    contact_email: Optional[str] = None
    contact_phone: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    country: Optional[str] = None
    postal_code: Optional[str] = None
    status: CustomerStatus = CustomerStatus.PROSPECT
    internal_notes: Optional[str] = None
    created_by: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    device_count: int = 0

    model_config = {"extra": "ignore"}


class CreateCustomerRequest(BaseModel):
    """
    New customer.

    distributor_id is required from admins and ignored for distributors,
    whose own distributor is always used.
    """

    company_name: str = Field(..., min_length=1)
    distributor_id: Optional[str] = None
    contact_name: Optional[str] = None
    contact_email: Optional[str] = None
    contact_phone: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    country: Optional[str] = None
    postal_code: Optional[str] = None
    status: Optional[CustomerStatus] = None
    internal_notes: Optional[str] = None


class UpdateCustomerRequest(BaseModel):
    """
    Partial update; fields left unset are not touched.

    Contact fields and notes may be cleared with an explicit null;
    company name and status may not.
    """

    company_name: Optional[str] = Field(None, min_length=1)
    contact_name: Optional[str] = None
    contact_email: Optional[str] = None
    contact_phone: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    country: Optional[str] = None
    postal_code: Optional[str] = None
    status: Optional[CustomerStatus] = None
    internal_notes: Optional[str] = None

    @field_validator("company_name", "status")
    @classmethod
    def not_cleared(cls, value):
        if value is None:
            raise ValueError("cannot be cleared")
        return value


class CustomerStats(BaseModel):
    total: int = 0
    active: int = 0
    inactive: int = 0
    prospect: int = 0
    by_country: dict[str, int] = Field(default_factory=dict)
