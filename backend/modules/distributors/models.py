"""
Distributor account data models.

Distributors are user_profiles rows with role distributor. An invited
account stays pending until its holder sets a password.
"""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, EmailStr, Field, field_validator

from modules.auth.models import ProfileStatus
from shared.models import UserRole


class CompanyRole(str, Enum):
    """Role of a user inside their distributor company."""

    ADMIN = "admin"
    MANAGER = "manager"
    USER = "user"


class Distributor(BaseModel):
    id: str
    email: Optional[str] = None
    full_name: Optional[str] = None
    company_name: Optional[str] = None
    role: UserRole = UserRole.DISTRIBUTOR
    status: ProfileStatus = ProfileStatus.PENDING
    territory: Optional[str] = None
    account_type: Optional[str] = None
    distributor_id: Optional[str] = None
    company_role: Optional[CompanyRole] = None
    invited_at: Optional[datetime] = None
    accepted_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"extra": "ignore"}


class DistributorFilters(BaseModel):
    statuses: list[ProfileStatus] = Field(default_factory=list)
    territories: list[str] = Field(default_factory=list)
    search: str = ""


class InviteDistributorRequest(BaseModel):
    """A new distributor company, invited by email."""

    email: EmailStr
    full_name: Optional[str] = None
    company_name: Optional[str] = None
    territory: Optional[str] = None
    account_type: Optional[str] = None


class InviteCompanyUserRequest(BaseModel):
    """A further user of an existing distributor company."""

    email: EmailStr
    full_name: str = Field(..., min_length=1)
    company_role: CompanyRole = CompanyRole.USER


class UpdateDistributorRequest(BaseModel):
    """Partial update; fields left unset are not touched."""

    full_name: Optional[str] = None
    company_name: Optional[str] = None
    territory: Optional[str] = None
    account_type: Optional[str] = None
    status: Optional[ProfileStatus] = None

    @field_validator("status")
    @classmethod
    def not_cleared(cls, value):
        if value is None:
            raise ValueError("cannot be cleared")
        return value


class DistributorStats(BaseModel):
    total: int = 0
    active: int = 0
    pending: int = 0
    inactive: int = 0
