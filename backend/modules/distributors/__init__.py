"""
Distributor account management module (admin only).

Public API:
- DistributorService: List, update, invite, resend invitations, activate and deactivate
- Distributor, DistributorStats: Data models
- Distributor exceptions: DistributorNotFoundError, DistributorExistsError, InvitationError
"""

from .models import (
    CompanyRole,
    Distributor,
    DistributorFilters,
    DistributorStats,
    InviteCompanyUserRequest,
    InviteDistributorRequest,
    UpdateDistributorRequest,
)
from .service import DistributorService
from .exceptions import DistributorExistsError, DistributorNotFoundError, InvitationError

__all__ = [
    "CompanyRole",
    "Distributor",
    "DistributorFilters",
    "DistributorStats",
    "InviteCompanyUserRequest",
    "InviteDistributorRequest",
    "UpdateDistributorRequest",
    "DistributorService",
    "DistributorNotFoundError",
    "DistributorExistsError",
    "InvitationError",
]
