"""
User-related endpoints.

Provides the signed-in user's portal profile.
"""

from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from shared.models import PortalUser
from ..middleware.auth import get_portal_user

router = APIRouter()


class UserProfileResponse(BaseModel):
    """User profile response model."""

    id: str
    email: str
    role: str
    full_name: Optional[str] = None
    distributor_id: Optional[str] = None
    home_route: str


@router.get("/me", response_model=UserProfileResponse)
async def get_current_user_profile(
    user: PortalUser = Depends(get_portal_user),
) -> UserProfileResponse:
    """
    Get the current user's profile.

    Requires an active admin or distributor account.
    """
    return UserProfileResponse(
        id=user.id,
        email=user.email,
        role=user.role.value,
        full_name=user.full_name,
        distributor_id=user.distributor_id,
        home_route="/admin/dashboard" if user.is_admin else "/portal",
    )
