"""
Password lifecycle endpoints.

Back the set-password screen (after an invitation) and the
reset-password screen (after a recovery link).
"""

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from modules.passwords.models import (
    PasswordChangeResult,
    PasswordCheckRequest,
    PasswordFlow,
    PasswordRequirements,
    PasswordSubmission,
    RecoveryLinkStatus,
)
from modules.passwords.policy import validate
from modules.passwords.service import PasswordService
from ..dependencies import get_password_service

router = APIRouter()


class PasswordValidationResponse(BaseModel):
    requirements: PasswordRequirements
    is_valid: bool


@router.post("/password/validate", response_model=PasswordValidationResponse)
async def validate_password(request: PasswordCheckRequest) -> PasswordValidationResponse:
    """Live policy check while the user types. Never touches the network."""
    requirements = validate(request.password)
    return PasswordValidationResponse(requirements=requirements, is_valid=requirements.is_valid)


@router.post("/set-password", response_model=PasswordChangeResult)
async def set_password(
    request: PasswordSubmission,
    service: PasswordService = Depends(get_password_service),
) -> PasswordChangeResult:
    """
    Choose a password after accepting an invitation.

    Activates a pending account, then signs the user out so they sign in
    with the new password.
    """
    return await service.submit(request.password, request.confirm_password, PasswordFlow.SET)


@router.get("/reset-password", response_model=RecoveryLinkStatus)
async def check_reset_link(
    service: PasswordService = Depends(get_password_service),
) -> RecoveryLinkStatus:
    """Check the recovery session before showing the reset form."""
    return await service.check_link()


@router.post("/reset-password", response_model=PasswordChangeResult)
async def reset_password(
    request: PasswordSubmission,
    service: PasswordService = Depends(get_password_service),
) -> PasswordChangeResult:
    """Replace a forgotten password, then sign out."""
    return await service.submit(request.password, request.confirm_password, PasswordFlow.RESET)
