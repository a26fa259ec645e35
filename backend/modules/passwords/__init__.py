"""
Password lifecycle module.

Public API:
- validate: Pure password policy check
- PasswordService: Set-password and reset-password screens
- Password exceptions: PasswordMismatchError, PasswordPolicyViolationError
"""

from .models import (
    PasswordRequirements,
    PasswordFlow,
    PasswordCheckRequest,
    PasswordSubmission,
    PasswordChangeResult,
    RecoveryLinkStatus,
)
from .policy import validate, MIN_PASSWORD_LENGTH
from .service import PasswordService
from .exceptions import PasswordMismatchError, PasswordPolicyViolationError

__all__ = [
    "PasswordRequirements",
    "PasswordFlow",
    "PasswordCheckRequest",
    "PasswordSubmission",
    "PasswordChangeResult",
    "RecoveryLinkStatus",
    "validate",
    "MIN_PASSWORD_LENGTH",
    "PasswordService",
    "PasswordMismatchError",
    "PasswordPolicyViolationError",
]
