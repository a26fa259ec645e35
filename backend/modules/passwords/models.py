"""
Password lifecycle data models.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class PasswordRequirements(BaseModel):
    """Which password policy rules a candidate satisfies."""

    min_length: bool = Field(..., description="At least the minimum number of characters")
    has_upper: bool = Field(..., description="Contains an uppercase letter")
    has_lower: bool = Field(..., description="Contains a lowercase letter")
    has_digit: bool = Field(..., description="Contains a digit")

    @property
    def is_valid(self) -> bool:
        return self.min_length and self.has_upper and self.has_lower and self.has_digit

    @property
    def failures(self) -> list[str]:
        """Names of the rules that are not satisfied, in display order."""
        return [
            name
            for name in ("min_length", "has_upper", "has_lower", "has_digit")
            if not getattr(self, name)
        ]


class PasswordFlow(str, Enum):
    """Which screen the password is being submitted from."""

    SET = "set"        # Invitation acceptance
    RESET = "reset"    # Recovery link


class PasswordCheckRequest(BaseModel):
    """Live validation of a candidate password."""

    password: str = ""


class PasswordSubmission(BaseModel):
    """New password plus its confirmation."""

    password: str
    confirm_password: str


class PasswordChangeResult(BaseModel):
    """Where to go once the new password is committed."""

    redirect_to: str
    redirect_after: float
    activated: bool = Field(default=False, description="A pending profile was activated")
    message: str = "Password updated successfully. Please sign in with your new password."


class RecoveryLinkStatus(BaseModel):
    """Result of checking the reset screen's session."""

    valid: bool
    email: Optional[str] = None
