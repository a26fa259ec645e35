"""
Password lifecycle exceptions.

Both are raised before any network call is made.
"""

from shared.exceptions import ValidationError
from .models import PasswordRequirements

POLICY_MESSAGES = {
    "min_length": "Password must be at least 8 characters",
    "has_upper": "Password must contain an uppercase letter",
    "has_lower": "Password must contain a lowercase letter",
    "has_digit": "Password must contain a number",
}


class PasswordMismatchError(ValidationError):
    """Raised when the password and its confirmation differ."""

    def __init__(self):
        super().__init__("Passwords do not match", code="PASSWORD_MISMATCH")


class PasswordPolicyViolationError(ValidationError):
    """Raised when a password fails one or more policy rules."""

    def __init__(self, requirements: PasswordRequirements):
        failures = requirements.failures
        super().__init__(
            POLICY_MESSAGES[failures[0]] if failures else "Password does not meet requirements",
            code="PASSWORD_POLICY_VIOLATION",
            details={"requirements": requirements.model_dump(), "failed": failures},
        )
        self.requirements = requirements
