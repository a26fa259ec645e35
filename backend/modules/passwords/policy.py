"""Password policy."""

import re

from .models import PasswordRequirements

MIN_PASSWORD_LENGTH = 8

_UPPER = re.compile(r"[A-Z]")
_LOWER = re.compile(r"[a-z]")
_DIGIT = re.compile(r"[0-9]")


def validate(password: str) -> PasswordRequirements:
    """Check a candidate password against every rule. Pure, never raises."""
    return PasswordRequirements(
        min_length=len(password) >= MIN_PASSWORD_LENGTH,
        has_upper=_UPPER.search(password) is not None,
        has_lower=_LOWER.search(password) is not None,
        has_digit=_DIGIT.search(password) is not None,
    )
