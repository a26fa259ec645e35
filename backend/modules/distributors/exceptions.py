"""
Distributor management exceptions.
"""

from shared.exceptions import ExternalServiceError, NotFoundError, ValidationError


class DistributorNotFoundError(NotFoundError):
    """Raised when no distributor profile has the given id."""

    def __init__(self, distributor_id: str):
        super().__init__(
            f"Distributor not found: {distributor_id}",
            code="DISTRIBUTOR_NOT_FOUND",
            details={"distributor_id": distributor_id},
        )


class DistributorExistsError(ValidationError):
    """Raised when inviting an email that already has a profile."""

    def __init__(self, email: str):
        super().__init__(
            "A user with this email already exists",
            code="DISTRIBUTOR_EXISTS",
            details={"email": email},
        )


class InvitationError(ExternalServiceError):
    """The auth provider refused to send an invitation or recovery email."""

    def __init__(self, email: str, reason: str):
        super().__init__(
            f"Failed to invite {email}: {reason}",
            service="supabase-auth",
            code="INVITATION_FAILED",
            details={"email": email},
        )
