"""
Customer module exceptions.
"""

from shared.exceptions import AuthorizationError, NotFoundError


class CustomerNotFoundError(NotFoundError):
    """Raised when a customer doesn't exist."""

    def __init__(self, customer_id: str):
        super().__init__(
            f"Customer not found: {customer_id}",
            code="CUSTOMER_NOT_FOUND",
            details={"customer_id": customer_id},
        )


class CustomerAccessDeniedError(AuthorizationError):
    """Raised when a distributor touches another distributor's customer."""

    def __init__(self, customer_id: str):
        super().__init__(
            "You don't have access to this customer",
            code="CUSTOMER_ACCESS_DENIED",
            details={"customer_id": customer_id},
        )
