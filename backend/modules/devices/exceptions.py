"""
Device module exceptions.
"""

from shared.exceptions import AuthorizationError, NotFoundError, ValidationError


class DeviceNotFoundError(NotFoundError):
    """Raised when a device doesn't exist."""

    def __init__(self, device_ref: str):
        super().__init__(
            f"Device not found: {device_ref}",
            code="DEVICE_NOT_FOUND",
            details={"device": device_ref},
        )


class DeviceAccessDeniedError(AuthorizationError):
    """Raised when a distributor touches a device of another distributor's customer."""

    def __init__(self, device_id: str):
        super().__init__(
            "You don't have access to this device",
            code="DEVICE_ACCESS_DENIED",
            details={"device_id": device_id},
        )


class DuplicateSerialError(ValidationError):
    """Raised when a serial number is already registered to another device."""

    def __init__(self, serial_number: str):
        super().__init__(
            f"A device with serial number {serial_number} already exists",
            code="DUPLICATE_SERIAL",
            details={"serial_number": serial_number},
        )


class ProductNotFoundError(NotFoundError):
    def __init__(self, product_id: str):
        super().__init__(
            f"Product not found: {product_id}",
            code="PRODUCT_NOT_FOUND",
            details={"product_id": product_id},
        )
