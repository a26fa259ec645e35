"""
Installed device tracking module.

Public API:
- DeviceService: List, search, create, update, delete, product links and stats
- Device, DeviceStats: Data models
- Device exceptions: DeviceNotFoundError, DeviceAccessDeniedError, DuplicateSerialError
"""

from .models import (
    Device,
    DeviceStatus,
    DeviceStats,
    CreateDeviceRequest,
    UpdateDeviceRequest,
)
from .service import DeviceService
from .exceptions import (
    DeviceAccessDeniedError,
    DeviceNotFoundError,
    DuplicateSerialError,
    ProductNotFoundError,
)

__all__ = [
    "Device",
    "DeviceStatus",
    "DeviceStats",
    "CreateDeviceRequest",
    "UpdateDeviceRequest",
    "DeviceService",
    "DeviceNotFoundError",
    "DeviceAccessDeniedError",
    "DuplicateSerialError",
    "ProductNotFoundError",
]
