"""
Customer tracking module.

Public API:
- CustomerService: List, search, create, update, delete and stats
- Customer, CustomerStats: Data models
- Customer exceptions: CustomerNotFoundError, CustomerAccessDeniedError
"""

from .models import (
    Customer,
    CustomerStatus,
    CustomerStats,
    CreateCustomerRequest,
    UpdateCustomerRequest,
)
from .service import CustomerService
from .exceptions import CustomerNotFoundError, CustomerAccessDeniedError

__all__ = [
    "Customer",
    "CustomerStatus",
    "CustomerStats",
    "CreateCustomerRequest",
    "UpdateCustomerRequest",
    "CustomerService",
    "CustomerNotFoundError",
    "CustomerAccessDeniedError",
]
