"""
Base repository class for database access.

Provides a common abstraction layer for all repositories, encapsulating
Supabase client access and providing shared utilities for data operations.
"""

import asyncio
import re
from typing import Any, Callable, Generic, Optional, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError
from supabase import Client

from .exceptions import MalformedRowError, NetworkTimeoutError


T = TypeVar("T", bound=BaseModel)
R = TypeVar("R")

# Characters with meaning inside a PostgREST or=(...) filter
_FILTER_SYNTAX = re.compile(r"[,()*%\\]")


class BaseRepository(Generic[T]):
    """
    Base class for all repositories.

    Provides common functionality for database operations:
    - Supabase client access via self._db
    - Row parsing into Pydantic models at the client boundary
    - A deadline helper for writes that must not hang forever

    Subclasses should implement domain-specific data access methods
    and handle dict-to-Pydantic model mapping internally.

    Example:
        class CustomerRepository(BaseRepository[Customer]):
            table = "customers"
            model = Customer

            def get_by_id(self, customer_id: str) -> Optional[Customer]:
                result = self._db.table(self.table).select("*").eq("id", customer_id).execute()
                return self._parse_first(result.data)
    """

    table: str = ""
    model: type[T]

    def __init__(self, db: Client) -> None:
        """
        Initialize the repository with a Supabase client.

        Args:
            db: Supabase client instance for database operations.
        """
        self._db = db

    def _parse(self, row: dict[str, Any]) -> T:
        """Validate a raw row against the repository model."""
        try:
            return self.model.model_validate(row)
        except PydanticValidationError as e:
            raise MalformedRowError(self.table, str(e)) from e

    def _parse_rows(self, rows: Optional[list[dict[str, Any]]]) -> list[T]:
        """Validate every row of a result set."""
        return [self._parse(row) for row in rows or []]

    def _parse_first(self, rows: Optional[list[dict[str, Any]]]) -> Optional[T]:
        """Validate the first row of a result set, if any."""
        if not rows:
            return None
        return self._parse(rows[0])


async def run_with_timeout(
    operation: str,
    func: Callable[[], R],
    timeout: float,
) -> R:
    """
    Run a blocking Supabase call in a worker thread with a deadline.

    The underlying HTTP request is not cancelled when the deadline passes;
    the caller just stops waiting for it.

    Args:
        operation: Human readable name used in the timeout error
        func: Zero-argument callable performing the call
        timeout: Deadline in seconds

    Raises:
        NetworkTimeoutError: If the call did not finish in time
    """
    try:
        return await asyncio.wait_for(asyncio.to_thread(func), timeout=timeout)
    except asyncio.TimeoutError as e:
        raise NetworkTimeoutError(operation, timeout) from e


def clean_search_term(search: str) -> str:
    """Strip PostgREST filter syntax from user input bound for an or=(...) ilike filter."""
    return _FILTER_SYNTAX.sub(" ", search).strip()
