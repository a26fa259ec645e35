"""
Content repository.

One repository class serves every library; the catalog entry it is built
with supplies the table, the row model and the column roles.

Note: This repository does NOT perform authorization checks.
The service layer decides who may see drafts and who may write.
"""

from datetime import datetime, timezone
from typing import Any, Optional

from pydantic import BaseModel
from supabase import Client

from shared.exceptions import NotFoundError, PermissionDeniedError
from shared.repository import BaseRepository
from .catalog import ContentSpec
from .models import ContentFilters

INCREMENT_COUNTER_FUNCTION = "increment_counter"


class ContentRepository(BaseRepository[BaseModel]):
    """Data access for one content library table."""

    def __init__(self, db: Client, spec: ContentSpec) -> None:
        super().__init__(db)
        self.spec = spec
        self.table = spec.table
        self.model = spec.model

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    def list_items(self, filters: ContentFilters, published_only: bool = False) -> list[BaseModel]:
        """
        Fetch rows matching the set filters, newest first.

        Search is not applied here.
        """
        spec = self.spec
        query = self._db.table(self.table).select("*")

        if published_only:
            query = query.eq("status", spec.published_status)
        if filters.products:
            query = query.in_(spec.product_field, filters.products)
        if filters.categories:
            query = query.in_(spec.category_field, filters.categories)
        if filters.statuses:
            query = query.in_("status", filters.statuses)
        if filters.languages and spec.language_field:
            query = query.in_(spec.language_field, filters.languages)

        result = query.order("updated_at", desc=True).execute()
        return self._parse_rows(result.data)

    def get(self, item_id: str) -> Optional[BaseModel]:
        result = self._db.table(self.table).select("*").eq("id", item_id).limit(1).execute()
        return self._parse_first(result.data)

    # -------------------------------------------------------------------------
    # Writes
    # -------------------------------------------------------------------------

    def create(self, data: dict[str, Any]) -> BaseModel:
        result = self._db.table(self.table).insert(data).execute()
        return self._parse(result.data[0])

    def update(self, item_id: str, data: dict[str, Any]) -> BaseModel:
        """
        Update a row.

        Raises:
            NotFoundError: No row with this id
            PermissionDeniedError: The row exists but the update came back empty
        """
        self._require(item_id)
        data = {**data, "updated_at": datetime.now(timezone.utc).isoformat()}
        result = self._db.table(self.table).update(data).eq("id", item_id).execute()
        if not result.data:
            raise PermissionDeniedError(self.table, item_id)
        return self._parse(result.data[0])

    def delete(self, item_id: str) -> None:
        self._require(item_id)
        self._db.table(self.table).delete().eq("id", item_id).execute()

    def increment_counter(self, item_id: str) -> Optional[int]:
        """
        Atomically add one to the counter column.

        Returns:
            The new value, or None if no row was updated
        """
        result = self._db.rpc(
            INCREMENT_COUNTER_FUNCTION,
            {
                "table_name": self.table,
                "column_name": self.spec.counter_field,
                "row_id": item_id,
            },
        ).execute()
        if result.data is None:
            return None
        return int(result.data)

    def write_counter(self, item_id: str, value: int) -> Optional[int]:
        """
        Overwrite the counter column.

        Returns:
            The stored value, or None if the update came back empty
        """
        counter = self.spec.counter_field
        result = self._db.table(self.table).update({counter: value}).eq("id", item_id).execute()
        if not result.data:
            return None
        return result.data[0].get(counter, value)

    def _require(self, item_id: str) -> BaseModel:
        item = self.get(item_id)
        if item is None:
            raise NotFoundError(
                f"{self.spec.kind.value} item {item_id} not found",
                code="CONTENT_NOT_FOUND",
                details={"kind": self.spec.kind.value, "id": item_id},
            )
        return item
