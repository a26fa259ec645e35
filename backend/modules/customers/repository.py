"""
Customer repository.

Encapsulates the Supabase queries for the customers table. Device counts
come from an embedded count on the devices relation.
"""

from datetime import datetime, timezone
from typing import Any, Optional

from shared.repository import BaseRepository, clean_search_term
from .models import Customer

CUSTOMERS_TABLE = "customers"
LIST_COLUMNS = "*, devices:devices(count)"


def _with_device_count(row: dict[str, Any]) -> dict[str, Any]:
    row = dict(row)
    devices = row.pop("devices", None) or []
    row["device_count"] = devices[0].get("count", 0) if devices else 0
    return row


class CustomerRepository(BaseRepository[Customer]):
    """Data access for customers."""

    table = CUSTOMERS_TABLE
    model = Customer

    def list_customers(
        self,
        distributor_id: Optional[str] = None,
        search: str = "",
    ) -> list[Customer]:
        """Customers ordered by company name, optionally scoped and searched."""
        query = self._db.table(self.table).select(LIST_COLUMNS)

        term = clean_search_term(search)
        if term:
            query = query.or_(
                f"company_name.ilike.%{term}%,"
                f"contact_name.ilike.%{term}%,"
                f"contact_email.ilike.%{term}%"
            )
        if distributor_id:
            query = query.eq("distributor_id", distributor_id)

        result = query.order("company_name").execute()
        return [self._parse(_with_device_count(row)) for row in result.data or []]

    def get_by_id(self, customer_id: str) -> Optional[Customer]:
        result = (
            self._db.table(self.table)
            .select(LIST_COLUMNS)
            .eq("id", customer_id)
            .limit(1)
            .execute()
        )
        if not result.data:
            return None
        return self._parse(_with_device_count(result.data[0]))

    def create(self, data: dict[str, Any]) -> Customer:
        now = datetime.now(timezone.utc).isoformat()
        data = {**data, "created_at": now, "updated_at": now}
        result = self._db.table(self.table).insert(data).execute()
        return self._parse(result.data[0])

    def update(self, customer_id: str, data: dict[str, Any]) -> Optional[Customer]:
        """Returns None when the update matched no rows."""
        data = {**data, "updated_at": datetime.now(timezone.utc).isoformat()}
        result = self._db.table(self.table).update(data).eq("id", customer_id).execute()
        return self._parse_first(result.data)

    def delete(self, customer_id: str) -> None:
        self._db.table(self.table).delete().eq("id", customer_id).execute()

    def list_for_stats(self, distributor_id: Optional[str] = None) -> list[dict[str, Any]]:
        query = self._db.table(self.table).select("id, status, country")
        if distributor_id:
            query = query.eq("distributor_id", distributor_id)
        return query.execute().data or []
