"""
Device repository.

Encapsulates the Supabase queries for the devices table. Every device
query embeds its customer, which carries the distributor a device
belongs to. Scoping to one distributor turns that embed into an inner
join filtered on the customer's distributor_id.
"""

from datetime import date, datetime, timezone
from typing import Any, Optional

from shared.repository import BaseRepository, clean_search_term
from .models import Device

DEVICES_TABLE = "devices"
PRODUCTS_TABLE = "products"

CUSTOMER_EMBED = "customer:customers(company_name, distributor_id)"
SCOPED_CUSTOMER_EMBED = "customer:customers!inner(company_name, distributor_id)"
DOCUMENT_COUNT = "documents:device_documents(count)"


def _flatten(row: dict[str, Any]) -> dict[str, Any]:
    """Lift the embedded customer and document count onto the device row."""
    row = dict(row)
    customer = row.pop("customer", None) or {}
    documents = row.pop("documents", None) or []
    row["customer_name"] = customer.get("company_name")
    row["distributor_id"] = customer.get("distributor_id")
    row["document_count"] = documents[0].get("count", 0) if documents else 0
    return row


class DeviceRepository(BaseRepository[Device]):
    """Data access for installed devices."""

    table = DEVICES_TABLE
    model = Device

    def _select(self, distributor_id: Optional[str] = None, columns: str = "*"):
        if distributor_id:
            query = self._db.table(self.table).select(
                f"{columns}, {SCOPED_CUSTOMER_EMBED}, {DOCUMENT_COUNT}"
            )
            return query.eq("customer.distributor_id", distributor_id)
        return self._db.table(self.table).select(f"{columns}, {CUSTOMER_EMBED}, {DOCUMENT_COUNT}")

    def _parse_devices(self, rows: Optional[list[dict[str, Any]]]) -> list[Device]:
        return [self._parse(_flatten(row)) for row in rows or []]

    def list_devices(
        self,
        distributor_id: Optional[str] = None,
        customer_id: Optional[str] = None,
    ) -> list[Device]:
        """Devices ordered by name, optionally narrowed to a distributor or customer."""
        query = self._select(distributor_id)
        if customer_id:
            query = query.eq("customer_id", customer_id)
        return self._parse_devices(query.order("device_name").execute().data)

    def search(
        self,
        search: str,
        distributor_id: Optional[str] = None,
        customer_id: Optional[str] = None,
    ) -> list[Device]:
        """Match serial number, name or model; a blank term matches everything."""
        query = self._select(distributor_id)
        term = clean_search_term(search)
        if term:
            query = query.or_(
                f"serial_number.ilike.%{term}%,"
                f"device_name.ilike.%{term}%,"
                f"device_model.ilike.%{term}%"
            )
        if customer_id:
            query = query.eq("customer_id", customer_id)
        return self._parse_devices(query.order("device_name").execute().data)

    def list_warranty_expiring(
        self,
        start: date,
        end: date,
        distributor_id: Optional[str] = None,
        customer_id: Optional[str] = None,
    ) -> list[Device]:
        """Devices whose warranty ends between start and end, soonest first."""
        query = (
            self._select(distributor_id)
            .gte("warranty_expiry", start.isoformat())
            .lte("warranty_expiry", end.isoformat())
        )
        if customer_id:
            query = query.eq("customer_id", customer_id)
        return self._parse_devices(query.order("warranty_expiry").execute().data)

    def get_by_id(self, device_id: str) -> Optional[Device]:
        result = self._select().eq("id", device_id).limit(1).execute()
        devices = self._parse_devices(result.data)
        return devices[0] if devices else None

    def get_by_serial(self, serial_number: str) -> Optional[Device]:
        result = self._select().eq("serial_number", serial_number).limit(1).execute()
        devices = self._parse_devices(result.data)
        return devices[0] if devices else None

    def serial_taken(self, serial_number: str, exclude_id: Optional[str] = None) -> bool:
        """True if another device already uses the serial number."""
        query = self._db.table(self.table).select("id").eq("serial_number", serial_number)
        if exclude_id:
            query = query.neq("id", exclude_id)
        return bool(query.limit(1).execute().data)

    def get_product_name(self, product_id: str) -> Optional[str]:
        result = (
            self._db.table(PRODUCTS_TABLE)
            .select("id, name")
            .eq("id", product_id)
            .limit(1)
            .execute()
        )
        if not result.data:
            return None
        return result.data[0].get("name")

    def create(self, data: dict[str, Any]) -> Device:
        now = datetime.now(timezone.utc).isoformat()
        data = {**data, "created_at": now, "updated_at": now}
        result = self._db.table(self.table).insert(data).execute()
        return self._parse(_flatten(result.data[0]))

    def update(self, device_id: str, data: dict[str, Any]) -> Optional[Device]:
        """Returns None when the update matched no rows."""
        data = {**data, "updated_at": datetime.now(timezone.utc).isoformat()}
        result = self._db.table(self.table).update(data).eq("id", device_id).execute()
        devices = self._parse_devices(result.data)
        return devices[0] if devices else None

    def delete(self, device_id: str) -> None:
        self._db.table(self.table).delete().eq("id", device_id).execute()

    def list_for_stats(
        self,
        distributor_id: Optional[str] = None,
        customer_id: Optional[str] = None,
    ) -> list[dict[str, Any]]:
        if distributor_id:
            query = (
                self._db.table(self.table)
                .select("id, status, device_model, warranty_expiry, customer:customers!inner(distributor_id)")
                .eq("customer.distributor_id", distributor_id)
            )
        else:
            query = self._db.table(self.table).select("id, status, device_model, warranty_expiry")
        if customer_id:
            query = query.eq("customer_id", customer_id)
        return query.execute().data or []
