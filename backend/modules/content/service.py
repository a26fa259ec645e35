"""
Content library service.

Lists, sorts and searches the four libraries for distributors and
admins, runs admin mutations against a deadline, and records downloads.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Optional

from pydantic import BaseModel
from supabase import Client

from shared.config import Settings, get_settings
from shared.exceptions import NotFoundError, PermissionDeniedError, ValidationError
from shared.models import PortalUser
from shared.repository import run_with_timeout
from modules.activity.models import ActivityType, ResourceType
from modules.activity.service import ActivityService
from .catalog import CATALOG, ContentSpec
from .models import ContentKind, ContentQuery, DownloadResult, SortDirection, SortField
from .repository import ContentRepository

logger = logging.getLogger(__name__)

_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


def matches_search(item: BaseModel, fields: tuple[str, ...], search: str) -> bool:
    """Case-insensitive substring match over the given text fields."""
    needle = search.strip().lower()
    if not needle:
        return True
    return any(needle in str(getattr(item, name, None) or "").lower() for name in fields)


def sort_items(
    items: list[BaseModel],
    spec: ContentSpec,
    sort_field: SortField,
    direction: SortDirection = SortDirection.ASC,
) -> list[BaseModel]:
    """
    Sort rows by a library column.

    Text compares case-insensitively, size numerically with missing as 0,
    updated chronologically.
    """
    column = spec.sort_column(sort_field)
    if column is None:
        raise ValidationError(
            f"{spec.kind.value} cannot be sorted by {sort_field.value}",
            details={"kind": spec.kind.value, "sort_field": sort_field.value},
        )

    def key(item: BaseModel) -> Any:
        value = getattr(item, column, None)
        if sort_field == SortField.SIZE:
            return value or 0
        if sort_field == SortField.UPDATED:
            return value or _EPOCH
        return str(value or "").casefold()

    return sorted(items, key=key, reverse=direction == SortDirection.DESC)


class ContentService:
    """
    Content libraries backed by Supabase.

    Distributors only ever see published rows. Writes are admin-only and
    enforced at the route layer.
    """

    def __init__(
        self,
        supabase_client: Client,
        settings: Optional[Settings] = None,
        activity: Optional[ActivityService] = None,
    ):
        self._settings = settings or get_settings()
        self._activity = activity
        self._repositories = {
            kind: ContentRepository(supabase_client, spec) for kind, spec in CATALOG.items()
        }

    def _repository(self, kind: ContentKind) -> ContentRepository:
        return self._repositories[kind]

    async def list_items(
        self,
        kind: ContentKind,
        query: ContentQuery,
        user: PortalUser,
    ) -> list[BaseModel]:
        """Filter server-side, search and sort client-side."""
        repository = self._repository(kind)
        spec = repository.spec

        items = repository.list_items(query.filters, published_only=not user.is_admin)
        items = [item for item in items if matches_search(item, spec.search_fields, query.filters.search)]
        if query.sort_field is not None:
            items = sort_items(items, spec, query.sort_field, query.sort_direction)
        return items

    async def get(self, kind: ContentKind, item_id: str, user: PortalUser) -> BaseModel:
        repository = self._repository(kind)
        item = repository.get(item_id)
        if item is None or (not user.is_admin and item.status.value != repository.spec.published_status):
            raise NotFoundError(
                f"{kind.value} item {item_id} not found",
                code="CONTENT_NOT_FOUND",
                details={"kind": kind.value, "id": item_id},
            )
        return item

    async def create(self, kind: ContentKind, data: dict[str, Any], user: PortalUser) -> BaseModel:
        """
        Create a row from admin input.

        Raises:
            ValidationError: Input does not fit the library's create model
            NetworkTimeoutError: The write did not finish in time
        """
        repository = self._repository(kind)
        payload = _validate_input(repository.spec.create_model, data)
        payload = payload.model_dump(mode="json", exclude_none=True)
        payload["created_by"] = user.id

        item = await run_with_timeout(
            f"create {kind.value}",
            lambda: repository.create(payload),
            self._settings.write_timeout_seconds,
        )
        logger.info("Admin %s created %s item %s", user.id, kind.value, item.id)
        return item

    async def update(self, kind: ContentKind, item_id: str, data: dict[str, Any], user: PortalUser) -> BaseModel:
        """Apply the fields the admin actually sent."""
        repository = self._repository(kind)
        payload = _validate_input(repository.spec.update_model, data)
        changes = payload.model_dump(mode="json", exclude_unset=True)
        if not changes:
            raise ValidationError("No fields to update")

        item = await run_with_timeout(
            f"update {kind.value}",
            lambda: repository.update(item_id, changes),
            self._settings.write_timeout_seconds,
        )
        logger.info("Admin %s updated %s item %s", user.id, kind.value, item_id)
        return item

    async def delete(self, kind: ContentKind, item_id: str, user: PortalUser) -> None:
        repository = self._repository(kind)
        await run_with_timeout(
            f"delete {kind.value}",
            lambda: repository.delete(item_id),
            self._settings.write_timeout_seconds,
        )
        logger.info("Admin %s deleted %s item %s", user.id, kind.value, item_id)

    async def record_download(
        self,
        kind: ContentKind,
        item_id: str,
        user: PortalUser,
        user_agent: Optional[str] = None,
    ) -> DownloadResult:
        """
        Count a download and hand back the file URL.

        The increment is a single server-side statement unless
        atomic_counters is off, in which case the counter is read and then
        written back. That fallback is racy: two concurrent downloads from
        N can both write N+1.

        Raises:
            NotFoundError: No such row
            ValidationError: Row has no file
            PermissionDeniedError: The increment came back empty
        """
        repository = self._repository(kind)
        spec = repository.spec

        item = await self.get(kind, item_id, user)

        file_url = (item.file_url or "").strip()
        if not file_url:
            raise ValidationError(
                "File URL is missing. Please contact administrator.",
                code="FILE_URL_MISSING",
                details={"kind": kind.value, "id": item_id},
            )

        if self._settings.atomic_counters:
            count = repository.increment_counter(item_id)
        else:
            current = getattr(item, spec.counter_field) or 0
            count = repository.write_counter(item_id, current + 1)

        if count is None:
            logger.warning("Download counter update on %s %s returned no rows", spec.table, item_id)
            raise PermissionDeniedError(spec.table, item_id)

        if self._activity is not None:
            await self._activity.track(
                user.id,
                ActivityType.DOWNLOAD,
                resource_type=ResourceType(spec.resource_type),
                resource_id=item_id,
                resource_name=getattr(item, spec.title_field),
                user_agent=user_agent,
            )

        return DownloadResult(id=item_id, file_url=file_url, count=count)


def _validate_input(model: type[BaseModel], data: dict[str, Any]) -> BaseModel:
    try:
        return model.model_validate(data)
    except ValueError as e:
        raise ValidationError(str(e), details={"model": model.__name__}) from e
