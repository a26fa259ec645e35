import asyncio
import time

import pytest
from unittest.mock import AsyncMock, MagicMock

from modules.activity.models import ActivityType, ResourceType
from modules.content.catalog import get_spec
from modules.content.models import (
    ContentFilters,
    ContentKind,
    ContentQuery,
    Document,
    SortDirection,
    SortField,
)
from modules.content.service import ContentService, matches_search, sort_items
from shared.exceptions import (
    NetworkTimeoutError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)
from tests.conftest import make_settings
from tests.modules.content.conftest import make_db


def make_service(db, activity=None, **settings) -> ContentService:
    return ContentService(db, make_settings(**settings), activity=activity)


class TestSearch:
    def test_installation_matches_only_the_guide(self, documents):
        items = [Document.model_validate(row) for row in documents]
        spec = get_spec(ContentKind.DOCUMENTS)
        matched = [item for item in items if matches_search(item, spec.search_fields, "installation")]
        assert [item.title for item in matched] == ["Installation Guide"]

    @pytest.mark.asyncio
    async def test_search_over_title_and_product(self, distributor_user):
        rows = [
            {"id": "d1", "title": "Installation Guide", "product": "Visum Palm", "status": "published"},
            {"id": "d2", "title": "Troubleshooting", "product": "Raman RXN5", "status": "published"},
        ]
        query = ContentQuery(filters=ContentFilters(search="installation"))
        items = await make_service(make_db(rows)).list_items(ContentKind.DOCUMENTS, query, distributor_user)
        assert [item.id for item in items] == ["d1"]

    def test_case_insensitive_over_product(self, documents):
        item = Document.model_validate(documents[2])
        assert matches_search(item, ("title", "product"), "y1")

    def test_blank_search_matches_everything(self, documents):
        item = Document.model_validate(documents[0])
        assert matches_search(item, ("title",), "   ")

    def test_missing_field_does_not_match(self, documents):
        item = Document.model_validate(documents[0])
        assert not matches_search(item, ("internal_notes",), "guide")


class TestSort:
    @pytest.fixture
    def items(self, documents):
        return [Document.model_validate(row) for row in documents]

    def test_title_ignores_case(self, items):
        spec = get_spec(ContentKind.DOCUMENTS)
        ordered = sort_items(items, spec, SortField.TITLE)
        assert [item.title for item in ordered] == ["Datasheet", "Installation Guide", "user manual"]

    def test_size_treats_missing_as_zero(self, items):
        spec = get_spec(ContentKind.DOCUMENTS)
        ordered = sort_items(items, spec, SortField.SIZE, SortDirection.DESC)
        assert [item.id for item in ordered] == ["doc-1", "doc-3", "doc-2"]

    def test_updated_puts_missing_first(self, items):
        spec = get_spec(ContentKind.DOCUMENTS)
        ordered = sort_items(items, spec, SortField.UPDATED)
        assert [item.id for item in ordered] == ["doc-3", "doc-1", "doc-2"]

    def test_unsupported_column(self):
        with pytest.raises(ValidationError):
            sort_items([], get_spec(ContentKind.TRAINING), SortField.VERSION)


class TestListItems:
    @pytest.mark.asyncio
    async def test_distributor_gets_published_only(self, documents, distributor_user):
        db = make_db(documents)
        service = make_service(db)
        await service.list_items(ContentKind.DOCUMENTS, ContentQuery(), distributor_user)
        db.query.eq.assert_called_once_with("status", "published")

    @pytest.mark.asyncio
    async def test_admin_sees_every_status(self, documents, admin_user):
        db = make_db(documents)
        await make_service(db).list_items(ContentKind.DOCUMENTS, ContentQuery(), admin_user)
        db.query.eq.assert_not_called()

    @pytest.mark.asyncio
    async def test_search_then_sort(self, documents, distributor_user):
        db = make_db(documents)
        query = ContentQuery(
            filters=ContentFilters(search="x200"),
            sort_field=SortField.VERSION,
            sort_direction=SortDirection.ASC,
        )
        items = await make_service(db).list_items(ContentKind.DOCUMENTS, query, distributor_user)
        assert [item.id for item in items] == ["doc-2", "doc-1"]


class TestGet:
    @pytest.mark.asyncio
    async def test_draft_hidden_from_distributors(self, draft_document, distributor_user):
        service = make_service(make_db([draft_document]))
        with pytest.raises(NotFoundError):
            await service.get(ContentKind.DOCUMENTS, "doc-9", distributor_user)

    @pytest.mark.asyncio
    async def test_draft_visible_to_admins(self, draft_document, admin_user):
        service = make_service(make_db([draft_document]))
        item = await service.get(ContentKind.DOCUMENTS, "doc-9", admin_user)
        assert item.title == "Unreleased Notes"

    @pytest.mark.asyncio
    async def test_missing(self, admin_user):
        with pytest.raises(NotFoundError):
            await make_service(make_db([])).get(ContentKind.DOCUMENTS, "nope", admin_user)


class TestAdminWrites:
    @pytest.mark.asyncio
    async def test_create_records_author(self, documents, admin_user):
        db = make_db([documents[0]])
        item = await make_service(db).create(
            ContentKind.DOCUMENTS,
            {"title": "Installation Guide", "product": "X200", "category": "manuals", "version": "2.1"},
            admin_user,
        )
        assert item.id == "doc-1"
        payload = db.query.insert.call_args[0][0]
        assert payload["created_by"] == "admin-1"
        assert payload["status"] == "draft"

    @pytest.mark.asyncio
    async def test_create_rejects_bad_input(self, admin_user):
        with pytest.raises(ValidationError):
            await make_service(make_db()).create(ContentKind.DOCUMENTS, {"title": ""}, admin_user)

    @pytest.mark.asyncio
    async def test_update_sends_only_given_fields(self, documents, admin_user):
        db = make_db([documents[0]])
        await make_service(db).update(ContentKind.DOCUMENTS, "doc-1", {"status": "archived"}, admin_user)
        data = db.query.update.call_args[0][0]
        assert data["status"] == "archived"
        assert "title" not in data

    @pytest.mark.asyncio
    async def test_update_without_fields(self, admin_user):
        with pytest.raises(ValidationError):
            await make_service(make_db()).update(ContentKind.DOCUMENTS, "doc-1", {}, admin_user)

    @pytest.mark.asyncio
    async def test_write_timeout(self, documents, admin_user):
        db = make_db()

        def slow_execute():
            time.sleep(0.5)
            return MagicMock(data=[])

        db.query.execute.side_effect = slow_execute
        service = make_service(db, write_timeout_seconds=0.05)
        with pytest.raises(NetworkTimeoutError):
            await service.delete(ContentKind.MARKETING, "asset-1", admin_user)


class TestRecordDownload:
    @pytest.mark.asyncio
    async def test_atomic_increment_and_tracking(self, documents, distributor_user):
        db = make_db([documents[0]])
        db.rpc.return_value.execute.return_value.data = 8
        activity = AsyncMock()

        result = await make_service(db, activity=activity).record_download(
            ContentKind.DOCUMENTS, "doc-1", distributor_user, user_agent="pytest"
        )

        assert result.count == 8
        assert result.file_url == "https://files.example.com/install.pdf"
        db.query.update.assert_not_called()
        activity.track.assert_awaited_once_with(
            "test-user-123",
            ActivityType.DOWNLOAD,
            resource_type=ResourceType.DOCUMENT,
            resource_id="doc-1",
            resource_name="Installation Guide",
            user_agent="pytest",
        )

    @pytest.mark.asyncio
    async def test_read_then_write_fallback(self, documents, distributor_user):
        db = make_db([documents[0]])
        result = await make_service(db, atomic_counters=False).record_download(
            ContentKind.DOCUMENTS, "doc-1", distributor_user
        )
        db.rpc.assert_not_called()
        db.query.update.assert_called_once_with({"downloads": 8})
        assert result.count == 7  # row double echoes the stored value

    @pytest.mark.asyncio
    async def test_concurrent_read_then_write_may_lose_one(self, documents, distributor_user):
        db = make_db([documents[0]])
        service = make_service(db, atomic_counters=False)
        await asyncio.gather(
            service.record_download(ContentKind.DOCUMENTS, "doc-1", distributor_user),
            service.record_download(ContentKind.DOCUMENTS, "doc-1", distributor_user),
        )
        written = [c.args[0]["downloads"] for c in db.query.update.call_args_list]
        assert len(written) == 2
        assert max(written) in {8, 9}

    @pytest.mark.asyncio
    async def test_atomic_path_one_rpc_per_download(self, documents, distributor_user):
        db = make_db([documents[0]])
        db.rpc.return_value.execute.return_value.data = 9
        service = make_service(db)
        await asyncio.gather(
            service.record_download(ContentKind.DOCUMENTS, "doc-1", distributor_user),
            service.record_download(ContentKind.DOCUMENTS, "doc-1", distributor_user),
        )
        assert db.rpc.call_count == 2
        db.rpc.assert_called_with(
            "increment_counter",
            {"table_name": "documentation", "column_name": "downloads", "row_id": "doc-1"},
        )

    @pytest.mark.asyncio
    async def test_missing_file_url(self, documents, distributor_user):
        db = make_db([documents[2]])
        with pytest.raises(ValidationError) as exc_info:
            await make_service(db).record_download(ContentKind.DOCUMENTS, "doc-3", distributor_user)
        assert exc_info.value.code == "FILE_URL_MISSING"
        assert exc_info.value.message == "File URL is missing. Please contact administrator."
        db.rpc.assert_not_called()

    @pytest.mark.asyncio
    async def test_empty_increment_is_permission_denied(self, documents, distributor_user):
        db = make_db([documents[0]])
        db.rpc.return_value.execute.return_value.data = None
        activity = AsyncMock()
        with pytest.raises(PermissionDeniedError):
            await make_service(db, activity=activity).record_download(
                ContentKind.DOCUMENTS, "doc-1", distributor_user
            )
        activity.track.assert_not_called()

    @pytest.mark.asyncio
    async def test_drafts_cannot_be_downloaded(self, draft_document, distributor_user):
        db = make_db([draft_document])
        with pytest.raises(NotFoundError):
            await make_service(db).record_download(ContentKind.DOCUMENTS, "doc-9", distributor_user)
