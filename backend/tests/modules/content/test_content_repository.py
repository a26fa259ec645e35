import pytest
from unittest.mock import MagicMock

from modules.content.catalog import get_spec
from modules.content.models import ContentFilters, ContentKind, Document
from modules.content.repository import ContentRepository
from shared.exceptions import MalformedRowError, NotFoundError, PermissionDeniedError
from tests.modules.content.conftest import make_db


def repository(db, kind=ContentKind.DOCUMENTS) -> ContentRepository:
    return ContentRepository(db, get_spec(kind))


class TestListItems:
    def test_parses_rows(self, documents):
        db = make_db(documents)
        items = repository(db).list_items(ContentFilters())
        assert [item.id for item in items] == ["doc-1", "doc-2", "doc-3"]
        assert isinstance(items[0], Document)
        db.table.assert_called_with("documentation")
        db.query.order.assert_called_once_with("updated_at", desc=True)

    def test_published_only(self):
        db = make_db()
        repository(db).list_items(ContentFilters(), published_only=True)
        db.query.eq.assert_called_once_with("status", "published")

    def test_set_filters_pushed_down(self):
        db = make_db()
        repository(db, ContentKind.SOFTWARE).list_items(
            ContentFilters(products=["X200"], categories=["firmware"], statuses=["deprecated"])
        )
        db.query.in_.assert_any_call("product_name", ["X200"])
        db.query.in_.assert_any_call("release_type", ["firmware"])
        db.query.in_.assert_any_call("status", ["deprecated"])

    def test_language_filter_ignored_without_column(self):
        db = make_db()
        repository(db, ContentKind.TRAINING).list_items(ContentFilters(languages=["de"]))
        db.query.in_.assert_not_called()

    def test_malformed_row(self):
        db = make_db([{"id": "doc-1"}])
        with pytest.raises(MalformedRowError):
            repository(db).list_items(ContentFilters())


class TestWrites:
    def test_update_missing_row(self):
        db = make_db([])
        with pytest.raises(NotFoundError):
            repository(db).update("doc-1", {"title": "New"})

    def test_update_blocked_by_rls(self, documents):
        db = make_db()
        # First execute() is the existence check, second is the update
        db.query.execute.side_effect = [
            MagicMock(data=[documents[0]]),
            MagicMock(data=[]),
        ]
        with pytest.raises(PermissionDeniedError):
            repository(db).update("doc-1", {"title": "New"})

    def test_update_stamps_updated_at(self, documents):
        db = make_db([documents[0]])
        repository(db).update("doc-1", {"title": "New"})
        data = db.query.update.call_args[0][0]
        assert data["title"] == "New"
        assert "updated_at" in data

    def test_create(self, documents):
        db = make_db([documents[0]])
        item = repository(db).create({"title": "Installation Guide"})
        assert item.id == "doc-1"
        db.query.insert.assert_called_once_with({"title": "Installation Guide"})


class TestCounters:
    def test_increment_calls_rpc(self):
        db = make_db()
        db.rpc.return_value.execute.return_value.data = 8
        assert repository(db).increment_counter("doc-1") == 8
        db.rpc.assert_called_once_with(
            "increment_counter",
            {"table_name": "documentation", "column_name": "downloads", "row_id": "doc-1"},
        )

    def test_increment_without_row(self):
        db = make_db()
        db.rpc.return_value.execute.return_value.data = None
        assert repository(db, ContentKind.TRAINING).increment_counter("t-1") is None

    def test_write_counter(self):
        db = make_db([{"id": "t-1", "views": 4}])
        assert repository(db, ContentKind.TRAINING).write_counter("t-1", 4) == 4
        db.query.update.assert_called_once_with({"views": 4})

    def test_write_counter_blocked(self):
        db = make_db([])
        assert repository(db).write_counter("doc-1", 8) is None
