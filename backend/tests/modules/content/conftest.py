"""
Pytest fixtures for content module tests.

The Supabase double returns the same query object from every builder
call, so a test only has to set what execute() hands back.
"""

import pytest
from unittest.mock import MagicMock

BUILDER_METHODS = (
    "select", "eq", "neq", "gte", "lte", "in_", "or_", "order", "limit", "insert", "update", "delete",
)


def make_db(rows=None) -> MagicMock:
    db = MagicMock()
    query = MagicMock()
    for name in BUILDER_METHODS:
        getattr(query, name).return_value = query
    query.execute.return_value.data = rows if rows is not None else []
    db.table.return_value = query
    db.query = query
    return db


@pytest.fixture
def documents():
    return [
        {
            "id": "doc-1",
            "title": "Installation Guide",
            "product": "X200",
            "category": "manuals",
            "version": "2.1",
            "status": "published",
            "language": "en",
            "file_url": "https://files.example.com/install.pdf",
            "file_size": 2048,
            "downloads": 7,
            "updated_at": "2025-01-10T09:00:00+00:00",
        },
        {
            "id": "doc-2",
            "title": "user manual",
            "product": "X200",
            "category": "manuals",
            "version": "1.0",
            "status": "published",
            "language": "en",
            "file_url": "https://files.example.com/manual.pdf",
            "file_size": None,
            "downloads": 0,
            "updated_at": "2025-02-01T09:00:00+00:00",
        },
        {
            "id": "doc-3",
            "title": "Datasheet",
            "product": "Y100",
            "category": "sheets",
            "version": "3.0",
            "status": "published",
            "language": "de",
            "file_url": "",
            "file_size": 512,
            "downloads": 2,
            "updated_at": None,
        },
    ]


@pytest.fixture
def draft_document():
    return {
        "id": "doc-9",
        "title": "Unreleased Notes",
        "product": "X300",
        "category": "manuals",
        "version": "0.1",
        "status": "draft",
        "file_url": "https://files.example.com/draft.pdf",
        "downloads": 0,
    }
