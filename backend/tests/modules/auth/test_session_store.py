from unittest.mock import MagicMock

from modules.auth.session_store import (
    REFRESH_FAILED_ROUTE,
    SESSION_STORAGE_KEY,
    SIGNED_OUT_ROUTE,
    MemorySessionStore,
    SessionStore,
)
from tests.conftest import make_session


class TestMemorySessionStore:
    def test_starts_empty_and_clean(self):
        store = MemorySessionStore()
        assert store.load() is None
        assert store.dirty is False
        assert store.key == SESSION_STORAGE_KEY

    def test_seeded_session_is_not_dirty(self):
        session = make_session()
        store = MemorySessionStore(session=session)
        assert store.load() is session
        assert store.dirty is False

    def test_save_is_last_write_wins(self):
        store = MemorySessionStore()
        first, second = make_session(user_id="a"), make_session(user_id="b")
        store.save(first)
        store.save(second)
        assert store.load() is second
        assert store.dirty is True

    def test_clear_notifies_with_route(self):
        callback = MagicMock()
        store = MemorySessionStore(session=make_session(), on_invalidate=callback)
        store.clear(REFRESH_FAILED_ROUTE)
        assert store.load() is None
        assert store.dirty is True
        callback.assert_called_once_with(REFRESH_FAILED_ROUTE)

    def test_clear_defaults_to_login(self):
        callback = MagicMock()
        store = MemorySessionStore(on_invalidate=callback)
        store.clear()
        callback.assert_called_once_with(SIGNED_OUT_ROUTE)

    def test_custom_key(self):
        assert MemorySessionStore(key="portal-session").key == "portal-session"

    def test_satisfies_protocol(self):
        assert isinstance(MemorySessionStore(), SessionStore)
