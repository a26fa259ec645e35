"""
Session token storage.

The browser app keeps one Supabase session per tab under a fixed key.
Here that storage is an explicit object handed to whoever needs it,
with a callback fired whenever the stored session is invalidated.

The store also carries the PKCE code verifier of an OAuth sign-in in
progress, so the verifier survives from the request that starts the
sign-in to the callback request that exchanges the code.
"""

import logging
from typing import Callable, Optional, Protocol, runtime_checkable

from supabase_auth import SyncMemoryStorage

from .models import Session

logger = logging.getLogger(__name__)

# Fixed storage key; the HTTP layer uses it as the cookie name by default.
SESSION_STORAGE_KEY = "sb-auth-token"

# Suffix supabase-auth appends to its storage key for the PKCE verifier
CODE_VERIFIER_SUFFIX = "-code-verifier"

# Where the browser should land after the stored session disappears
SIGNED_OUT_ROUTE = "/login"
REFRESH_FAILED_ROUTE = "/"

InvalidationCallback = Callable[[str], None]


@runtime_checkable
class SessionStore(Protocol):
    """Holds at most one cached session and one pending code verifier."""

    key: str

    def load(self) -> Optional[Session]:
        """Return the cached session, if any."""
        ...

    def save(self, session: Session) -> None:
        """Replace the cached session."""
        ...

    def clear(self, redirect_to: str = SIGNED_OUT_ROUTE) -> None:
        """Drop the cached session and notify the invalidation callback."""
        ...

    def load_code_verifier(self) -> Optional[str]:
        """Return the verifier of a pending OAuth sign-in, if any."""
        ...

    def save_code_verifier(self, verifier: Optional[str]) -> None:
        """Remember (or, with None, forget) the pending verifier."""
        ...


class MemorySessionStore:
    """
    In-memory session store scoped to one browser session.

    Writes are last-write-wins. The HTTP layer seeds one of these from
    the request cookies and serializes it back onto the response.
    """

    def __init__(
        self,
        session: Optional[Session] = None,
        on_invalidate: Optional[InvalidationCallback] = None,
        key: str = SESSION_STORAGE_KEY,
        code_verifier: Optional[str] = None,
    ) -> None:
        self.key = key
        self._session = session
        self._on_invalidate = on_invalidate
        self._dirty = False
        self._code_verifier = code_verifier
        self._verifier_dirty = False

    @property
    def dirty(self) -> bool:
        """True once the stored session has been saved or cleared."""
        return self._dirty

    @property
    def verifier_dirty(self) -> bool:
        """True once the code verifier has been saved or forgotten."""
        return self._verifier_dirty

    @property
    def verifier_key(self) -> str:
        return f"{self.key}{CODE_VERIFIER_SUFFIX}"

    def load(self) -> Optional[Session]:
        return self._session

    def save(self, session: Session) -> None:
        self._session = session
        self._dirty = True

    def clear(self, redirect_to: str = SIGNED_OUT_ROUTE) -> None:
        had_session = self._session is not None
        self._session = None
        self._dirty = True
        if had_session:
            logger.debug("Cleared stored session %s", self.key)
        if self._on_invalidate is not None:
            self._on_invalidate(redirect_to)

    def load_code_verifier(self) -> Optional[str]:
        return self._code_verifier

    def save_code_verifier(self, verifier: Optional[str]) -> None:
        if verifier == self._code_verifier:
            return
        self._code_verifier = verifier
        self._verifier_dirty = True


class ProviderStorage(SyncMemoryStorage):
    """
    Storage handed to a per-request Supabase auth client.

    The provider's own session entry lives only as long as the client.
    The PKCE code verifier is routed to the session store instead, where
    the HTTP layer can carry it across requests.
    """

    def __init__(self, store: SessionStore) -> None:
        super().__init__()
        self._store = store

    def get_item(self, key: str) -> Optional[str]:
        if key.endswith(CODE_VERIFIER_SUFFIX):
            return self._store.load_code_verifier()
        return super().get_item(key)

    def set_item(self, key: str, value: str) -> None:
        if key.endswith(CODE_VERIFIER_SUFFIX):
            self._store.save_code_verifier(value)
            return
        super().set_item(key, value)

    def remove_item(self, key: str) -> None:
        if key.endswith(CODE_VERIFIER_SUFFIX):
            self._store.save_code_verifier(None)
            return
        super().remove_item(key)
