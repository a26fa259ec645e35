"""
Database client factory for Supabase.

Two kinds of client:
- service role: shared by the data views and the profile resolver; bypasses RLS
- anon key: one per browser session for sign-in, code exchange and OTP flows
"""

from typing import Optional
from supabase import ClientOptions, create_client, Client
from supabase_auth import SyncSupportedStorage

from .config import get_settings
from .exceptions import ConfigurationError

# Module-level client cache
_service_client: Optional[Client] = None


def _require(**values: str) -> None:
    missing = [name.upper() for name, value in values.items() if not value]
    if missing:
        raise ConfigurationError(
            f"Supabase configuration missing: {', '.join(missing)}",
            details={"missing": missing},
        )


def get_supabase_client() -> Client:
    """
    Get Supabase client with service role (bypasses RLS).

    Access checks for the data views happen in the service layer, so
    everything reached through this client must already be authorized.

    Raises:
        ConfigurationError: If SUPABASE_URL or SUPABASE_SERVICE_ROLE_KEY is unset
    """
    global _service_client

    if _service_client is None:
        settings = get_settings()
        _require(
            supabase_url=settings.supabase_url,
            supabase_service_role_key=settings.supabase_service_role_key,
        )
        _service_client = create_client(
            settings.supabase_url,
            settings.supabase_service_role_key,
        )

    return _service_client


def get_supabase_anon_client(storage: Optional[SyncSupportedStorage] = None) -> Client:
    """
    Get a fresh Supabase client using the anonymous key.

    The client keeps the provider session in memory, so it is never
    cached or shared between browsers. Token auto-refresh is off: the
    client lives for one request and refreshes happen on demand.

    Args:
        storage: Auth storage for the client (defaults to plain memory)

    Raises:
        ConfigurationError: If SUPABASE_URL or SUPABASE_ANON_KEY is unset
    """
    settings = get_settings()
    _require(supabase_url=settings.supabase_url, supabase_anon_key=settings.supabase_anon_key)
    options = ClientOptions(auto_refresh_token=False)
    if storage is not None:
        options.storage = storage
    return create_client(settings.supabase_url, settings.supabase_anon_key, options=options)


def reset_client_cache() -> None:
    """
    Reset the cached service-role client.

    Useful for testing or when configuration changes.
    """
    global _service_client
    _service_client = None
