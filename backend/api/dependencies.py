"""
Dependency injection setup for FastAPI.

This module provides the "container" that wires together all module
implementations. Each module exposes its service through an interface,
and this file creates the concrete implementations.

Services that hold no per-browser state are container singletons.
Services bound to a browser session are built per request from the
session cookie (see api.session).
"""

from typing import TYPE_CHECKING

from fastapi import Depends

from modules.auth.session_client import SessionClient
from .session import get_session_client

# Type checking imports for interfaces (avoids circular imports)
if TYPE_CHECKING:
    from supabase import Client
    from modules.auth.interfaces import IAuthService
    from modules.auth.profile_resolver import ProfileResolver
    from modules.activity.service import ActivityService
    from modules.content.service import ContentService
    from modules.customers.service import CustomerService
    from modules.devices.service import DeviceService
    from modules.distributors.service import DistributorService
    from modules.passwords.service import PasswordService


class ServiceContainer:
    """
    Container for all service instances.

    This class manages the lifecycle of service instances and their
    dependencies. Services are created lazily on first access.

    All services are cached as singletons within the container.
    Use reset() to clear all cached services for testing.
    """

    def __init__(self) -> None:
        self._db: "Client | None" = None
        self._resolver: "ProfileResolver | None" = None
        self._auth_service: "IAuthService | None" = None
        self._activity_service: "ActivityService | None" = None
        self._content_service: "ContentService | None" = None
        self._customer_service: "CustomerService | None" = None
        self._device_service: "DeviceService | None" = None
        self._distributor_service: "DistributorService | None" = None

    @property
    def db(self) -> "Client":
        """Service-role Supabase client shared by every singleton."""
        if self._db is None:
            from shared.database import get_supabase_client
            self._db = get_supabase_client()
        return self._db

    @property
    def resolver(self) -> "ProfileResolver":
        """Get the profile resolver instance."""
        if self._resolver is None:
            from modules.auth.profile_resolver import ProfileResolver
            from shared.config import get_settings
            self._resolver = ProfileResolver(self.db, get_settings().auth_table_layout)
        return self._resolver

    @property
    def activity(self) -> "ActivityService":
        """Get the activity service instance."""
        if self._activity_service is None:
            from modules.activity.service import ActivityService
            self._activity_service = ActivityService(self.db)
        return self._activity_service

    @property
    def auth(self) -> "IAuthService":
        """Get the auth service instance."""
        if self._auth_service is None:
            from modules.auth.service import AuthService
            self._auth_service = AuthService(
                resolver=self.resolver,
                record_login=self.activity.record_login,
            )
        return self._auth_service

    @property
    def content(self) -> "ContentService":
        """Get the content service instance."""
        if self._content_service is None:
            from modules.content.service import ContentService
            self._content_service = ContentService(self.db, activity=self.activity)
        return self._content_service

    @property
    def customers(self) -> "CustomerService":
        """Get the customer service instance."""
        if self._customer_service is None:
            from modules.customers.service import CustomerService
            self._customer_service = CustomerService(self.db)
        return self._customer_service

    @property
    def devices(self) -> "DeviceService":
        """Get the device service instance."""
        if self._device_service is None:
            from modules.devices.service import DeviceService
            self._device_service = DeviceService(self.db)
        return self._device_service

    @property
    def distributors(self) -> "DistributorService":
        """Get the distributor management service instance."""
        if self._distributor_service is None:
            from modules.distributors.service import DistributorService
            self._distributor_service = DistributorService(self.db)
        return self._distributor_service

    def reset(self) -> None:
        """
        Reset all cached services.

        This is primarily for testing - allows tests to get fresh
        service instances with different mock dependencies.
        """
        self._db = None
        self._resolver = None
        self._auth_service = None
        self._activity_service = None
        self._content_service = None
        self._customer_service = None
        self._device_service = None
        self._distributor_service = None


# Module-level container singleton
_container: ServiceContainer | None = None


def get_container() -> ServiceContainer:
    """Get the singleton service container."""
    global _container
    if _container is None:
        _container = ServiceContainer()
    return _container


def reset_container() -> None:
    """
    Reset the service container.

    This clears the cached container, so the next call to get_container()
    will create a fresh container with new service instances.

    Primarily used for testing.
    """
    global _container
    _container = None


# FastAPI dependency functions
# These are the functions that should be used in route Depends() calls


def get_auth_service() -> "IAuthService":
    """FastAPI dependency for auth service."""
    return get_container().auth


def get_profile_resolver() -> "ProfileResolver":
    """FastAPI dependency for the profile resolver."""
    return get_container().resolver


def get_activity_service() -> "ActivityService":
    """FastAPI dependency for activity service."""
    return get_container().activity


def get_content_service() -> "ContentService":
    """FastAPI dependency for content service."""
    return get_container().content


def get_customer_service() -> "CustomerService":
    """FastAPI dependency for customer service."""
    return get_container().customers


def get_device_service() -> "DeviceService":
    """FastAPI dependency for device service."""
    return get_container().devices


def get_distributor_service() -> "DistributorService":
    """FastAPI dependency for distributor management service."""
    return get_container().distributors


def get_password_service(
    session_client: SessionClient = Depends(get_session_client),
) -> "PasswordService":
    """FastAPI dependency for the password service of this browser."""
    from modules.passwords.service import PasswordService
    return PasswordService(session_client, get_container().resolver)
