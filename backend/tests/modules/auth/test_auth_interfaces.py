import pytest
from unittest.mock import MagicMock

from modules.auth.interfaces import IAuthService
from modules.auth.profile_resolver import ProfileResolver
from modules.auth.service import AuthService

INTERFACE_METHODS = [
    "validate_token",
    "get_portal_user",
    "login",
    "start_oauth",
    "request_password_reset",
    "sign_out",
]


class TestAuthInterface:
    def test_interface_methods_exist(self):
        """IAuthService should define required methods."""
        for method in INTERFACE_METHODS:
            assert hasattr(IAuthService, method)

    def test_auth_service_has_interface_methods(self):
        """AuthService should have all IAuthService methods."""
        for method in INTERFACE_METHODS:
            assert hasattr(AuthService, method)
            assert callable(getattr(AuthService, method))

    def test_service_instance_satisfies_protocol(self, settings):
        service = AuthService(ProfileResolver(MagicMock()), settings)
        assert isinstance(service, IAuthService)
