"""
Centralized configuration for the distributor portal backend.

All settings are loaded from environment variables with sensible defaults.
Module-specific settings should be namespaced (e.g., SUPABASE_*, SESSION_*).
"""

from functools import lru_cache
from typing import Literal
from pydantic_settings import BaseSettings, SettingsConfigDict

from .exceptions import ConfigurationError


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "Distributor Portal API"
    app_version: str = "0.1.0"
    debug: bool = False
    log_level: str = "INFO"

    # Server
    host: str = "0.0.0.0"
    port: int = 8000
    reload: bool = False

    # CORS settings
    cors_origins: list[str] = ["http://localhost:5173", "http://localhost:3000"]
    cors_allow_credentials: bool = True
    cors_allow_methods: list[str] = ["*"]
    cors_allow_headers: list[str] = ["*"]

    # Supabase
    supabase_url: str = ""
    supabase_anon_key: str = ""
    supabase_service_role_key: str = ""
    supabase_jwt_secret: str = ""
    supabase_db_url: str = ""

    # Frontend URLs (for redirects)
    frontend_url: str = "http://localhost:5173"

    # Authorization lookup: one user_profiles table, or admin_users + user_profiles
    auth_table_layout: Literal["single", "dual"] = "dual"

    # Session cookie
    session_cookie_name: str = "sb-auth-token"
    session_cookie_secure: bool = True
    session_cookie_max_age: int = 60 * 60 * 24 * 7
    # PKCE verifier cookie, alive only between OAuth start and callback
    code_verifier_max_age: int = 600

    # Auth callback redirect delays (seconds)
    callback_success_delay: float = 1.0
    callback_denied_delay: float = 4.0
    callback_error_delay: float = 3.0
    password_success_delay: float = 2.0

    # Data views
    write_timeout_seconds: float = 15.0
    atomic_counters: bool = True

    # Feature Flags
    activity_tracking_enabled: bool = True

    def require_supabase(self) -> None:
        """
        Fail fast when the backend URL or anonymous key is missing.

        Raises:
            ConfigurationError: If SUPABASE_URL or SUPABASE_ANON_KEY is unset
        """
        missing = [
            name
            for name, value in (
                ("SUPABASE_URL", self.supabase_url),
                ("SUPABASE_ANON_KEY", self.supabase_anon_key),
            )
            if not value
        ]
        if missing:
            raise ConfigurationError(
                f"Missing Supabase environment variables: {', '.join(missing)}",
                details={"missing": missing},
            )


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses lru_cache to ensure settings are only loaded once.
    """
    return Settings()
