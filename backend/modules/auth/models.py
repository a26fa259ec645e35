"""
Authentication module data models.

These models define the data structures used by the auth module
and exposed to other modules through the interface.
"""

from enum import Enum
from typing import Any, Optional
from pydantic import BaseModel, Field

from shared.models import UserRole


class JWTPayload(BaseModel):
    """
    Decoded JWT token payload from Supabase.

    This matches the structure of Supabase Auth JWTs.
    """

    sub: str = Field(..., description="Subject (user ID)")
    email: Optional[str] = Field(None, description="User's email")
    email_confirmed_at: Optional[str] = Field(None, description="Email confirmation time")
    exp: int = Field(..., description="Expiration timestamp")
    iat: int = Field(..., description="Issued at timestamp")
    aud: str = Field(default="authenticated", description="Audience")
    role: str = Field(default="authenticated", description="User role")

    # Supabase-specific claims
    app_metadata: dict = Field(default_factory=dict)
    user_metadata: dict = Field(default_factory=dict)


class SessionUser(BaseModel):
    """The identity-provider account attached to a session."""

    id: str
    email: Optional[str] = None
    app_metadata: dict[str, Any] = Field(default_factory=dict)
    user_metadata: dict[str, Any] = Field(default_factory=dict)

    model_config = {"extra": "ignore"}

    @property
    def provider(self) -> Optional[str]:
        """Sign-in provider recorded by Supabase (email, google, azure...)."""
        return self.app_metadata.get("provider")


class Session(BaseModel):
    """
    An authenticated session issued by Supabase Auth.

    The backend only keeps a reference to it; issuing, refreshing and
    revoking are owned by the provider.
    """

    access_token: str
    refresh_token: str
    expires_at: Optional[int] = None
    user: SessionUser

    model_config = {"extra": "ignore"}


class ProfileStatus(str, Enum):
    """Lifecycle status of an authorization record."""

    PENDING = "pending"
    ACTIVE = "active"
    INACTIVE = "inactive"


class Profile(BaseModel):
    """Row of the user_profiles table (distributor users, and admins in the single-table layout)."""

    id: str
    email: Optional[str] = None
    full_name: Optional[str] = None
    company_name: Optional[str] = None
    role: UserRole = UserRole.DISTRIBUTOR
    status: ProfileStatus = ProfileStatus.ACTIVE
    territory: Optional[str] = None
    distributor_id: Optional[str] = None

    model_config = {"extra": "ignore"}


class AdminUser(BaseModel):
    """Row of the admin_users table (dual-table layout only)."""

    id: str
    role: str = "admin"
    status: ProfileStatus = ProfileStatus.ACTIVE
    email: Optional[str] = None
    full_name: Optional[str] = None

    model_config = {"extra": "ignore"}


class ResolutionKind(str, Enum):
    """Outcome of looking a user up in the authorization tables."""

    ADMIN = "admin"
    DISTRIBUTOR = "distributor"
    NONE = "none"
    CONFLICT = "conflict"


class ProfileResolution(BaseModel):
    """Result of ProfileResolver.resolve."""

    kind: ResolutionKind
    record: Optional[Profile | AdminUser] = None
    table: Optional[str] = Field(None, description="Table the record was read from")

    @property
    def role(self) -> Optional[UserRole]:
        if self.kind == ResolutionKind.ADMIN:
            return UserRole.ADMIN
        if self.kind == ResolutionKind.DISTRIBUTOR:
            return UserRole.DISTRIBUTOR
        return None

    @property
    def status(self) -> Optional[ProfileStatus]:
        return self.record.status if self.record is not None else None


class LoginRequest(BaseModel):
    """Email/password credentials submitted by a login form."""

    email: str = Field(..., min_length=3)
    password: str = Field(..., min_length=1)


class ForgotPasswordRequest(BaseModel):
    """Request a password reset email."""

    email: str = Field(..., min_length=3)


class LoginResponse(BaseModel):
    """Successful sign-in result returned to the browser."""

    user_id: str
    email: Optional[str] = None
    role: UserRole
    redirect_to: str
    expires_at: Optional[int] = None


class OAuthStartResponse(BaseModel):
    """Authorization URL the browser should be sent to."""

    provider: str
    url: str


class RouteAccess(BaseModel):
    """Whether a browser route may be shown, and where to go otherwise."""

    path: str
    allowed: bool
    redirect_to: Optional[str] = None
