"""
Authentication module data models.

These models define the data structures used by the auth module
and exposed to other modules through the interface.
"""

from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, Field, EmailStr, field_validator

from shared.models import CamelModel


class User(BaseModel):
    """
    A stored user account.

    Holds both identity (owned by the credential store) and the
    entitlement fields the ledger mutates. The password hash never
    leaves the backend: response models copy the public fields only.
    """

    id: str = Field(..., description="User ID (UUID)")
    email: str = Field(..., description="Lower-cased login email")
    name: str = Field(..., description="Display name")
    password_hash: str = Field(..., repr=False, description="bcrypt hash")
    is_active: bool = Field(default=True, description="Inactive users fail all authentication")

    # Entitlement state
    free_trials_used: int = Field(default=0, ge=0, description="Trials consumed so far")
    is_subscribed: bool = Field(default=False, description="Stored subscription flag")
    subscription_expires_at: Optional[datetime] = Field(
        None,
        description="End of the paid window; cleared when the subscription lapses",
    )

    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    last_login_at: Optional[datetime] = None


class TokenPayload(BaseModel):
    """Decoded session token claims."""

    sub: str = Field(..., description="Subject (user ID)")
    email: str = Field(..., description="User's email")
    name: str = Field(default="", description="User's display name")
    iat: int = Field(..., description="Issued at timestamp")
    exp: int = Field(..., description="Expiration timestamp")


class RegisterRequest(BaseModel):
    """Request body for POST /register."""

    email: EmailStr
    name: str = Field(..., min_length=2)
    password: str = Field(..., min_length=6)

    @field_validator("name")
    @classmethod
    def strip_name(cls, value: str) -> str:
        value = value.strip()
        if len(value) < 2:
            raise ValueError("Name must be at least 2 characters")
        return value


class LoginRequest(BaseModel):
    """Request body for POST /login."""

    email: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class TokenValidationRequest(BaseModel):
    """Request body for POST /validate-token."""

    token: str = Field(..., min_length=1, description="Session token to validate")


class UserPublic(CamelModel):
    """User identity as returned to clients."""

    id: str
    email: str
    name: str


class UserEntitlementView(UserPublic):
    """User identity plus entitlement fields."""

    free_trials_used: int = 0
    is_subscribed: bool = False
    subscription_expires_at: Optional[datetime] = None

    @classmethod
    def from_user(cls, user: User) -> "UserEntitlementView":
        return cls(
            id=user.id,
            email=user.email,
            name=user.name,
            free_trials_used=user.free_trials_used,
            is_subscribed=user.is_subscribed,
            subscription_expires_at=user.subscription_expires_at,
        )


class AuthResponse(CamelModel):
    """Response from register and login."""

    success: bool = True
    message: str
    token: str
    user: UserPublic


class TokenValidationResponse(CamelModel):
    """
    Response from token validation.

    This is the composite entitlement check used by the web client and
    the browser extension: an invalid token is reported in-band with
    ``valid=False`` rather than as an HTTP error.
    """

    valid: bool = Field(..., description="Whether the token is valid")
    user: Optional[UserEntitlementView] = Field(None, description="User if valid")
    can_use_service: bool = False
    message: str = ""
    remaining_trials: int = 0
    error: Optional[str] = Field(None, description="Error message if invalid")
