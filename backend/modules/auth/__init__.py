"""
Authentication module.

Handles the credential store, session tokens and account checks.

Public API:
- IAuthService / AuthService: register, login, authenticate
- IUserRepository: credential store (in-memory and Supabase implementations)
- TokenIssuer: HS256 session tokens
- Auth exceptions: InvalidTokenError, AccountInactiveError, etc.
"""

from .interfaces import IAuthService, IUserRepository
from .service import AuthService
from .tokens import TokenIssuer, utc_now
from .repository import InMemoryUserRepository, SupabaseUserRepository
from .models import (
    User,
    TokenPayload,
    RegisterRequest,
    LoginRequest,
    TokenValidationRequest,
    UserPublic,
    UserEntitlementView,
    AuthResponse,
    TokenValidationResponse,
)
from .exceptions import (
    AuthenticationRequiredError,
    InvalidTokenError,
    AccountInactiveError,
    InvalidCredentialsError,
    EmailAlreadyRegisteredError,
    UserNotFoundError,
)

__all__ = [
    # Interfaces
    "IAuthService",
    "IUserRepository",
    # Implementations
    "AuthService",
    "TokenIssuer",
    "utc_now",
    "InMemoryUserRepository",
    "SupabaseUserRepository",
    # Models
    "User",
    "TokenPayload",
    "RegisterRequest",
    "LoginRequest",
    "TokenValidationRequest",
    "UserPublic",
    "UserEntitlementView",
    "AuthResponse",
    "TokenValidationResponse",
    # Exceptions
    "AuthenticationRequiredError",
    "InvalidTokenError",
    "AccountInactiveError",
    "InvalidCredentialsError",
    "EmailAlreadyRegisteredError",
    "UserNotFoundError",
]
