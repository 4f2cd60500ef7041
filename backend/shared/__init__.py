"""
Shared infrastructure for Scribe backend.

This package contains cross-cutting concerns that are used by multiple modules:
- config: Centralized settings management
- database: Supabase client factory
- exceptions: Base exception classes
- logging_config: Process-wide logging setup

Note: Business logic should NOT go here. This is for infrastructure only.
"""

from .config import Settings, get_settings, validate_settings
from .database import create_supabase_client
from .exceptions import (
    ScribeError,
    NotFoundError,
    ValidationError,
    ConflictError,
    AuthenticationError,
    AuthorizationError,
    RateLimitError,
    ExternalServiceError,
)
from .logging_config import configure_logging
from .models import AuthenticatedUser, CamelModel

__all__ = [
    "Settings",
    "get_settings",
    "validate_settings",
    "create_supabase_client",
    "configure_logging",
    "ScribeError",
    "NotFoundError",
    "ValidationError",
    "ConflictError",
    "AuthenticationError",
    "AuthorizationError",
    "RateLimitError",
    "ExternalServiceError",
    "AuthenticatedUser",
    "CamelModel",
]
