"""
Base exception classes for the Scribe backend.

Each module should define its own exceptions that inherit from these bases.
This enables consistent error handling across the application.
"""

from typing import Optional, Any


class ScribeError(Exception):
    """
    Base exception for all Scribe errors.

    All custom exceptions should inherit from this class.
    """

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to a dictionary for API responses."""
        return {
            "error": self.code,
            "message": self.message,
            "details": self.details,
        }


class NotFoundError(ScribeError):
    """Resource not found."""

    pass


class ValidationError(ScribeError):
    """Input validation failed."""

    pass


class ConflictError(ScribeError):
    """The request conflicts with state that already exists."""

    pass


class AuthenticationError(ScribeError):
    """Authentication failed (invalid or missing credentials)."""

    pass


class AuthorizationError(ScribeError):
    """Authorization failed (insufficient permissions or entitlement)."""

    pass


class RateLimitError(ScribeError):
    """Too many requests from a single client."""

    def __init__(self, message: str, retry_after: int):
        super().__init__(
            message,
            code="RATE_LIMITED",
            details={"retry_after": retry_after},
        )
        self.retry_after = retry_after


class ExternalServiceError(ScribeError):
    """Error communicating with an external service."""

    def __init__(
        self,
        message: str,
        service: str,
        code: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message, code, details)
        self.service = service
        self.details["service"] = service
