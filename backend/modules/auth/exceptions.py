"""
Authentication module exceptions.

These exceptions are raised by the auth module and can be caught
by API error handlers to return appropriate HTTP responses.

Every identity-layer failure is terminal for the request; clients are
expected to treat all of them as "please log in again".
"""

from shared.exceptions import AuthenticationError, NotFoundError, ValidationError


class AuthenticationRequiredError(AuthenticationError):
    """Raised when no token is supplied or it is not token-shaped."""

    def __init__(self, message: str = "Token is missing"):
        super().__init__(message, code="AUTHENTICATION_REQUIRED")


class InvalidTokenError(AuthenticationError):
    """
    Raised when a session token fails verification.

    Bad signature, malformed structure and expiry all raise this same
    error so callers cannot leak the cause beyond "reauthenticate".
    """

    def __init__(self, message: str = "Token is invalid or has expired"):
        super().__init__(message, code="INVALID_TOKEN")


class AccountInactiveError(AuthenticationError):
    """Raised when the token's account is missing or deactivated."""

    def __init__(self, message: str = "User account has been deactivated"):
        super().__init__(message, code="ACCOUNT_INACTIVE")


class InvalidCredentialsError(AuthenticationError):
    """Raised when login email or password is wrong."""

    def __init__(self):
        super().__init__("Invalid email or password", code="INVALID_CREDENTIALS")


class EmailAlreadyRegisteredError(ValidationError):
    """Raised when registering an email that already has an account."""

    def __init__(self, email: str):
        super().__init__(
            "User with this email already exists",
            code="EMAIL_ALREADY_REGISTERED",
            details={"email": email},
        )


class UserNotFoundError(NotFoundError):
    """Raised when a user id does not exist in the credential store."""

    def __init__(self, user_id: str):
        super().__init__(
            f"User not found: {user_id}",
            code="USER_NOT_FOUND",
            details={"user_id": user_id},
        )
