"""
Authentication module interface.

Other modules should depend on these protocols, not the concrete
implementations. The entitlement ledger mutates user rows through
IUserRepository; the request gate authenticates through IAuthService.
"""

from datetime import datetime
from typing import Protocol, Optional, runtime_checkable

from shared.models import AuthenticatedUser

from .models import User


@runtime_checkable
class IUserRepository(Protocol):
    """
    Credential store and entitlement-field persistence.

    Conditional writes (expire_subscription, increment_free_trials) are
    single statements at the storage layer so concurrent requests cannot
    interleave a read and a write.
    """

    async def get_by_id(self, user_id: str) -> Optional[User]:
        """Get a user by ID, or None."""
        ...

    async def get_by_email(self, email: str) -> Optional[User]:
        """Get a user by (case-insensitive) email, or None."""
        ...

    async def create(self, email: str, name: str, password_hash: str) -> User:
        """
        Create a user with zero trials used and no subscription.

        Raises:
            EmailAlreadyRegisteredError: If the email is taken
        """
        ...

    async def record_login(self, user_id: str, at: datetime) -> None:
        """Stamp the last login time."""
        ...

    async def set_active(self, user_id: str, is_active: bool) -> None:
        """Activate or deactivate an account."""
        ...

    async def expire_subscription(
        self,
        user_id: str,
        expected_expires_at: Optional[datetime],
    ) -> bool:
        """
        Clear a lapsed subscription.

        Compare-and-set: only writes when the row is still subscribed with
        the expiry the caller observed, so a concurrent renewal wins.

        Returns:
            True if the row was changed
        """
        ...

    async def increment_free_trials(self, user_id: str) -> Optional[int]:
        """
        Add one to free_trials_used if the user is not subscribed.

        Returns:
            The new count, or None if nothing was written
        """
        ...

    async def set_subscription(self, user_id: str, expires_at: datetime) -> User:
        """
        Mark a user subscribed until expires_at.

        Leaves free_trials_used untouched.

        Raises:
            UserNotFoundError: If the user doesn't exist
        """
        ...


@runtime_checkable
class IAuthService(Protocol):
    """
    Interface for authentication operations.

    This protocol defines the contract that the auth module exposes
    to other modules. Implementations must provide all these methods.
    """

    async def register(self, email: str, name: str, password: str) -> tuple[User, str]:
        """
        Create an account and issue its first token.

        Returns:
            Tuple of (created user, session token)

        Raises:
            EmailAlreadyRegisteredError: If the email is taken
        """
        ...

    async def login(self, email: str, password: str) -> tuple[User, str]:
        """
        Check credentials and issue a token.

        Raises:
            InvalidCredentialsError: If email or password is wrong
            AccountInactiveError: If the account is deactivated
        """
        ...

    async def authenticate(self, token: Optional[str]) -> AuthenticatedUser:
        """
        Validate a session token and return the authenticated user.

        Args:
            token: Raw token from the request, possibly missing

        Returns:
            AuthenticatedUser for an active account

        Raises:
            AuthenticationRequiredError: If the token is missing or malformed
            InvalidTokenError: If verification fails
            AccountInactiveError: If the account is missing or inactive
        """
        ...

    async def get_user_by_id(self, user_id: str) -> Optional[User]:
        """Get a user by ID."""
        ...

    async def get_user_by_email(self, email: str) -> Optional[User]:
        """Get a user by email."""
        ...
