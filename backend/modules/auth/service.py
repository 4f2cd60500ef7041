"""
Authentication service implementation.

Registers and logs in users against the credential store and validates
session tokens issued by TokenIssuer.
"""

import asyncio
import logging
from typing import Optional

from shared.models import AuthenticatedUser

from .interfaces import IAuthService, IUserRepository
from .models import User
from .passwords import hash_password, verify_password
from .tokens import TokenIssuer, Clock, utc_now
from .exceptions import (
    AuthenticationRequiredError,
    AccountInactiveError,
    InvalidCredentialsError,
)

logger = logging.getLogger(__name__)

# Anything shorter cannot be a JWT; reject before touching the verifier
MIN_TOKEN_LENGTH = 10


class AuthService(IAuthService):
    """
    Implementation of the authentication service.

    Passwords are hashed with bcrypt off the event loop. Tokens are
    verified statelessly and then checked against the stored account so a
    deactivated user is locked out even with an unexpired token.
    """

    def __init__(
        self,
        users: IUserRepository,
        issuer: TokenIssuer,
        clock: Optional[Clock] = None,
    ):
        self._users = users
        self._issuer = issuer
        self._clock = clock or utc_now

    async def register(self, email: str, name: str, password: str) -> tuple[User, str]:
        password_hash = await asyncio.to_thread(hash_password, password)
        user = await self._users.create(email=email, name=name.strip(), password_hash=password_hash)
        logger.info(f"Registered user {user.id}")
        return user, self._issue_for(user)

    async def login(self, email: str, password: str) -> tuple[User, str]:
        user = await self._users.get_by_email(email)
        if user is None:
            raise InvalidCredentialsError()

        valid = await asyncio.to_thread(verify_password, password, user.password_hash)
        if not valid:
            logger.info(f"Failed login for user {user.id}")
            raise InvalidCredentialsError()

        if not user.is_active:
            raise AccountInactiveError()

        await self._users.record_login(user.id, self._clock())
        return user, self._issue_for(user)

    async def authenticate(self, token: Optional[str]) -> AuthenticatedUser:
        if not isinstance(token, str) or len(token) < MIN_TOKEN_LENGTH:
            raise AuthenticationRequiredError()

        payload = self._issuer.verify(token)

        user = await self._users.get_by_id(payload.sub)
        if user is None or not user.is_active:
            raise AccountInactiveError()

        return AuthenticatedUser(id=user.id, email=user.email, name=user.name)

    async def get_user_by_id(self, user_id: str) -> Optional[User]:
        return await self._users.get_by_id(user_id)

    async def get_user_by_email(self, email: str) -> Optional[User]:
        return await self._users.get_by_email(email)

    def _issue_for(self, user: User) -> str:
        return self._issuer.issue(user.id, user.email, user.name)
