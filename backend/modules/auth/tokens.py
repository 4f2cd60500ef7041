"""
Session token issuing and verification.

Tokens are stateless HS256 JWTs. Nothing is persisted: a token is valid
if and only if its signature matches the server secret and its expiry
is still ahead of the clock.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

import jwt
from pydantic import ValidationError as PydanticValidationError

from .models import TokenPayload
from .exceptions import InvalidTokenError

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]

DEFAULT_TOKEN_TTL = timedelta(days=30)
REQUIRED_CLAIMS = ["sub", "email", "iat", "exp"]


def utc_now() -> datetime:
    """Default clock."""
    return datetime.now(timezone.utc)


class TokenIssuer:
    """
    Mints and verifies session tokens.

    A pure function of secret + payload + clock. The clock is injectable
    so expiry can be exercised without waiting 30 days.
    """

    def __init__(
        self,
        secret: str,
        algorithm: str = "HS256",
        ttl: timedelta = DEFAULT_TOKEN_TTL,
        clock: Optional[Clock] = None,
    ):
        if not secret:
            raise ValueError("Token secret must not be empty")
        self._secret = secret
        self._algorithm = algorithm
        self._ttl = ttl
        self._clock = clock or utc_now

    @property
    def ttl(self) -> timedelta:
        return self._ttl

    def issue(self, user_id: str, email: str, name: str = "") -> str:
        """
        Issue a signed token for a user.

        Args:
            user_id: User ID (stored as the ``sub`` claim)
            email: User's email
            name: User's display name

        Returns:
            Encoded JWT valid for the configured TTL
        """
        now = self._clock()
        payload = {
            "sub": user_id,
            "email": email,
            "name": name,
            "iat": int(now.timestamp()),
            "exp": int((now + self._ttl).timestamp()),
        }
        return jwt.encode(payload, self._secret, algorithm=self._algorithm)

    def verify(self, token: str) -> TokenPayload:
        """
        Verify a token and return its claims.

        Time claims are checked against the injected clock rather than
        the wall clock, so PyJWT's own ``exp`` and ``iat`` checks are
        disabled.

        Raises:
            InvalidTokenError: On bad signature, malformed structure,
                missing claims, or expiry
        """
        try:
            claims = jwt.decode(
                token,
                self._secret,
                algorithms=[self._algorithm],
                options={
                    "verify_exp": False,
                    "verify_iat": False,
                    "require": REQUIRED_CLAIMS,
                },
            )
            payload = TokenPayload(**claims)
        except jwt.InvalidTokenError as e:
            logger.debug(f"Token rejected: {e}")
            raise InvalidTokenError()
        except PydanticValidationError:
            logger.debug("Token rejected: claims have unexpected types")
            raise InvalidTokenError()

        if payload.exp <= int(self._clock().timestamp()):
            logger.debug(f"Token rejected: expired for user {payload.sub}")
            raise InvalidTokenError()

        return payload
