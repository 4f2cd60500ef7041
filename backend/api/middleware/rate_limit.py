"""
Per-client rate limiting.

Fixed-window counters keyed by client address, held in a cachetools
TTLCache so idle clients age out on their own. Limits are per process.
"""

import logging
import math
import time
from typing import Callable

from cachetools import TTLCache
from fastapi import Request

from shared.config import Settings
from shared.exceptions import RateLimitError

logger = logging.getLogger(__name__)

MAX_TRACKED_CLIENTS = 100_000


class RateLimiter:
    """
    Fixed-window limiter.

    Args:
        name: Limiter name, for logs
        max_requests: Requests allowed per window
        window_seconds: Window length
        message: Error message when the limit is hit
        enabled: When False, hit() never raises
        timer: Monotonic clock; injectable for tests
    """

    def __init__(
        self,
        name: str,
        max_requests: int,
        window_seconds: int,
        message: str = "Too many requests, please try again later",
        enabled: bool = True,
        timer: Callable[[], float] = time.monotonic,
    ):
        self.name = name
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self.message = message
        self.enabled = enabled
        self._timer = timer
        # client -> (window start, count)
        self._windows: TTLCache = TTLCache(
            maxsize=MAX_TRACKED_CLIENTS,
            ttl=window_seconds,
            timer=timer,
        )

    def hit(self, client: str) -> None:
        """
        Count one request for a client.

        Raises:
            RateLimitError: If the client is over its limit for this window
        """
        if not self.enabled:
            return

        now = self._timer()
        window_start, count = self._windows.get(client, (now, 0))
        if now - window_start >= self.window_seconds:
            window_start, count = now, 0

        if count >= self.max_requests:
            retry_after = math.ceil(self.window_seconds - (now - window_start))
            logger.warning(f"Rate limit '{self.name}' exceeded by {client}")
            raise RateLimitError(self.message, retry_after=max(retry_after, 1))

        self._windows[client] = (window_start, count + 1)

    def reset(self) -> None:
        self._windows.clear()


def build_rate_limiters(settings: Settings) -> dict[str, RateLimiter]:
    """The named limiters used by the routes."""
    enabled = settings.rate_limit_enabled
    return {
        "auth": RateLimiter(
            "auth",
            settings.rate_limit_auth_requests,
            settings.rate_limit_auth_window,
            message="Too many login attempts, please try again after 15 minutes",
            enabled=enabled,
        ),
        "api": RateLimiter(
            "api",
            settings.rate_limit_api_requests,
            settings.rate_limit_api_window,
            enabled=enabled,
        ),
        "payment": RateLimiter(
            "payment",
            settings.rate_limit_payment_requests,
            settings.rate_limit_payment_window,
            message="Too many payment attempts, please try again after 1 hour",
            enabled=enabled,
        ),
        "read": RateLimiter(
            "read",
            settings.rate_limit_read_requests,
            settings.rate_limit_read_window,
            message="Too many requests, please try again in a moment",
            enabled=enabled,
        ),
    }


def client_key(request: Request) -> str:
    return request.client.host if request.client else "unknown"


def rate_limit(name: str):
    """
    Build a route dependency that applies the named limiter.

    Usage:
        @router.post("/login", dependencies=[Depends(rate_limit("auth"))])
    """

    async def _check(request: Request) -> None:
        limiter = request.app.state.container.rate_limiters[name]
        limiter.hit(client_key(request))

    return _check
