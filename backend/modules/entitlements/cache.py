"""
Entitlement cache.

A TTL-bounded, process-local cache of usage summaries keyed by user id.
It is a read accelerator only: the request gate never consults it, and
every ledger mutation invalidates the affected entry.
"""

import logging
from typing import Any, Optional

from cachetools import TTLCache

from .models import UsageSummary

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 180
DEFAULT_MAXSIZE = 10_000


class EntitlementCache:
    """Usage summary cache over cachetools.TTLCache."""

    def __init__(
        self,
        ttl: int = DEFAULT_TTL_SECONDS,
        maxsize: int = DEFAULT_MAXSIZE,
        timer: Any = None,
    ):
        if timer is None:
            self._cache: TTLCache = TTLCache(maxsize=maxsize, ttl=ttl)
            self._generations: TTLCache = TTLCache(maxsize=maxsize, ttl=ttl)
        else:
            self._cache = TTLCache(maxsize=maxsize, ttl=ttl, timer=timer)
            self._generations = TTLCache(maxsize=maxsize, ttl=ttl, timer=timer)
        self._ttl = ttl
        self._hits = 0
        self._misses = 0

    def get(self, user_id: str) -> Optional[UsageSummary]:
        summary = self._cache.get(user_id)
        if summary is None:
            self._misses += 1
        else:
            self._hits += 1
        return summary

    def generation(self, user_id: str) -> int:
        """Invalidation counter for a user; read it before building a summary."""
        return self._generations.get(user_id, 0)

    def set(
        self,
        user_id: str,
        summary: UsageSummary,
        generation: Optional[int] = None,
    ) -> bool:
        """
        Store a summary.

        When ``generation`` is given, the summary is dropped if the user was
        invalidated after that generation was read.

        Returns:
            True if the summary was stored
        """
        if generation is not None and generation != self.generation(user_id):
            logger.debug(f"Discarded stale summary for user {user_id}")
            return False
        self._cache[user_id] = summary
        return True

    def invalidate(self, user_id: str) -> None:
        self._generations[user_id] = self.generation(user_id) + 1
        if self._cache.pop(user_id, None) is not None:
            logger.debug(f"Invalidated entitlement cache for user {user_id}")

    def clear(self) -> None:
        self._cache.clear()
        self._generations.clear()

    def stats(self) -> dict[str, int]:
        return {
            "size": len(self._cache),
            "maxsize": int(self._cache.maxsize),
            "ttl": self._ttl,
            "hits": self._hits,
            "misses": self._misses,
        }
