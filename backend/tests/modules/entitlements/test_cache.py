"""Tests for the entitlement cache."""

from modules.entitlements.cache import EntitlementCache


class ManualTimer:
    def __init__(self):
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


class TestEntitlementCache:
    def test_set_and_get(self):
        cache = EntitlementCache()
        cache.set("user-1", "summary")
        assert cache.get("user-1") == "summary"

    def test_miss(self):
        assert EntitlementCache().get("user-1") is None

    def test_entries_expire_after_ttl(self):
        timer = ManualTimer()
        cache = EntitlementCache(ttl=180, timer=timer)
        cache.set("user-1", "summary")

        timer.now = 179
        assert cache.get("user-1") == "summary"

        timer.now = 181
        assert cache.get("user-1") is None

    def test_invalidate(self):
        cache = EntitlementCache()
        cache.set("user-1", "a")
        cache.set("user-2", "b")
        cache.invalidate("user-1")
        assert cache.get("user-1") is None
        assert cache.get("user-2") == "b"

    def test_invalidate_missing_is_noop(self):
        EntitlementCache().invalidate("nobody")

    def test_set_after_invalidation_is_dropped(self):
        cache = EntitlementCache()
        generation = cache.generation("user-1")
        cache.invalidate("user-1")

        assert cache.set("user-1", "stale", generation=generation) is False
        assert cache.get("user-1") is None

        fresh = cache.generation("user-1")
        assert cache.set("user-1", "fresh", generation=fresh) is True
        assert cache.get("user-1") == "fresh"

    def test_clear(self):
        cache = EntitlementCache()
        cache.set("user-1", "a")
        cache.clear()
        assert cache.stats()["size"] == 0

    def test_maxsize_evicts(self):
        cache = EntitlementCache(maxsize=2)
        for user_id in ("a", "b", "c"):
            cache.set(user_id, user_id)
        assert cache.stats()["size"] == 2

    def test_stats_count_hits_and_misses(self):
        cache = EntitlementCache(ttl=60, maxsize=10)
        cache.set("user-1", "a")
        cache.get("user-1")
        cache.get("user-1")
        cache.get("user-2")
        assert cache.stats() == {
            "size": 1,
            "maxsize": 10,
            "ttl": 60,
            "hits": 2,
            "misses": 1,
        }
