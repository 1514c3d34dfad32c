"""Tests for the in-process TTL result cache."""

import pytest

from src.cache import ResultCache
from src.cache.keys import instagram_profile_key, instagram_search_key, profile_snapshot_key


class FakeClock:
    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


class TestResultCache:
    """Tests for TTL expiry and the disabled mode."""

    def test_hit_within_ttl(self):
        clock = FakeClock()
        cache = ResultCache(ttl_seconds=60, clock=clock)
        cache.set("k", "v")
        clock.now += 59
        assert cache.get("k") == "v"
        assert cache.stats.hits == 1

    def test_expired_entry_is_miss_and_evicted(self):
        clock = FakeClock()
        cache = ResultCache(ttl_seconds=60, clock=clock)
        cache.set("k", "v")
        clock.now += 61
        assert cache.get("k") is None
        assert len(cache) == 0
        assert cache.stats.expirations == 1
        assert cache.stats.misses == 1

    def test_expiry_only_on_read(self):
        clock = FakeClock()
        cache = ResultCache(ttl_seconds=1, clock=clock)
        cache.set("a", 1)
        cache.set("b", 2)
        clock.now += 5
        assert len(cache) == 2
        cache.get("a")
        assert len(cache) == 1

    def test_set_refreshes_timestamp(self):
        clock = FakeClock()
        cache = ResultCache(ttl_seconds=10, clock=clock)
        cache.set("k", "old")
        clock.now += 8
        cache.set("k", "new")
        clock.now += 8
        assert cache.get("k") == "new"

    def test_zero_ttl_disables_caching(self):
        cache = ResultCache(ttl_seconds=0)
        cache.set("k", "v")
        assert cache.get("k") is None
        assert cache.get("k") is None
        assert cache.stats.misses == 2
        assert len(cache) == 0
        assert cache.enabled is False

    def test_negative_ttl_rejected(self):
        with pytest.raises(ValueError):
            ResultCache(ttl_seconds=-1)

    def test_missing_key(self):
        cache = ResultCache()
        assert cache.get("absent") is None
        assert cache.stats.to_dict() == {"hits": 0, "misses": 1, "expirations": 0}

    def test_invalidate_and_clear(self):
        cache = ResultCache()
        cache.set("a", 1)
        cache.set("b", 2)
        assert cache.invalidate("a") is True
        assert cache.invalidate("a") is False
        cache.clear()
        assert len(cache) == 0


class TestCacheKeys:
    """Tests for cache key naming."""

    def test_profile_key(self):
        assert instagram_profile_key("natgeo") == "social:instagram:profile:natgeo"

    def test_search_key_normalizes_query(self):
        assert instagram_search_key("  Travel ", 10) == "social:instagram:search:travel:10"

    def test_profile_key_per_platform(self):
        assert profile_snapshot_key("youtube", "mkbhd") == "social:youtube:profile:mkbhd"
