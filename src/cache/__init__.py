"""TTL result caching for upstream lookups."""

from src.cache.ttl_cache import CacheStats, ResultCache

__all__ = ["CacheStats", "ResultCache"]
