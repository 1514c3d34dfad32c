"""Cache key naming conventions.

All keys are namespaced with 'social:' prefix.
"""

# Live profile snapshots, any platform (TTL: cache_ttl_seconds)
PROFILE_SNAPSHOT = "social:{platform}:profile:{handle}"

# Instagram topsearch results (TTL: cache_ttl_seconds)
INSTAGRAM_SEARCH = "social:instagram:search:{query}:{limit}"


def profile_snapshot_key(platform: str, handle: str) -> str:
    return PROFILE_SNAPSHOT.format(platform=platform, handle=handle)


def instagram_profile_key(handle: str) -> str:
    return profile_snapshot_key("instagram", handle)


def instagram_search_key(query: str, limit: int) -> str:
    return INSTAGRAM_SEARCH.format(query=query.strip().lower(), limit=limit)
