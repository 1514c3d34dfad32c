"""Social Catalog Configuration."""

from dataclasses import dataclass


@dataclass
class CatalogConfig:
    """Configuration for catalog loading and indexing."""
    # Keep only the first record for a duplicated (platform, handle) key
    # instead of last-write-wins in the lookup map
    deduplicate_keys: bool = False
    engagement_precision: int = 1  # decimals kept on index engagement rates


@dataclass
class QueryConfig:
    """Limits applied by the query service."""
    search_default_limit: int = 8
    search_max_limit: int = 50
    posts_default_limit: int = 0  # 0 = all posts
