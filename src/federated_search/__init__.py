"""Federated Search.

Concurrent multi-platform account search with per-provider failure
isolation, plus the provider adapters (catalog, YouTube, X, Facebook,
Instagram, TikTok). The live adapters also serve per-handle profile
snapshots.
"""

from src.federated_search.base import (
    AdapterError,
    AdapterNotConfiguredError,
    FunctionAdapter,
    SearchAdapter,
    build_result,
    parse_followers,
    require_exact_handle,
)
from src.federated_search.aggregator import (
    DEFAULT_FEDERATED_PLATFORMS,
    AggregatorConfig,
    FederatedSearchAggregator,
    FederatedSearchResponse,
)
from src.federated_search.catalog_adapter import CatalogSearchAdapter
from src.federated_search.facebook import FacebookPagesAdapter
from src.federated_search.instagram import (
    InstagramClient,
    InstagramConfig,
    InstagramHandleAdapter,
)
from src.federated_search.profiles import (
    HttpProviderAdapter,
    ProfileProvider,
    ProfileSnapshot,
    build_profile_snapshot,
)
from src.federated_search.tiktok import TikTokHandleAdapter
from src.federated_search.x_search import XSearchAdapter
from src.federated_search.youtube import YouTubeSearchAdapter
from src.federated_search.registry import build_adapters, build_aggregator, profile_providers

__all__ = [
    # Base
    "AdapterError",
    "AdapterNotConfiguredError",
    "FunctionAdapter",
    "SearchAdapter",
    "build_result",
    "parse_followers",
    "require_exact_handle",
    # Aggregator
    "DEFAULT_FEDERATED_PLATFORMS",
    "AggregatorConfig",
    "FederatedSearchAggregator",
    "FederatedSearchResponse",
    # Adapters
    "CatalogSearchAdapter",
    "FacebookPagesAdapter",
    "InstagramClient",
    "InstagramConfig",
    "InstagramHandleAdapter",
    "TikTokHandleAdapter",
    "XSearchAdapter",
    "YouTubeSearchAdapter",
    # Live profiles
    "HttpProviderAdapter",
    "ProfileProvider",
    "ProfileSnapshot",
    "build_profile_snapshot",
    # Wiring
    "build_adapters",
    "build_aggregator",
    "profile_providers",
]
