"""Social Catalog.

Platform registry, handle sanitizing, record normalization, the
rebuildable profile catalog and the query service over it.
"""

from src.social_catalog.platforms import (
    PLATFORM_ALIASES,
    PLATFORM_LABELS,
    ParsedPlatforms,
    Platform,
    get_platform_label,
    is_platform,
    normalize_platform,
    parse_platform_list,
)
from src.social_catalog.handles import (
    display_handle,
    ensure_handle,
    lookup_key,
    sanitize_handle,
)
from src.social_catalog.models import (
    UNKNOWN_PLATFORM,
    FederatedResult,
    FollowersPoint,
    InfluencerProfile,
    PlatformAccount,
    PlatformData,
    PlatformMetrics,
    Post,
    ProfileSummary,
    SearchIndexEntry,
    SearchIssue,
)
from src.social_catalog.config import CatalogConfig, QueryConfig
from src.social_catalog.normalizer import NormalizationError, normalize_posts, normalize_record
from src.social_catalog.catalog import (
    CatalogLoadReport,
    CatalogSnapshot,
    DatasetError,
    DroppedRecord,
    ProfileCatalog,
    load_records,
)
from src.social_catalog.query import (
    QueryService,
    select_engagement_breakdown,
    select_followers_history,
    select_metrics,
    select_posts,
)

__all__ = [
    # Registry
    "PLATFORM_ALIASES",
    "PLATFORM_LABELS",
    "ParsedPlatforms",
    "Platform",
    "get_platform_label",
    "is_platform",
    "normalize_platform",
    "parse_platform_list",
    # Handles
    "display_handle",
    "ensure_handle",
    "lookup_key",
    "sanitize_handle",
    # Models
    "UNKNOWN_PLATFORM",
    "FederatedResult",
    "FollowersPoint",
    "InfluencerProfile",
    "PlatformAccount",
    "PlatformData",
    "PlatformMetrics",
    "Post",
    "ProfileSummary",
    "SearchIndexEntry",
    "SearchIssue",
    # Catalog
    "CatalogConfig",
    "CatalogLoadReport",
    "CatalogSnapshot",
    "DatasetError",
    "DroppedRecord",
    "NormalizationError",
    "ProfileCatalog",
    "load_records",
    "normalize_posts",
    "normalize_record",
    # Query
    "QueryConfig",
    "QueryService",
    "select_engagement_breakdown",
    "select_followers_history",
    "select_metrics",
    "select_posts",
]
