"""Query Service.

Read operations over the current catalog snapshot: ranked text
search plus per-profile posts, follower history, engagement breakdown
and metrics. Every call captures the snapshot once, so a concurrent
``reload()`` never produces a mixed view.

The per-profile selectors are plain functions over an
InfluencerProfile so that profiles fetched live (not from the catalog)
are served with exactly the same rules.
"""

from dataclasses import replace
from typing import Any, Optional, Union
import copy
import logging

from src.api_errors.validators import coerce_limit, validate_handle, validate_platform
from src.social_catalog.catalog import ProfileCatalog
from src.social_catalog.config import QueryConfig
from src.social_catalog.handles import lookup_key
from src.social_catalog.models import (
    FollowersPoint,
    InfluencerProfile,
    PlatformMetrics,
    Post,
    SearchIndexEntry,
)
from src.social_catalog.platforms import Platform

logger = logging.getLogger(__name__)


# ═══════════════════════════════════════════════════════════════════════
# Per-profile selectors
# ═══════════════════════════════════════════════════════════════════════


def select_posts(profile: InfluencerProfile, platform: Platform, limit: Any = None) -> list[Post]:
    """Platform posts, truncated to ``limit`` (missing or non-positive: all)."""
    data = profile.platform_data(platform)
    if data is None:
        return []
    posts = list(data.posts)
    count = coerce_limit(limit, default=0)
    return posts[:count] if count > 0 else posts


def select_followers_history(
    profile: InfluencerProfile,
    platform: Platform,
    weeks: Any = None,
) -> list[FollowersPoint]:
    """Most recent ``weeks`` points of the follower series, oldest first."""
    data = profile.platform_data(platform)
    if data is None or not data.followers_series:
        return []
    series = list(data.followers_series)
    count = coerce_limit(weeks, default=0)
    return series[-count:] if count > 0 else series


def select_engagement_breakdown(profile: InfluencerProfile, platform: Platform) -> dict[str, float]:
    data = profile.platform_data(platform)
    if data is None or data.engagement_by_format is None:
        return {}
    return dict(data.engagement_by_format)


def select_metrics(profile: InfluencerProfile, platform: Platform) -> Optional[PlatformMetrics]:
    data = profile.platform_data(platform)
    return data.metrics if data is not None else None


def entry_matches(entry: SearchIndexEntry, query: str) -> bool:
    """Case-folded substring match on name, handle, location or topics.

    ``query`` must already be stripped and lower-cased.
    """
    if not query:
        return True
    if query in entry.display_name.lower():
        return True
    if query.lstrip("@") in entry.normalized_handle:
        return True
    if entry.location and query in entry.location.lower():
        return True
    return any(query in topic.lower() for topic in entry.topics or [])


# ═══════════════════════════════════════════════════════════════════════
# Service
# ═══════════════════════════════════════════════════════════════════════


class QueryService:
    """Read-only contracts over a ProfileCatalog.

    Not-found is a value, never an exception: ``get_profile`` and
    ``get_metrics`` return None, the list/map operations return empty
    containers. Missing or invalid platform/handle input raises
    ``ValidationError``.

    Example:
        service = QueryService(catalog)
        hits = service.search("alice", platform="ig", limit=5)
        points = service.get_followers_history("instagram", "@alice", weeks=4)
    """

    def __init__(self, catalog: ProfileCatalog, config: Optional[QueryConfig] = None):
        self._catalog = catalog
        self._config = config or QueryConfig()

    @property
    def catalog(self) -> ProfileCatalog:
        return self._catalog

    def search(
        self,
        query: Optional[str] = None,
        platform: Union[Platform, str, None] = None,
        limit: Any = None,
    ) -> list[SearchIndexEntry]:
        """Ranked text search over the search index.

        An empty query matches every entry (subject to the platform
        filter). Matches are ordered by followers, descending, ties
        keeping index order, then truncated to the coerced limit.
        """
        snapshot = self._catalog.snapshot
        needle = (query or "").strip().lower()
        platform_filter = None
        if platform is not None and str(platform).strip():
            platform_filter = validate_platform(platform)
        count = coerce_limit(
            limit,
            default=self._config.search_default_limit,
            maximum=self._config.search_max_limit,
        )

        matches = [
            entry for entry in snapshot.entries
            if (platform_filter is None or entry.platform == platform_filter)
            and entry_matches(entry, needle)
        ]
        # sorted() is stable: equal follower counts keep index order
        matches = sorted(matches, key=lambda e: e.followers, reverse=True)
        return [replace(e, topics=list(e.topics) if e.topics is not None else None) for e in matches[:count]]

    def get_profile(self, platform: Union[Platform, str, None], handle: Optional[str]) -> Optional[InfluencerProfile]:
        """Full profile for a platform account, or None if unknown.

        The returned profile is a deep copy; callers may mutate it freely.
        """
        profile = self._find(platform, handle)
        return copy.deepcopy(profile) if profile is not None else None

    def get_posts(self, platform: Union[Platform, str, None], handle: Optional[str], limit: Any = None) -> list[Post]:
        resolved = validate_platform(platform)
        profile = self._find(resolved, handle)
        if profile is None:
            return []
        return select_posts(profile, resolved, limit if limit is not None else self._config.posts_default_limit)

    def get_followers_history(
        self,
        platform: Union[Platform, str, None],
        handle: Optional[str],
        weeks: Any = None,
    ) -> list[FollowersPoint]:
        resolved = validate_platform(platform)
        profile = self._find(resolved, handle)
        if profile is None:
            return []
        return select_followers_history(profile, resolved, weeks)

    def get_engagement_breakdown(self, platform: Union[Platform, str, None], handle: Optional[str]) -> dict[str, float]:
        resolved = validate_platform(platform)
        profile = self._find(resolved, handle)
        if profile is None:
            return {}
        return select_engagement_breakdown(profile, resolved)

    def get_metrics(self, platform: Union[Platform, str, None], handle: Optional[str]) -> Optional[PlatformMetrics]:
        resolved = validate_platform(platform)
        profile = self._find(resolved, handle)
        if profile is None:
            return None
        return select_metrics(profile, resolved)

    def _find(self, platform: Union[Platform, str, None], handle: Optional[str]) -> Optional[InfluencerProfile]:
        resolved = validate_platform(platform)
        handle = validate_handle(handle)
        profile = self._catalog.snapshot.lookup.get(lookup_key(resolved, handle))
        if profile is None:
            logger.debug("No profile for %s on %s", handle, resolved.value)
        return profile
