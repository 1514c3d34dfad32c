"""Live Profile Snapshots.

Every live platform provider fetches one account by handle and returns
a raw profile dict. ``build_profile_snapshot`` fills in whatever the
provider could not observe and normalizes the result:

- ``avgEngagement`` = average (likes + comments) per post / followers, in %
- ``posts7d`` counted against the current time
- a flat 12-week follower series (no provider exposes history)
- a growth series derived from the follower series
- engagement by format as post counts per format
"""

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Optional, Protocol, runtime_checkable
import logging
import math

import httpx

from src.cache import ResultCache
from src.cache.keys import profile_snapshot_key
from src.federated_search.base import AdapterError, HttpSearchAdapter
from src.social_catalog.handles import display_handle, sanitize_handle
from src.social_catalog.models import (
    FollowersPoint,
    InfluencerProfile,
    PlatformMetrics,
    Post,
    SearchIndexEntry,
    round_half_up,
)
from src.social_catalog.normalizer import normalize_record
from src.social_catalog.platforms import Platform, get_platform_label

logger = logging.getLogger(__name__)

SERIES_WEEKS = 12
RECENT_DAYS = 7
ISO_FORMAT = "%Y-%m-%dT%H:%M:%SZ"


@dataclass
class ProfileSnapshot:
    """Normalized profile plus the derived per-platform views."""
    platform: Platform
    profile: InfluencerProfile
    metrics: PlatformMetrics
    posts: list[Post] = field(default_factory=list)
    followers_series: list[FollowersPoint] = field(default_factory=list)
    engagement_by_format: dict[str, float] = field(default_factory=dict)

    def to_search_entry(self) -> SearchIndexEntry:
        account = self.profile.account(self.platform)
        handle = account.handle if account else ""
        return SearchIndexEntry(
            id=f"{self.platform.value}:{(account.external_id if account else None) or sanitize_handle(handle)}",
            platform=self.platform,
            handle=display_handle(handle),
            display_name=self.profile.display_name,
            followers=self.metrics.followers,
            engagement_rate=round_half_up(self.metrics.avg_engagement, 1),
            verified=self.profile.verified,
            normalized_handle=sanitize_handle(handle),
        )


@runtime_checkable
class ProfileProvider(Protocol):
    """Per-handle live profile lookups for one platform."""

    @property
    def platform(self) -> Platform:
        ...

    async def fetch_snapshot(self, handle: str) -> ProfileSnapshot:
        """Snapshot for ``handle``; raises AdapterError on failure."""
        ...

    async def search_profiles(self, query: str, limit: int) -> list[SearchIndexEntry]:
        """Search index entries for ``query``, at most ``limit`` of them."""
        ...


# ═══════════════════════════════════════════════════════════════════════
# Derived metrics
# ═══════════════════════════════════════════════════════════════════════


def to_count(value: Any) -> int:
    """Non-negative int from a provider counter (numbers or numeric strings)."""
    if value is None or isinstance(value, bool):
        return 0
    try:
        numeric = float(value)
    except (TypeError, ValueError):
        return 0
    if not math.isfinite(numeric) or numeric < 0:
        return 0
    return int(numeric)


def iso_timestamp(value: Any, now: datetime) -> str:
    """``YYYY-MM-DDTHH:MM:SSZ`` for a datetime, epoch seconds or ISO string; ``now`` when unparsable."""
    moment: Optional[datetime] = None
    if isinstance(value, datetime):
        moment = value
    elif isinstance(value, (int, float)) and not isinstance(value, bool) and math.isfinite(value) and value > 0:
        moment = datetime.fromtimestamp(value, tz=timezone.utc)
    elif isinstance(value, str) and value.strip():
        text = value.strip().replace("Z", "+00:00")
        # Graph API offsets come without a colon (+0000)
        if len(text) > 5 and text[-5] in "+-" and text[-4:].isdigit():
            text = f"{text[:-2]}:{text[-2:]}"
        try:
            moment = datetime.fromisoformat(text)
        except ValueError:
            moment = None
    if moment is None:
        moment = now
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc).strftime(ISO_FORMAT)


def average_engagement(posts: list[dict], followers: int, digits: int = 2) -> float:
    if not posts or followers <= 0:
        return 0.0
    total = sum(to_count(p.get("likes")) + to_count(p.get("comments")) for p in posts)
    return round_half_up(total / len(posts) / followers * 100, digits)


def count_recent_posts(posts: list[dict], now: datetime, days: int = RECENT_DAYS) -> int:
    cutoff = now - timedelta(days=days)
    recent = 0
    for post in posts:
        try:
            posted = datetime.strptime(str(post.get("date")), ISO_FORMAT).replace(tzinfo=timezone.utc)
        except ValueError:
            continue
        if posted >= cutoff:
            recent += 1
    return recent


def flat_followers_series(followers: int, now: datetime, weeks: int = SERIES_WEEKS) -> list[dict]:
    """Weekly points ending today, all at the current follower count."""
    return [
        {"period": (now - timedelta(weeks=weeks - 1 - i)).strftime("%Y-%m-%d"), "followers": max(followers, 0)}
        for i in range(weeks)
    ]


def growth_series(points: list[dict], weeks: int = SERIES_WEEKS) -> list[float]:
    """Week-over-week follower deltas, left-padded to ``weeks`` values."""
    if not points:
        return [0] * weeks
    values = [to_count(p.get("followers")) for p in points]
    growth = [b - a for a, b in zip(values, values[1:])]
    pad = growth[0] if growth else 0
    while len(growth) < weeks:
        growth.insert(0, pad)
    return growth[-weeks:]


def summarize_formats(posts: list[dict], default_format: Optional[str] = None) -> dict[str, float]:
    """Post count per format; a single default entry when there are no posts."""
    if not posts:
        return {default_format: 1} if default_format else {}
    counts: dict[str, float] = {}
    for post in posts:
        fmt = post.get("format") or default_format or "Content"
        counts[fmt] = counts.get(fmt, 0) + 1
    return counts


def build_profile_snapshot(platform: Platform, data: dict, now: datetime) -> ProfileSnapshot:
    """Normalize a provider's raw profile dict into a snapshot.

    ``data`` carries ``handle`` and optionally ``id``, ``displayName``,
    ``avatarUrl``, ``verified``, ``followers``, ``metrics``, ``posts``,
    ``followersSeries``, ``engagementByFormat`` and ``summary``; missing
    views are derived from the posts and follower count.
    """
    posts = [
        {**post, "platform": platform.value, "date": iso_timestamp(post.get("date"), now)}
        for post in data.get("posts") or []
        if isinstance(post, dict)
    ]
    for post in posts:
        post["likes"] = to_count(post.get("likes"))
        post["comments"] = to_count(post.get("comments"))
        post["title"] = str(post.get("title") or "")
        post["id"] = str(post.get("id") or post.get("url") or f"{platform.value}:{post['date']}")

    given = data.get("metrics") or {}
    followers = to_count(data.get("followers", given.get("followers")))
    series = data.get("followersSeries") or flat_followers_series(followers, now)
    metrics = {
        "followers": followers,
        "weeklyDelta": given.get("weeklyDelta", 0),
        "avgEngagement": given.get("avgEngagement", average_engagement(posts, followers)),
        "posts7d": given.get("posts7d", count_recent_posts(posts, now)),
    }
    engagement = data.get("engagementByFormat") or summarize_formats(posts)
    summary = data.get("summary") or {}

    handle = sanitize_handle(str(data.get("handle") or ""))
    display_name = data.get("displayName") or handle
    verified = data.get("verified") if isinstance(data.get("verified"), bool) else None
    record = {
        "id": str(data.get("id") or f"{platform.value}:{handle}"),
        "displayName": display_name,
        "verified": verified,
        "accounts": {
            platform.value: {
                "handle": f"@{handle}",
                "displayName": display_name,
                "externalId": data.get("id"),
                "avatarUrl": data.get("avatarUrl"),
                "verified": verified,
            },
        },
        "summary": {
            "growthSeries": summary.get("growthSeries") or growth_series(series),
            "engagementByFormat": summary.get("engagementByFormat") or engagement,
        },
        "platforms": {
            platform.value: {
                "metrics": metrics,
                "followersSeries": series,
                "engagementByFormat": engagement,
                "posts": posts,
            },
        },
        "posts": posts,
    }
    profile = normalize_record(record)
    platform_data = profile.platform_data(platform)
    if platform_data is None or platform_data.metrics is None:
        raise AdapterError(f"{get_platform_label(platform)} returned an unusable profile for @{handle}", status=502)

    return ProfileSnapshot(
        platform=platform,
        profile=profile,
        metrics=platform_data.metrics,
        posts=list(platform_data.posts or []),
        followers_series=list(platform_data.followers_series or []),
        engagement_by_format=dict(platform_data.engagement_by_format or {}),
    )


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class HttpProviderAdapter(HttpSearchAdapter):
    """HTTP adapter that also serves live per-handle profiles.

    Subclasses implement ``_fetch_profile(client, handle)`` returning the
    raw profile dict; snapshots are memoized per handle in a ResultCache.
    """

    def __init__(
        self,
        client: Optional[httpx.AsyncClient] = None,
        timeout: float = 10.0,
        cache_ttl_seconds: float = 300,
        clock: Callable[[], datetime] = utcnow,
    ):
        super().__init__(client=client, timeout=timeout)
        self._clock = clock
        self._profile_cache: ResultCache[ProfileSnapshot] = ResultCache(
            cache_ttl_seconds, name=f"{self.platform.value}_profile"
        )

    @property
    def profile_cache(self) -> ResultCache:
        return self._profile_cache

    async def fetch_snapshot(self, handle: str) -> ProfileSnapshot:
        """Profile snapshot for a handle, served from cache when fresh.

        Raises:
            AdapterNotConfiguredError: When a required credential is missing.
            AdapterError: 400 for a blank handle, 404 when the account does
                not exist, or the upstream status.
        """
        normalized = sanitize_handle(handle)
        if not normalized:
            raise AdapterError(f"{get_platform_label(self.platform)} handle is required", status=400)
        self._check_profile_configured()

        key = profile_snapshot_key(self.platform.value, normalized)
        cached = self._profile_cache.get(key)
        if cached is not None:
            return cached

        data = await self._with_client(self._fetch_profile, normalized)
        snapshot = build_profile_snapshot(self.platform, data, self._clock())
        self._profile_cache.set(key, snapshot)
        return snapshot

    async def search_profiles(self, query: str, limit: int) -> list[SearchIndexEntry]:
        """Exact-handle search: the query names one account; unknown accounts yield nothing."""
        if not sanitize_handle(query) or limit < 1:
            return []
        try:
            snapshot = await self.fetch_snapshot(query)
        except AdapterError as e:
            if e.status == 404:
                return []
            raise
        return [snapshot.to_search_entry()]

    def _check_profile_configured(self) -> None:
        self._check_configured()

    async def _fetch_profile(self, client: httpx.AsyncClient, handle: str) -> dict:
        raise NotImplementedError

    async def _optional_posts(self, fetch: Callable[[], Any], handle: str) -> list[dict]:
        """Recent posts, or none when the posts call fails; the profile still stands."""
        try:
            return await fetch()
        except AdapterError as e:
            logger.warning("Failed to fetch %s posts for %s: %s", self.platform.value, handle, e.message)
            return []
