"""Social Catalog Data Model.

Canonical value objects produced by the normalizer and served by the
catalog, query service and federated search. ``to_dict()`` renders
the camelCase contract consumed by the dashboard.
"""

from dataclasses import dataclass, field
from typing import Any, Optional, Union
import math

from src.social_catalog.platforms import Platform


@dataclass(frozen=True)
class PlatformAccount:
    """One account of an influencer on one platform."""
    handle: str
    display_name: Optional[str] = None
    external_id: Optional[str] = None
    avatar_url: Optional[str] = None
    verified: Optional[bool] = None

    def to_dict(self) -> dict:
        data: dict[str, Any] = {"handle": self.handle}
        if self.display_name is not None:
            data["displayName"] = self.display_name
        if self.external_id is not None:
            data["externalId"] = self.external_id
        if self.avatar_url is not None:
            data["avatarUrl"] = self.avatar_url
        if self.verified is not None:
            data["verified"] = self.verified
        return data


@dataclass(frozen=True)
class Post:
    """A single published post. Unknown source fields ride along in ``extra``."""
    id: str
    platform: Platform
    title: str = ""
    likes: int = 0
    comments: int = 0
    date: str = ""
    url: Optional[str] = None
    extra: dict[str, Any] = field(default_factory=dict)

    @property
    def interactions(self) -> int:
        return self.likes + self.comments

    def to_dict(self) -> dict:
        data: dict[str, Any] = dict(self.extra)
        data.update({
            "id": self.id,
            "platform": self.platform.value,
            "title": self.title,
            "likes": self.likes,
            "comments": self.comments,
            "date": self.date,
        })
        if self.url is not None:
            data["url"] = self.url
        return data


@dataclass(frozen=True)
class PlatformMetrics:
    """Per-platform headline metrics, stored and passed through as-is."""
    followers: int = 0
    weekly_delta: float = 0.0  # percent, signed
    avg_engagement: float = 0.0  # percent
    posts_7d: int = 0

    def to_dict(self) -> dict:
        return {
            "followers": self.followers,
            "weeklyDelta": self.weekly_delta,
            "avgEngagement": self.avg_engagement,
            "posts7d": self.posts_7d,
        }


@dataclass(frozen=True)
class FollowersPoint:
    period: str
    followers: int

    def to_dict(self) -> dict:
        return {"period": self.period, "followers": self.followers}


@dataclass(frozen=True)
class PlatformData:
    """Everything known about one platform of a profile."""
    metrics: Optional[PlatformMetrics] = None
    followers_series: Optional[list[FollowersPoint]] = None
    engagement_by_format: Optional[dict[str, float]] = None
    posts: list[Post] = field(default_factory=list)

    def to_dict(self) -> dict:
        data: dict[str, Any] = {}
        if self.metrics is not None:
            data["metrics"] = self.metrics.to_dict()
        if self.followers_series is not None:
            data["followersSeries"] = [p.to_dict() for p in self.followers_series]
        if self.engagement_by_format is not None:
            data["engagementByFormat"] = dict(self.engagement_by_format)
        data["posts"] = [p.to_dict() for p in self.posts]
        return data


@dataclass(frozen=True)
class ProfileSummary:
    growth_series: list[float] = field(default_factory=list)
    engagement_by_format: dict[str, float] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "growthSeries": list(self.growth_series),
            "engagementByFormat": dict(self.engagement_by_format),
        }


@dataclass(frozen=True)
class InfluencerProfile:
    """Canonical influencer aggregate across all linked platforms.

    Built once by the normalizer and never patched in place; a refresh
    re-normalizes the source record and replaces the whole profile.
    """
    display_name: str
    accounts: dict[Platform, PlatformAccount] = field(default_factory=dict)
    summary: ProfileSummary = field(default_factory=ProfileSummary)
    platforms: dict[Platform, PlatformData] = field(default_factory=dict)
    posts: Optional[list[Post]] = None
    id: Optional[str] = None
    location: Optional[str] = None
    topics: Optional[list[str]] = None
    verified: Optional[bool] = None

    def account(self, platform: Platform) -> Optional[PlatformAccount]:
        return self.accounts.get(platform)

    def platform_data(self, platform: Platform) -> Optional[PlatformData]:
        return self.platforms.get(platform)

    def to_dict(self) -> dict:
        data: dict[str, Any] = {
            "displayName": self.display_name,
            "accounts": {p.value: a.to_dict() for p, a in self.accounts.items()},
            "summary": self.summary.to_dict(),
            "platforms": {p.value: d.to_dict() for p, d in self.platforms.items()},
        }
        if self.posts is not None:
            data["posts"] = [p.to_dict() for p in self.posts]
        if self.id is not None:
            data["id"] = self.id
        if self.location is not None:
            data["location"] = self.location
        if self.topics is not None:
            data["topics"] = list(self.topics)
        if self.verified is not None:
            data["verified"] = self.verified
        return data


@dataclass
class SearchIndexEntry:
    """Denormalized per-account projection of a profile for ranked search."""
    id: str  # "{platform}:{sanitized handle}"
    platform: Platform
    handle: str  # display form
    display_name: str
    followers: int = 0
    engagement_rate: float = 0.0
    location: Optional[str] = None
    topics: Optional[list[str]] = None
    verified: Optional[bool] = None
    normalized_handle: str = ""

    def to_dict(self) -> dict:
        data: dict[str, Any] = {
            "id": self.id,
            "platform": self.platform.value,
            "handle": self.handle,
            "displayName": self.display_name,
            "followers": self.followers,
            "engagementRate": self.engagement_rate,
        }
        if self.location is not None:
            data["location"] = self.location
        if self.topics is not None:
            data["topics"] = list(self.topics)
        if self.verified is not None:
            data["verified"] = self.verified
        return data


@dataclass
class FederatedResult:
    """One account found by a provider adapter during federated search."""
    platform: Platform
    id: str
    name: str
    handle: Optional[str] = None
    avatar: Optional[str] = None
    profile_url: Optional[str] = None
    followers: Optional[int] = None
    verified: Optional[bool] = None
    note: Optional[str] = None

    def to_dict(self) -> dict:
        data: dict[str, Any] = {
            "platform": self.platform.value,
            "id": self.id,
            "name": self.name,
            "handle": self.handle,
            "avatar": self.avatar,
            "profileUrl": self.profile_url,
            "followers": self.followers,
        }
        if self.verified is not None:
            data["verified"] = self.verified
        if self.note:
            data["note"] = self.note
        return data


UNKNOWN_PLATFORM = "unknown"


@dataclass
class SearchIssue:
    """Non-fatal failure of one provider within a federated search."""
    platform: Union[Platform, str]
    message: str

    def to_dict(self) -> dict:
        platform = self.platform.value if isinstance(self.platform, Platform) else self.platform
        return {"platform": platform, "message": self.message}


def round_half_up(value: float, digits: int = 1) -> float:
    """Round like the dashboard does (halves away from zero for positives)."""
    factor = 10 ** digits
    return math.floor(value * factor + 0.5) / factor
