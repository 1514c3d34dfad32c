"""Raw Record Schemas.

Pydantic models describing the untyped influencer records found in
datasets and reshaped upstream responses. They are only used at the
normalizer boundary; nothing past the normalizer sees raw data.

Nested sections are validated one entry at a time by the normalizer so
that a single malformed account, platform or post is dropped without
discarding the whole record.
"""

from typing import Annotated, Any, Optional

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, NonNegativeInt


def _to_optional_str(value: Any) -> Optional[str]:
    if value is None:
        return None
    return str(value)


# Dataset ids are sometimes numeric
LooseStr = Annotated[Optional[str], BeforeValidator(_to_optional_str)]


class RawAccount(BaseModel):
    """``accounts.<platform>`` entry."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    handle: str = ""
    display_name: Optional[str] = Field(default=None, alias="displayName")
    external_id: LooseStr = Field(default=None, alias="externalId")
    avatar_url: Optional[str] = Field(default=None, alias="avatarUrl")
    verified: Optional[bool] = None


class RawPost(BaseModel):
    """A post entry. Unknown keys are kept and passed through."""

    model_config = ConfigDict(extra="allow")

    id: LooseStr = ""
    platform: Optional[str] = None
    title: str = ""
    likes: NonNegativeInt = 0
    comments: NonNegativeInt = 0
    date: str = ""
    url: Optional[str] = None


class RawMetrics(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    followers: NonNegativeInt = 0
    weekly_delta: float = Field(default=0.0, alias="weeklyDelta")
    avg_engagement: float = Field(default=0.0, ge=0, alias="avgEngagement")
    posts_7d: NonNegativeInt = Field(default=0, alias="posts7d")


class RawFollowersPoint(BaseModel):
    model_config = ConfigDict(extra="ignore")

    period: str
    followers: NonNegativeInt = 0


class RawPlatformData(BaseModel):
    """``platforms.<platform>`` entry; posts are validated separately."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    metrics: Optional[RawMetrics] = None
    followers_series: Optional[list[RawFollowersPoint]] = Field(default=None, alias="followersSeries")
    engagement_by_format: Optional[dict[str, float]] = Field(default=None, alias="engagementByFormat")
    posts: Optional[list[Any]] = None


class RawSummary(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    growth_series: list[float] = Field(default_factory=list, alias="growthSeries")
    engagement_by_format: dict[str, float] = Field(default_factory=dict, alias="engagementByFormat")


class RawInfluencerRecord(BaseModel):
    """Top level of one dataset entry."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    id: LooseStr = None
    display_name: Optional[str] = Field(default=None, alias="displayName")
    location: Optional[str] = None
    topics: Optional[list[str]] = None
    verified: Optional[bool] = None
    accounts: Optional[dict[str, Any]] = None
    summary: Optional[RawSummary] = None
    platforms: Optional[dict[str, Any]] = None
    posts: Optional[list[Any]] = None
