"""Profile Normalizer.

Single boundary between untyped influencer records (dataset entries,
reshaped upstream responses) and the canonical InfluencerProfile.

Rules:
- platform keys resolve through the registry; unresolvable keys and
  accounts without a handle are dropped
- two raw keys resolving to the same platform: the later one wins
  (dict iteration order of the input)
- posts resolve their own platform, falling back to the enclosing
  platform; unresolvable posts are dropped
- per-platform post lists are always lists, never missing
- nothing in the output aliases a container of the input
"""

from collections.abc import Mapping
from typing import Any, Optional
import copy
import logging

from pydantic import ValidationError as PydanticValidationError

from src.social_catalog.handles import sanitize_handle
from src.social_catalog.models import (
    FollowersPoint,
    InfluencerProfile,
    PlatformAccount,
    PlatformData,
    PlatformMetrics,
    Post,
    ProfileSummary,
)
from src.social_catalog.platforms import Platform, normalize_platform
from src.social_catalog.records import (
    RawAccount,
    RawInfluencerRecord,
    RawPlatformData,
    RawPost,
)

logger = logging.getLogger(__name__)


class NormalizationError(ValueError):
    """Raised when a raw record cannot be turned into a profile at all."""

    def __init__(self, message: str, record_id: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.record_id = record_id


def normalize_accounts(raw_accounts: Optional[Mapping[str, Any]]) -> dict[Platform, PlatformAccount]:
    accounts: dict[Platform, PlatformAccount] = {}
    if not raw_accounts:
        return accounts

    for key, value in raw_accounts.items():
        platform = normalize_platform(key)
        if platform is None or not value or not isinstance(value, Mapping):
            continue
        try:
            raw = RawAccount.model_validate(value)
        except PydanticValidationError as e:
            logger.debug("Dropping malformed %s account: %s", platform.value, e)
            continue
        # "@" alone sanitizes to nothing and could never be looked up
        if not sanitize_handle(raw.handle):
            continue
        handle = raw.handle.strip()
        accounts[platform] = PlatformAccount(
            handle=handle,
            display_name=raw.display_name,
            external_id=raw.external_id,
            avatar_url=raw.avatar_url,
            verified=raw.verified,
        )
    return accounts


def normalize_posts(
    raw_posts: Any,
    fallback_platform: Optional[Platform] = None,
) -> Optional[list[Post]]:
    """Normalize a post list.

    Args:
        raw_posts: Raw post entries; anything that is not a list yields None.
        fallback_platform: Platform assigned to posts that omit their own.

    Returns:
        The retained posts (possibly empty), or None when there was no list.
    """
    if not isinstance(raw_posts, list):
        return None

    posts: list[Post] = []
    for item in raw_posts:
        if not item or not isinstance(item, Mapping):
            continue
        try:
            raw = RawPost.model_validate(item)
        except PydanticValidationError as e:
            logger.debug("Dropping malformed post: %s", e)
            continue
        platform = normalize_platform(raw.platform) if raw.platform else fallback_platform
        if platform is None:
            continue
        posts.append(Post(
            id=raw.id or "",
            platform=platform,
            title=raw.title,
            likes=raw.likes,
            comments=raw.comments,
            date=raw.date,
            url=raw.url,
            extra=copy.deepcopy(raw.model_extra or {}),
        ))
    return posts


def normalize_platforms(raw_platforms: Optional[Mapping[str, Any]]) -> dict[Platform, PlatformData]:
    platforms: dict[Platform, PlatformData] = {}
    if not raw_platforms:
        return platforms

    for key, value in raw_platforms.items():
        platform = normalize_platform(key)
        if platform is None or not value or not isinstance(value, Mapping):
            continue
        try:
            raw = RawPlatformData.model_validate(value)
        except PydanticValidationError as e:
            logger.warning("Dropping malformed %s platform data: %s", platform.value, e)
            continue

        metrics = None
        if raw.metrics is not None:
            metrics = PlatformMetrics(
                followers=raw.metrics.followers,
                weekly_delta=raw.metrics.weekly_delta,
                avg_engagement=raw.metrics.avg_engagement,
                posts_7d=raw.metrics.posts_7d,
            )
        series = None
        if raw.followers_series is not None:
            series = [FollowersPoint(period=p.period, followers=p.followers) for p in raw.followers_series]
        engagement = dict(raw.engagement_by_format) if raw.engagement_by_format is not None else None

        platforms[platform] = PlatformData(
            metrics=metrics,
            followers_series=series,
            engagement_by_format=engagement,
            posts=normalize_posts(raw.posts, platform) or [],
        )
    return platforms


def _fallback_display_name(raw: RawInfluencerRecord, accounts: dict[Platform, PlatformAccount]) -> str:
    for account in accounts.values():
        if account.display_name:
            return account.display_name
    if accounts:
        return next(iter(accounts.values())).handle
    return raw.id or ""


def normalize_record(record: Any) -> InfluencerProfile:
    """Turn one raw influencer record into a canonical profile.

    A record with no resolvable account still yields a profile; it
    simply contributes nothing to the lookup and search indexes.

    Raises:
        NormalizationError: If the record is not a mapping or its top
            level fails validation.
    """
    if not isinstance(record, Mapping):
        raise NormalizationError(f"Expected a mapping, got {type(record).__name__}")

    try:
        raw = RawInfluencerRecord.model_validate(record)
    except PydanticValidationError as e:
        record_id = record.get("id")
        raise NormalizationError(
            f"Invalid influencer record: {e.error_count()} validation error(s)",
            record_id=str(record_id) if record_id is not None else None,
        ) from e

    accounts = normalize_accounts(raw.accounts)
    platforms = normalize_platforms(raw.platforms)

    summary = ProfileSummary()
    if raw.summary is not None:
        summary = ProfileSummary(
            growth_series=list(raw.summary.growth_series),
            engagement_by_format=dict(raw.summary.engagement_by_format),
        )

    # Top-level posts carry their own platform; an empty result is "no posts"
    posts = normalize_posts(raw.posts) or None

    return InfluencerProfile(
        display_name=raw.display_name or _fallback_display_name(raw, accounts),
        accounts=accounts,
        summary=summary,
        platforms=platforms,
        posts=posts,
        id=raw.id,
        location=raw.location,
        topics=list(raw.topics) if raw.topics is not None else None,
        verified=raw.verified,
    )
