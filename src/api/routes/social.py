"""Social Catalog API Routes.

Influencer search, profiles and per-platform views. In mock mode
everything is answered from the catalog; in live mode each platform is
served from its profile provider, and platforms without one (or
without credentials) answer 501.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query

from src.api.dependencies import ServiceContainer, get_services
from src.api_errors import (
    ErrorCode,
    NotFoundError,
    PlatformNotConfiguredError,
    RateLimitError,
    UpstreamError,
    ValidationError,
    coerce_limit,
    validate_handle,
    validate_platform,
)
from src.federated_search import AdapterError, AdapterNotConfiguredError
from src.social_catalog import (
    InfluencerProfile,
    Platform,
    select_engagement_breakdown,
    select_followers_history,
    select_metrics,
    select_posts,
)

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/social", tags=["Social"])


def _raise_for_adapter_error(e: AdapterError, platform: Platform, handle: str) -> None:
    if isinstance(e, AdapterNotConfiguredError):
        raise PlatformNotConfiguredError(e.message, platform=platform.value) from e
    if e.status == 404:
        raise NotFoundError(
            f"No {platform.value} profile for {handle}",
            ErrorCode.PROFILE_NOT_FOUND,
            platform=platform.value,
            handle=handle,
        ) from e
    if e.status == 429:
        raise RateLimitError(e.message) from e
    if e.status == 400:
        raise ValidationError(e.message, ErrorCode.INVALID_HANDLE, field="handle") from e
    raise UpstreamError(e.message, upstream_status=e.status) from e


async def _resolve_profile(
    services: ServiceContainer,
    raw_platform: Optional[str],
    raw_handle: Optional[str],
) -> tuple[Platform, InfluencerProfile]:
    """Validated platform and its profile, or a 400/404/501/502 error."""
    platform = validate_platform(raw_platform)
    handle = validate_handle(raw_handle)

    if services.live:
        provider = services.require_live_source(platform)
        try:
            snapshot = await provider.fetch_snapshot(handle)
        except AdapterError as e:
            _raise_for_adapter_error(e, platform, handle)
        return platform, snapshot.profile

    profile = services.queries.get_profile(platform, handle)
    if profile is None:
        raise NotFoundError(
            f"No profile for {handle} on {platform.value}",
            ErrorCode.PROFILE_NOT_FOUND,
            platform=platform.value,
            handle=handle,
        )
    return platform, profile


async def _resolve_platform_profile(
    services: ServiceContainer,
    raw_platform: str,
    raw_handle: Optional[str],
) -> tuple[Platform, InfluencerProfile]:
    platform, profile = await _resolve_profile(services, raw_platform, raw_handle)
    if profile.platform_data(platform) is None:
        raise NotFoundError(
            f"No platform data for {platform.value}",
            platform=platform.value,
            handle=raw_handle,
        )
    return platform, profile


@router.get("/search/influencers")
async def search_influencers(
    q: Optional[str] = None,
    platform: Optional[str] = None,
    limit: Optional[str] = None,
    services: ServiceContainer = Depends(get_services),
) -> dict:
    """Ranked influencer search; an empty query lists everyone."""
    settings = services.settings
    if services.live:
        resolved = validate_platform(platform)
        provider = services.require_live_source(resolved)
        count = coerce_limit(limit, settings.search_default_limit, settings.search_max_limit)
        try:
            entries = await provider.search_profiles(q or "", count)
        except AdapterError as e:
            _raise_for_adapter_error(e, resolved, q or "")
        return {"results": [e.to_dict() for e in entries]}

    entries = services.queries.search(q, platform=platform, limit=limit)
    return {"results": [e.to_dict() for e in entries]}


@router.get("/influencers/profile")
async def get_profile(
    platform: Optional[str] = None,
    handle: Optional[str] = None,
    services: ServiceContainer = Depends(get_services),
) -> dict:
    """Full normalized profile for a platform account."""
    _, profile = await _resolve_profile(services, platform, handle)
    return profile.to_dict()


@router.get("/platforms/{platform}/posts")
async def get_posts(
    platform: str,
    handle: Optional[str] = None,
    limit: Optional[str] = None,
    services: ServiceContainer = Depends(get_services),
) -> list[dict]:
    resolved, profile = await _resolve_platform_profile(services, platform, handle)
    posts = select_posts(profile, resolved, limit if limit is not None else services.settings.posts_default_limit)
    return [p.to_dict() for p in posts]


@router.get("/platforms/{platform}/followers")
async def get_followers(
    platform: str,
    handle: Optional[str] = None,
    weeks: Optional[str] = Query(default=None),
    services: ServiceContainer = Depends(get_services),
) -> list[dict]:
    """Follower history, oldest first; ``weeks`` keeps only the most recent points."""
    resolved, profile = await _resolve_platform_profile(services, platform, handle)
    if weeks is None and services.live:
        weeks = str(services.settings.followers_default_weeks)
    return [p.to_dict() for p in select_followers_history(profile, resolved, weeks)]


@router.get("/platforms/{platform}/engagement")
async def get_engagement(
    platform: str,
    handle: Optional[str] = None,
    services: ServiceContainer = Depends(get_services),
) -> dict:
    resolved, profile = await _resolve_platform_profile(services, platform, handle)
    return select_engagement_breakdown(profile, resolved)


@router.get("/platforms/{platform}/metrics")
async def get_metrics(
    platform: str,
    handle: Optional[str] = None,
    services: ServiceContainer = Depends(get_services),
) -> dict:
    resolved, profile = await _resolve_platform_profile(services, platform, handle)
    metrics = select_metrics(profile, resolved)
    return metrics.to_dict() if metrics is not None else {}


@router.post("/catalog/reload")
async def reload_catalog(services: ServiceContainer = Depends(get_services)) -> dict:
    """Re-read the dataset file and swap in a fresh catalog."""
    report = services.reload_catalog()
    return report.to_dict()
