"""Adapter Registry.

Builds the adapter set for a data mode: catalog-backed adapters for
every platform in ``mock`` mode, provider adapters in ``live`` mode.
Live adapters double as per-handle profile providers; the profile
routes look them up by platform through ``profile_providers``.
"""

from typing import TYPE_CHECKING, Optional
import logging

import httpx

from src.federated_search.aggregator import AggregatorConfig, FederatedSearchAggregator
from src.federated_search.base import SearchAdapter
from src.federated_search.catalog_adapter import CatalogSearchAdapter
from src.federated_search.facebook import FacebookPagesAdapter
from src.federated_search.instagram import InstagramClient, InstagramConfig, InstagramHandleAdapter
from src.federated_search.profiles import ProfileProvider
from src.federated_search.tiktok import TikTokHandleAdapter
from src.federated_search.x_search import XSearchAdapter
from src.federated_search.youtube import YouTubeSearchAdapter
from src.social_catalog.platforms import Platform
from src.social_catalog.query import QueryService

if TYPE_CHECKING:
    from src.settings import Settings

logger = logging.getLogger(__name__)

MOCK_MODE = "mock"
LIVE_MODE = "live"


def instagram_client_from_settings(
    settings: "Settings",
    http_client: Optional[httpx.AsyncClient] = None,
) -> InstagramClient:
    config = InstagramConfig(
        session_id=settings.instagram_session_id,
        cookie=settings.instagram_cookie,
        user_agent=settings.instagram_user_agent,
        app_id=settings.instagram_app_id,
        timeout=settings.adapter_timeout_seconds,
    )
    return InstagramClient(config, http_client=http_client, cache_ttl_seconds=settings.cache_ttl_seconds)


def build_adapters(
    settings: "Settings",
    queries: Optional[QueryService] = None,
    mode: Optional[str] = None,
    http_client: Optional[httpx.AsyncClient] = None,
    instagram: Optional[InstagramClient] = None,
) -> list[SearchAdapter]:
    """Adapters for every supported platform in the given mode.

    Args:
        settings: Credentials and timeouts.
        queries: Query service over the catalog; required in mock mode.
        mode: ``mock`` or ``live``; defaults to ``settings.data_mode``.
        http_client: Shared httpx client for the live adapters.
        instagram: Instagram client to share with the profile routes.
    """
    mode = (mode or settings.data_mode).lower()
    if mode == MOCK_MODE:
        if queries is None:
            raise ValueError("mock mode needs a QueryService over the catalog")
        return [CatalogSearchAdapter(platform, queries) for platform in Platform]

    if mode != LIVE_MODE:
        raise ValueError(f"Unknown data mode: '{mode}'")

    shared = {
        "client": http_client,
        "timeout": settings.adapter_timeout_seconds,
        "cache_ttl_seconds": settings.cache_ttl_seconds,
    }
    adapters: list[SearchAdapter] = [
        YouTubeSearchAdapter(settings.youtube_api_key, **shared),
        XSearchAdapter(settings.x_bearer_token, **shared),
        FacebookPagesAdapter(
            access_token=settings.facebook_access_token,
            app_id=settings.facebook_app_id,
            app_secret=settings.facebook_app_secret,
            **shared,
        ),
        InstagramHandleAdapter(instagram or instagram_client_from_settings(settings, http_client)),
        TikTokHandleAdapter(**shared),
    ]
    return adapters


def profile_providers(adapters: list[SearchAdapter]) -> dict[Platform, ProfileProvider]:
    """Adapters that also serve live per-handle profiles, keyed by platform."""
    return {a.platform: a for a in adapters if isinstance(a, ProfileProvider)}


def build_aggregator(
    settings: "Settings",
    queries: Optional[QueryService] = None,
    mode: Optional[str] = None,
    http_client: Optional[httpx.AsyncClient] = None,
    instagram: Optional[InstagramClient] = None,
    adapters: Optional[list[SearchAdapter]] = None,
) -> FederatedSearchAggregator:
    """Aggregator over ``adapters``, or over the adapters built for the mode."""
    config = AggregatorConfig(
        default_platforms=list(settings.default_platforms()),
        default_limit=settings.federated_default_limit,
        max_limit=settings.federated_max_limit,
        adapter_timeout=settings.adapter_timeout_seconds,
    )
    if adapters is None:
        adapters = build_adapters(settings, queries, mode, http_client, instagram)
    logger.info(
        "Federated search ready (%s mode): %s",
        (mode or settings.data_mode).lower(),
        ", ".join(a.platform.value for a in adapters),
    )
    return FederatedSearchAggregator(config, adapters)
