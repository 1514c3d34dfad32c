"""FastAPI Dependencies.

Builds the process-wide service container (catalog, query service,
federated aggregator and, in live mode, the per-platform profile
providers) and exposes it to route handlers.
"""

import logging
from dataclasses import dataclass, field
from typing import Optional

import httpx
from fastapi import Request

from src.api_errors import ErrorCode, PlatformNotConfiguredError, SocialAPIError
from src.federated_search import (
    FederatedSearchAggregator,
    ProfileProvider,
    build_adapters,
    build_aggregator,
    profile_providers,
)
from src.federated_search.registry import LIVE_MODE
from src.settings import Settings, get_settings
from src.social_catalog import (
    CatalogLoadReport,
    DatasetError,
    Platform,
    ProfileCatalog,
    QueryConfig,
    QueryService,
    get_platform_label,
    load_records,
)

logger = logging.getLogger(__name__)


@dataclass
class ServiceContainer:
    """Everything a request handler needs, built once per app."""

    settings: Settings
    catalog: ProfileCatalog
    queries: QueryService
    aggregator: FederatedSearchAggregator
    providers: dict[Platform, ProfileProvider] = field(default_factory=dict)

    @property
    def live(self) -> bool:
        return self.settings.data_mode.lower() == LIVE_MODE

    def reload_catalog(self) -> CatalogLoadReport:
        """Reload the dataset from ``settings.dataset_path``.

        Raises:
            SocialAPIError: DATASET_ERROR when the file cannot be read;
                the current catalog stays in place.
        """
        try:
            records = load_records(self.settings.dataset_path)
        except DatasetError as e:
            raise SocialAPIError(e.message, ErrorCode.DATASET_ERROR) from e
        return self.catalog.reload(records)

    def require_live_source(self, platform: Platform) -> ProfileProvider:
        """Live profile provider for a platform; 501 when none is registered."""
        provider = self.providers.get(platform)
        if provider is None:
            raise PlatformNotConfiguredError(
                f"{get_platform_label(platform)} is not configured for live data in this environment.",
                platform=platform.value,
            )
        return provider


def build_services(
    settings: Optional[Settings] = None,
    catalog: Optional[ProfileCatalog] = None,
    http_client: Optional[httpx.AsyncClient] = None,
) -> ServiceContainer:
    """Wire the services from settings.

    A missing dataset leaves the catalog empty rather than failing startup.
    ``http_client`` is shared by every live adapter when given.
    """
    settings = settings or get_settings()
    if catalog is None:
        catalog = ProfileCatalog()
        try:
            catalog.reload(load_records(settings.dataset_path))
        except DatasetError as e:
            logger.warning("Starting with an empty catalog: %s", e.message)

    # posts_default_limit applies to the HTTP route only
    queries = QueryService(
        catalog,
        QueryConfig(
            search_default_limit=settings.search_default_limit,
            search_max_limit=settings.search_max_limit,
        ),
    )
    adapters = build_adapters(settings, queries, http_client=http_client)
    aggregator = build_aggregator(settings, adapters=adapters)
    providers = profile_providers(adapters) if settings.data_mode.lower() == LIVE_MODE else {}

    return ServiceContainer(
        settings=settings,
        catalog=catalog,
        queries=queries,
        aggregator=aggregator,
        providers=providers,
    )


def get_services(request: Request) -> ServiceContainer:
    """Service container attached to the running app."""
    return request.app.state.services
