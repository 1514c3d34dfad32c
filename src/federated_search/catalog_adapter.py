"""Catalog Search Adapter.

Serves federated search for one platform from the static profile
catalog (mock/demo mode).
"""

from typing import Optional

from src.federated_search.base import build_result
from src.social_catalog.models import FederatedResult, SearchIndexEntry
from src.social_catalog.platforms import Platform
from src.social_catalog.query import QueryService

PROFILE_URL_TEMPLATES: dict[Platform, str] = {
    Platform.INSTAGRAM: "https://www.instagram.com/{handle}/",
    Platform.TIKTOK: "https://www.tiktok.com/@{handle}",
    Platform.FACEBOOK: "https://facebook.com/{handle}",
    Platform.X: "https://x.com/{handle}",
    Platform.YOUTUBE: "https://www.youtube.com/@{handle}",
}


def profile_url(platform: Platform, handle: str) -> Optional[str]:
    template = PROFILE_URL_TEMPLATES.get(platform)
    bare = handle.lstrip("@")
    if template is None or not bare:
        return None
    return template.format(handle=bare)


class CatalogSearchAdapter:
    """Adapter answering from ``QueryService.search`` for a single platform."""

    def __init__(self, platform: Platform, queries: QueryService):
        self._platform = platform
        self._queries = queries

    @property
    def platform(self) -> Platform:
        return self._platform

    async def search(self, query: str, limit: int) -> list[FederatedResult]:
        entries = self._queries.search(query, platform=self._platform, limit=limit)
        return [self._to_result(entry) for entry in entries]

    def _to_result(self, entry: SearchIndexEntry) -> FederatedResult:
        account = None
        profile = self._queries.catalog.lookup(entry.platform, entry.handle)
        if profile is not None:
            account = profile.account(entry.platform)
        return build_result(
            platform=entry.platform,
            id=entry.id,
            name=entry.display_name,
            handle=entry.handle,
            avatar=account.avatar_url if account else None,
            profile_url=profile_url(entry.platform, entry.handle),
            followers=entry.followers,
            verified=entry.verified,
        )
