"""TikTok Handle Lookup and Profiles.

No public search endpoint is wired in: an exact ``@handle`` yields a
placeholder result pointing at the profile page, with a note. Profiles
come from the public web user detail endpoint, with recent videos from
the item list when the account exposes a ``secUid``.
"""

from datetime import datetime, timezone
from typing import Any, Callable, Optional
import logging

import httpx

from src.federated_search.base import AdapterError, build_result, fetch_json, require_exact_handle
from src.federated_search.profiles import HttpProviderAdapter, summarize_formats, utcnow
from src.social_catalog.models import FederatedResult
from src.social_catalog.platforms import Platform

logger = logging.getLogger(__name__)

TIKTOK_BASE_URL = "https://www.tiktok.com"
TIKTOK_WEB_AID = "1988"
PROFILE_VIDEOS = 20
VIDEO_FORMAT = "Video"

ENRICHMENT_NOTE = (
    "Connect the official TikTok API (Display API) or a third-party "
    "service to enrich this result after authentication."
)


def _first(mapping: dict, *keys: str) -> Any:
    for key in keys:
        if mapping.get(key) is not None:
            return mapping[key]
    return None


def item_to_post(item: dict, handle: str) -> dict:
    stats = item.get("stats") or {}
    item_id = _first(item, "id", "item_id")
    created = _first(item, "createTime", "create_time")
    try:
        date: Any = datetime.fromtimestamp(float(created), tz=timezone.utc) if created else None
    except (TypeError, ValueError, OverflowError, OSError):
        date = None
    return {
        "id": item_id,
        "title": item.get("desc") or item.get("title") or "",
        "likes": _first(stats, "diggCount", "digg_count"),
        "comments": _first(stats, "commentCount", "comment_count"),
        "date": date,
        "url": f"{TIKTOK_BASE_URL}/@{handle}/video/{item_id}" if item_id else None,
        "format": VIDEO_FORMAT,
    }


class TikTokHandleAdapter(HttpProviderAdapter):
    """Placeholder search for exact TikTok handles, plus web profiles."""

    platform = Platform.TIKTOK

    def __init__(
        self,
        client: Optional[httpx.AsyncClient] = None,
        timeout: float = 10.0,
        base_url: str = TIKTOK_BASE_URL,
        cache_ttl_seconds: float = 300,
        clock: Callable[[], datetime] = utcnow,
    ):
        super().__init__(client=client, timeout=timeout, cache_ttl_seconds=cache_ttl_seconds, clock=clock)
        self._base_url = base_url.rstrip("/")

    async def search(self, query: str, limit: int) -> list[FederatedResult]:
        handle = require_exact_handle(query, self.platform)
        return [build_result(
            platform=Platform.TIKTOK,
            id=f"tiktok:{handle}",
            name=f"@{handle}",
            handle=f"@{handle}",
            profile_url=f"{TIKTOK_BASE_URL}/@{handle}",
            note=ENRICHMENT_NOTE,
        )]

    def _headers(self, handle: str) -> dict[str, str]:
        return {
            "User-Agent": "Mozilla/5.0 (Windows NT 10.0; Win64; x64)",
            "Referer": f"{TIKTOK_BASE_URL}/@{handle}",
            "Accept": "application/json, text/plain, */*",
        }

    async def _fetch_profile(self, client: httpx.AsyncClient, handle: str) -> dict:
        data: Any = await fetch_json(
            client,
            f"{self._base_url}/api/user/detail/",
            params={"aid": TIKTOK_WEB_AID, "uniqueId": handle},
            headers=self._headers(handle),
        )
        info = data.get("userInfo") if isinstance(data, dict) else None
        user = info.get("user") if isinstance(info, dict) else None
        stats = info.get("stats") if isinstance(info, dict) else None
        if not isinstance(user, dict) or not isinstance(stats, dict):
            raise AdapterError(f"TikTok profile not found for {handle}", status=404)

        posts: list[dict] = []
        if user.get("secUid"):
            posts = await self._optional_posts(lambda: self._recent_videos(client, user["secUid"], handle), handle)
        return {
            "id": user.get("id"),
            "handle": user.get("uniqueId") or handle,
            "displayName": user.get("nickname") or user.get("uniqueId"),
            "avatarUrl": user.get("avatarLarger") or user.get("avatarMedium"),
            "verified": user.get("verified"),
            "followers": _first(stats, "followerCount", "follower_count"),
            "posts": posts,
            "engagementByFormat": summarize_formats(posts, VIDEO_FORMAT),
        }

    async def _recent_videos(self, client: httpx.AsyncClient, sec_uid: str, handle: str) -> list[dict]:
        data: Any = await fetch_json(
            client,
            f"{self._base_url}/api/post/item_list/",
            params={"aid": TIKTOK_WEB_AID, "count": str(PROFILE_VIDEOS), "cursor": "0", "secUid": sec_uid},
            headers=self._headers(handle),
        )
        items = (data.get("itemList") or data.get("items")) if isinstance(data, dict) else None
        return [item_to_post(i, handle) for i in items or [] if isinstance(i, dict)]
