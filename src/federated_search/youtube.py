"""YouTube Channel Search and Profiles.

Search makes two calls against the YouTube Data API v3: ``search`` for
channel ids, then ``channels`` for titles, thumbnails and subscriber
counts. Profiles resolve a channel by legacy username, falling back to
a channel search, and attach the latest videos with their statistics.
"""

from datetime import datetime
from typing import Any, Callable, Optional
import logging
import re

import httpx

from src.federated_search.base import AdapterError, AdapterNotConfiguredError, build_result, fetch_json
from src.federated_search.profiles import HttpProviderAdapter, utcnow, summarize_formats
from src.social_catalog.handles import ensure_handle
from src.social_catalog.models import FederatedResult
from src.social_catalog.platforms import Platform

logger = logging.getLogger(__name__)

YOUTUBE_API_URL = "https://www.googleapis.com/youtube/v3"
MAX_RESULTS = 20
PROFILE_VIDEOS = 10
CHANNEL_MATCHES = 5
VIDEO_FORMAT = "Video"

_SCHEME_RE = re.compile(r"^https?://", re.IGNORECASE)
_WWW_RE = re.compile(r"^www\.", re.IGNORECASE)


def _avatar(snippet: dict) -> Optional[str]:
    thumbnails = snippet.get("thumbnails") or {}
    for size in ("high", "medium", "default"):
        url = (thumbnails.get(size) or {}).get("url")
        if url:
            return url
    return None


def channel_to_result(channel: dict) -> FederatedResult:
    snippet = channel.get("snippet") or {}
    statistics = channel.get("statistics") or {}
    channel_id = channel.get("id")
    custom_url = snippet.get("customUrl") or snippet.get("vanityUrl")

    handle = ensure_handle(custom_url) if isinstance(custom_url, str) else None
    if isinstance(custom_url, str) and custom_url.strip():
        path = _WWW_RE.sub("", _SCHEME_RE.sub("", custom_url.strip())).lstrip("/")
        url = f"https://www.youtube.com/{path}"
    elif channel_id:
        url = f"https://www.youtube.com/channel/{channel_id}"
    else:
        url = None

    return build_result(
        platform=Platform.YOUTUBE,
        id=channel_id,
        name=snippet.get("title"),
        handle=handle,
        avatar=_avatar(snippet),
        profile_url=url,
        followers=statistics.get("subscriberCount"),
    )


class YouTubeSearchAdapter(HttpProviderAdapter):
    """Channel search and channel profiles; needs ``SOCIAL_YOUTUBE_API_KEY``."""

    platform = Platform.YOUTUBE

    def __init__(
        self,
        api_key: str = "",
        client: Optional[httpx.AsyncClient] = None,
        timeout: float = 10.0,
        base_url: str = YOUTUBE_API_URL,
        cache_ttl_seconds: float = 300,
        clock: Callable[[], datetime] = utcnow,
    ):
        super().__init__(client=client, timeout=timeout, cache_ttl_seconds=cache_ttl_seconds, clock=clock)
        self._api_key = api_key
        self._base_url = base_url.rstrip("/")

    def _check_configured(self) -> None:
        if not self._api_key:
            raise AdapterNotConfiguredError(
                "Set SOCIAL_YOUTUBE_API_KEY to enable YouTube data.",
                setting="youtube_api_key",
            )

    async def _search(self, client: httpx.AsyncClient, query: str, limit: int) -> list[FederatedResult]:
        max_results = str(min(limit, MAX_RESULTS))
        search_data: Any = await fetch_json(
            client,
            f"{self._base_url}/search",
            params={
                "part": "id",
                "type": "channel",
                "maxResults": max_results,
                "q": query,
                "key": self._api_key,
            },
        )
        items = search_data.get("items") if isinstance(search_data, dict) else None
        channel_ids = [
            item["id"]["channelId"]
            for item in items or []
            if isinstance(item, dict)
            and isinstance(item.get("id"), dict)
            and isinstance(item["id"].get("channelId"), str)
            and item["id"]["channelId"].strip()
        ]
        if not channel_ids:
            return []

        details: Any = await fetch_json(
            client,
            f"{self._base_url}/channels",
            params={
                "part": "snippet,statistics",
                "id": ",".join(channel_ids),
                "maxResults": max_results,
                "key": self._api_key,
            },
        )
        channels = details.get("items") if isinstance(details, dict) else None
        return [channel_to_result(c) for c in (channels or [])[:limit] if isinstance(c, dict)]

    async def _fetch_profile(self, client: httpx.AsyncClient, handle: str) -> dict:
        channel = await self._channel_by_username(client, handle)
        if channel is None:
            channel_id = await self._search_channel_id(client, handle)
            details: Any = await fetch_json(
                client,
                f"{self._base_url}/channels",
                params={"part": "snippet,statistics", "id": channel_id, "key": self._api_key},
            )
            items = details.get("items") if isinstance(details, dict) else None
            channel = items[0] if items and isinstance(items[0], dict) else None
        if channel is None or not channel.get("id"):
            raise AdapterError(f"YouTube channel not found for {handle}", status=404)

        channel_id = channel["id"]
        snippet = channel.get("snippet") or {}
        statistics = channel.get("statistics") or {}
        posts = await self._optional_posts(lambda: self._recent_videos(client, channel_id), handle)
        return {
            "id": channel_id,
            "handle": handle,
            "displayName": snippet.get("title") or handle,
            "avatarUrl": _avatar(snippet),
            "followers": statistics.get("subscriberCount"),
            "posts": posts,
            "engagementByFormat": summarize_formats(posts, VIDEO_FORMAT),
        }

    async def _channel_by_username(self, client: httpx.AsyncClient, handle: str) -> Optional[dict]:
        """Channel for a legacy username; None (never an error) so the search fallback runs."""
        try:
            data: Any = await fetch_json(
                client,
                f"{self._base_url}/channels",
                params={"part": "snippet,statistics", "forUsername": handle, "key": self._api_key},
            )
        except AdapterError as e:
            logger.debug("YouTube username lookup failed for %s: %s", handle, e.message)
            return None
        items = data.get("items") if isinstance(data, dict) else None
        if items and isinstance(items[0], dict):
            return items[0]
        return None

    async def _search_channel_id(self, client: httpx.AsyncClient, handle: str) -> str:
        """Channel whose title equals the handle, else the best search hit."""
        data: Any = await fetch_json(
            client,
            f"{self._base_url}/search",
            params={
                "part": "snippet",
                "type": "channel",
                "q": handle,
                "maxResults": str(CHANNEL_MATCHES),
                "key": self._api_key,
            },
        )
        items = [i for i in (data.get("items") if isinstance(data, dict) else None) or [] if isinstance(i, dict)]
        match = next(
            (i for i in items if str((i.get("snippet") or {}).get("channelTitle") or "").lower() == handle),
            items[0] if items else None,
        )
        channel_id = None
        if match is not None:
            channel_id = (match.get("snippet") or {}).get("channelId") or (match.get("id") or {}).get("channelId")
        if not channel_id:
            raise AdapterError(f"YouTube channel not found for {handle}", status=404)
        return channel_id

    async def _recent_videos(self, client: httpx.AsyncClient, channel_id: str) -> list[dict]:
        data: Any = await fetch_json(
            client,
            f"{self._base_url}/search",
            params={
                "part": "snippet",
                "type": "video",
                "channelId": channel_id,
                "order": "date",
                "maxResults": str(PROFILE_VIDEOS),
                "key": self._api_key,
            },
        )
        items = [i for i in (data.get("items") if isinstance(data, dict) else None) or [] if isinstance(i, dict)]
        video_ids = [(i.get("id") or {}).get("videoId") for i in items]
        video_ids = [v for v in video_ids if v]

        statistics: dict[str, dict] = {}
        if video_ids:
            stats_data: Any = await fetch_json(
                client,
                f"{self._base_url}/videos",
                params={"part": "statistics", "id": ",".join(video_ids), "key": self._api_key},
            )
            for video in (stats_data.get("items") if isinstance(stats_data, dict) else None) or []:
                if isinstance(video, dict) and video.get("id"):
                    statistics[video["id"]] = video.get("statistics") or {}

        posts = []
        for item in items:
            video_id = (item.get("id") or {}).get("videoId")
            snippet = item.get("snippet") or {}
            stats = statistics.get(video_id) or {}
            posts.append({
                "id": video_id,
                "title": snippet.get("title") or "",
                "likes": stats.get("likeCount"),
                "comments": stats.get("commentCount"),
                "date": snippet.get("publishedAt"),
                "url": f"https://www.youtube.com/watch?v={video_id}" if video_id else None,
                "format": VIDEO_FORMAT,
            })
        return posts
