"""X (Twitter) User Search and Profiles.

Search uses the v1.1 users endpoint and needs a bearer token. Profiles
use API v2 (user by username plus recent tweets) when a token is set,
and fall back to the public follow-button syndication endpoint, which
only exposes follower counts, when it is not.
"""

from datetime import datetime
from typing import Any, Callable, Optional
import logging
import re

import httpx

from src.federated_search.base import AdapterError, AdapterNotConfiguredError, build_result, fetch_json
from src.federated_search.profiles import HttpProviderAdapter, summarize_formats, utcnow
from src.social_catalog.handles import ensure_handle
from src.social_catalog.models import FederatedResult
from src.social_catalog.platforms import Platform

logger = logging.getLogger(__name__)

X_USERS_SEARCH_URL = "https://api.twitter.com/1.1/users/search.json"
X_API_V2_URL = "https://api.twitter.com/2"
X_SYNDICATION_URL = "https://cdn.syndication.twimg.com/widgets/followbutton/info.json"
MAX_RESULTS = 20
PROFILE_TWEETS = 20
TWEET_FORMAT = "Tweet"

# "_normal" thumbnails are 48px; dropping the suffix gives the original size
_NORMAL_AVATAR_RE = re.compile(r"_normal(\.\w+)$")


def _full_size_avatar(url: Any) -> Optional[str]:
    if not isinstance(url, str):
        return None
    return _NORMAL_AVATAR_RE.sub(r"\1", url)


def user_to_result(user: dict) -> FederatedResult:
    screen_name = user.get("screen_name")
    user_id = user.get("id_str") or (str(user["id"]) if user.get("id") else None) or screen_name

    return build_result(
        platform=Platform.X,
        id=user_id,
        name=user.get("name"),
        handle=ensure_handle(screen_name),
        avatar=_full_size_avatar(user.get("profile_image_url_https")),
        profile_url=f"https://x.com/{screen_name}" if screen_name else None,
        followers=user.get("followers_count"),
        verified=bool(user.get("verified")),
    )


def tweet_to_post(tweet: dict, handle: str) -> dict:
    metrics = tweet.get("public_metrics") or {}
    tweet_id = tweet.get("id")
    return {
        "id": tweet_id,
        "title": tweet.get("text") or "",
        "likes": metrics.get("like_count"),
        "comments": metrics.get("reply_count"),
        "date": tweet.get("created_at"),
        "url": f"https://x.com/{handle}/status/{tweet_id}" if tweet_id else None,
        "format": TWEET_FORMAT,
    }


class XSearchAdapter(HttpProviderAdapter):
    """User search (needs ``SOCIAL_X_BEARER_TOKEN``) and user profiles."""

    platform = Platform.X

    def __init__(
        self,
        bearer_token: str = "",
        client: Optional[httpx.AsyncClient] = None,
        timeout: float = 10.0,
        url: str = X_USERS_SEARCH_URL,
        api_url: str = X_API_V2_URL,
        syndication_url: str = X_SYNDICATION_URL,
        cache_ttl_seconds: float = 300,
        clock: Callable[[], datetime] = utcnow,
    ):
        super().__init__(client=client, timeout=timeout, cache_ttl_seconds=cache_ttl_seconds, clock=clock)
        self._bearer_token = bearer_token
        self._url = url
        self._api_url = api_url.rstrip("/")
        self._syndication_url = syndication_url

    def _check_configured(self) -> None:
        if not self._bearer_token:
            raise AdapterNotConfiguredError(
                "Set SOCIAL_X_BEARER_TOKEN to enable X/Twitter search.",
                setting="x_bearer_token",
            )

    def _check_profile_configured(self) -> None:
        """Profiles work without a token through the syndication endpoint."""

    def _auth_headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self._bearer_token}"}

    async def _search(self, client: httpx.AsyncClient, query: str, limit: int) -> list[FederatedResult]:
        data: Any = await fetch_json(
            client,
            self._url,
            params={"q": query, "count": str(min(limit, MAX_RESULTS))},
            headers=self._auth_headers(),
        )
        if not isinstance(data, list):
            return []
        return [user_to_result(u) for u in data[:limit] if isinstance(u, dict)]

    async def _fetch_profile(self, client: httpx.AsyncClient, handle: str) -> dict:
        if not self._bearer_token:
            return await self._syndication_profile(client, handle)

        data: Any = await fetch_json(
            client,
            f"{self._api_url}/users/by/username/{handle}",
            params={"user.fields": "profile_image_url,public_metrics,verified,description,location"},
            headers=self._auth_headers(),
        )
        user = data.get("data") if isinstance(data, dict) else None
        if not isinstance(user, dict) or not user.get("id"):
            raise AdapterError(f"X profile not found for {handle}", status=404)

        posts = await self._optional_posts(lambda: self._recent_tweets(client, user["id"], handle), handle)
        return {
            "id": user["id"],
            "handle": user.get("username") or handle,
            "displayName": user.get("name") or user.get("username"),
            "avatarUrl": _full_size_avatar(user.get("profile_image_url")),
            "verified": user.get("verified"),
            "followers": (user.get("public_metrics") or {}).get("followers_count"),
            "posts": posts,
            "engagementByFormat": summarize_formats(posts, TWEET_FORMAT),
        }

    async def _recent_tweets(self, client: httpx.AsyncClient, user_id: str, handle: str) -> list[dict]:
        data: Any = await fetch_json(
            client,
            f"{self._api_url}/users/{user_id}/tweets",
            params={"max_results": str(PROFILE_TWEETS), "tweet.fields": "created_at,public_metrics"},
            headers=self._auth_headers(),
        )
        tweets = data.get("data") if isinstance(data, dict) else None
        return [tweet_to_post(t, handle) for t in tweets or [] if isinstance(t, dict)]

    async def _syndication_profile(self, client: httpx.AsyncClient, handle: str) -> dict:
        data: Any = await fetch_json(client, self._syndication_url, params={"screen_names": handle})
        user = data[0] if isinstance(data, list) and data else data
        if not isinstance(user, dict) or not user:
            raise AdapterError(f"X profile not found for {handle}", status=404)
        return {
            "id": user.get("id") or user.get("screen_name") or handle,
            "handle": user.get("screen_name") or handle,
            "displayName": user.get("name") or user.get("screen_name"),
            "followers": user.get("followers_count"),
            "metrics": {"weeklyDelta": 0, "avgEngagement": 0, "posts7d": 0},
            "posts": [],
            "engagementByFormat": {TWEET_FORMAT: 1},
        }
