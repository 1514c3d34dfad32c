"""Facebook Pages Search and Page Profiles.

Both go through the Graph API with a page or app access token. Page
profiles attach the latest page posts with like and comment totals.
"""

from datetime import datetime
from typing import Any, Callable, Optional
import re

import httpx

from src.federated_search.base import AdapterError, AdapterNotConfiguredError, build_result, fetch_json
from src.federated_search.profiles import HttpProviderAdapter, summarize_formats, utcnow
from src.social_catalog.handles import ensure_handle
from src.social_catalog.models import FederatedResult
from src.social_catalog.platforms import Platform

GRAPH_API_URL = "https://graph.facebook.com/v19.0"
MAX_RESULTS = 25
PAGE_FIELDS = "id,name,username,link,fan_count,followers_count,picture{url},verification_status,is_verified"
PROFILE_FIELDS = "id,name,username,followers_count,fan_count,link,picture{url},verification_status,is_verified,about,category"
POST_FIELDS = "id,message,created_time,permalink_url,likes.summary(true),comments.summary(true),attachments{media_type}"
PROFILE_POSTS = 10
POST_FORMAT = "Post"

_VERIFIED_RE = re.compile(r"verified", re.IGNORECASE)


def resolve_facebook_token(access_token: str = "", app_id: str = "", app_secret: str = "") -> str:
    """Explicit access token, else an app token ``{app_id}|{app_secret}``."""
    if access_token:
        return access_token
    if app_id and app_secret:
        return f"{app_id}|{app_secret}"
    return ""


def _page_followers(page: dict) -> Any:
    followers = page.get("followers_count")
    return followers if followers is not None else page.get("fan_count")


def _page_picture(page: dict) -> Optional[str]:
    return ((page.get("picture") or {}).get("data") or {}).get("url")


def _page_verified(page: dict) -> Optional[bool]:
    verified = page.get("is_verified")
    if isinstance(verified, bool):
        return verified
    status = page.get("verification_status")
    return bool(_VERIFIED_RE.search(status)) if isinstance(status, str) else None


def page_to_result(page: dict) -> FederatedResult:
    page_id = page.get("id")
    return build_result(
        platform=Platform.FACEBOOK,
        id=page_id,
        name=page.get("name"),
        handle=ensure_handle(page.get("username")),
        avatar=_page_picture(page),
        profile_url=page.get("link") or (f"https://facebook.com/{page_id}" if page_id else None),
        followers=_page_followers(page),
        verified=_page_verified(page),
    )


class FacebookPagesAdapter(HttpProviderAdapter):
    """Pages search and page profiles; needs an access token or an app id and secret."""

    platform = Platform.FACEBOOK

    def __init__(
        self,
        access_token: str = "",
        app_id: str = "",
        app_secret: str = "",
        client: Optional[httpx.AsyncClient] = None,
        timeout: float = 10.0,
        base_url: str = GRAPH_API_URL,
        cache_ttl_seconds: float = 300,
        clock: Callable[[], datetime] = utcnow,
    ):
        super().__init__(client=client, timeout=timeout, cache_ttl_seconds=cache_ttl_seconds, clock=clock)
        self._token = resolve_facebook_token(access_token, app_id, app_secret)
        self._base_url = base_url.rstrip("/")

    def _check_configured(self) -> None:
        if not self._token:
            raise AdapterNotConfiguredError(
                "Set SOCIAL_FACEBOOK_APP_ID and SOCIAL_FACEBOOK_APP_SECRET, or "
                "SOCIAL_FACEBOOK_ACCESS_TOKEN, to enable Facebook Pages data.",
                setting="facebook_access_token",
            )

    async def _search(self, client: httpx.AsyncClient, query: str, limit: int) -> list[FederatedResult]:
        data: Any = await fetch_json(
            client,
            f"{self._base_url}/pages/search",
            params={
                "q": query,
                "limit": str(min(limit, MAX_RESULTS)),
                "access_token": self._token,
                "fields": PAGE_FIELDS,
            },
        )
        pages = data.get("data") if isinstance(data, dict) else None
        return [page_to_result(p) for p in (pages or [])[:limit] if isinstance(p, dict)]

    async def _fetch_profile(self, client: httpx.AsyncClient, handle: str) -> dict:
        page: Any = await fetch_json(
            client,
            f"{self._base_url}/{handle}",
            params={"fields": PROFILE_FIELDS, "access_token": self._token},
        )
        if not isinstance(page, dict) or not page.get("id"):
            raise AdapterError(f"Facebook page not found for {handle}", status=404)

        page_id = page["id"]
        posts = await self._optional_posts(lambda: self._recent_posts(client, page_id), handle)
        return {
            "id": page_id,
            "handle": page.get("username") or handle,
            "displayName": page.get("name") or handle,
            "avatarUrl": _page_picture(page),
            "verified": _page_verified(page),
            "followers": _page_followers(page),
            "posts": posts,
            "engagementByFormat": summarize_formats(posts, POST_FORMAT),
        }

    async def _recent_posts(self, client: httpx.AsyncClient, page_id: str) -> list[dict]:
        data: Any = await fetch_json(
            client,
            f"{self._base_url}/{page_id}/posts",
            params={"fields": POST_FIELDS, "limit": str(PROFILE_POSTS), "access_token": self._token},
        )
        posts = []
        for item in (data.get("data") if isinstance(data, dict) else None) or []:
            if not isinstance(item, dict):
                continue
            attachments = (item.get("attachments") or {}).get("data") or [{}]
            posts.append({
                "id": item.get("id"),
                "title": item.get("message") or "",
                "likes": ((item.get("likes") or {}).get("summary") or {}).get("total_count"),
                "comments": ((item.get("comments") or {}).get("summary") or {}).get("total_count"),
                "date": item.get("created_time"),
                "url": item.get("permalink_url"),
                "format": (attachments[0] or {}).get("media_type") or POST_FORMAT,
            })
        return posts
