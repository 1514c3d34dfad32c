"""Instagram Profile Snapshots.

Fetches public Instagram profiles through the web profile endpoint and
turns them into canonical profiles with derived metrics:

- posts mapped from the timeline (caption title, format detection)
- ``avgEngagement`` = average interactions per post / followers, in %
- ``posts7d`` counted against the current time
- a flat 12-week follower series (the endpoint exposes no history)

Snapshots and topsearch results are memoized in ResultCache instances.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Optional
import logging
import math
import re

import httpx

from src.cache import ResultCache
from src.cache.keys import instagram_profile_key, instagram_search_key
from src.federated_search.base import AdapterError, build_result, parse_followers, require_exact_handle
from src.federated_search.profiles import ProfileSnapshot, build_profile_snapshot, count_recent_posts
from src.social_catalog.handles import sanitize_handle
from src.social_catalog.models import FederatedResult, SearchIndexEntry, round_half_up
from src.social_catalog.platforms import Platform

logger = logging.getLogger(__name__)

INSTAGRAM_BASE_URL = "https://www.instagram.com"
DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/122.0.0.0 Safari/537.36"
)
DEFAULT_APP_ID = "936619743392459"
TITLE_MAX_LENGTH = 140
SEARCH_MAX_COUNT = 30

_SESSION_ASSIGNMENT_RE = re.compile(r"sessionid\s*=")


@dataclass
class InstagramConfig:
    """Session and header settings for the Instagram web endpoints."""
    session_id: str = ""
    cookie: str = ""
    user_agent: str = DEFAULT_USER_AGENT
    app_id: str = DEFAULT_APP_ID
    base_url: str = INSTAGRAM_BASE_URL
    timeout: float = 10.0

    def cookie_header(self) -> str:
        cookies = []
        if self.cookie:
            cookies.append(self.cookie.strip())
        if self.session_id:
            session = self.session_id.strip()
            cookies.append(session if _SESSION_ASSIGNMENT_RE.search(session) else f"sessionid={session}")
        return "; ".join(cookies)

    def headers(self) -> dict[str, str]:
        headers = {
            "Accept": "application/json",
            "Accept-Language": "en-US,en;q=0.9",
            "User-Agent": self.user_agent or DEFAULT_USER_AGENT,
            "Referer": f"{self.base_url}/",
            "X-Requested-With": "XMLHttpRequest",
            "X-IG-App-ID": self.app_id or DEFAULT_APP_ID,
        }
        cookie = self.cookie_header()
        if cookie:
            headers["Cookie"] = cookie
        return headers


def detect_format(node: dict) -> str:
    """Post format label from the GraphQL node type."""
    product_type = str(node.get("product_type") or "")
    typename = str(node.get("__typename") or "")
    if product_type.lower() == "clips":
        return "Reel"
    if "igtv" in product_type.lower() or "igtv" in typename.lower():
        return "IGTV"
    if "video" in product_type.lower() or "video" in typename.lower():
        return "Video"
    if "sidecar" in typename.lower():
        return "Carousel"
    if "graphimage" in typename.lower():
        return "Photo"
    return "Post"


def _edge_count(node: dict, *keys: str) -> int:
    for key in keys:
        count = (node.get(key) or {}).get("count")
        if isinstance(count, int) and count >= 0:
            return count
    return 0


def map_timeline_post(node: Any, username: str) -> Optional[tuple[dict, str]]:
    """Raw post record and format label for one timeline node.

    Returns None for nodes without a usable timestamp.
    """
    if not isinstance(node, dict):
        return None
    try:
        taken_at = float(node.get("taken_at_timestamp"))
    except (TypeError, ValueError):
        return None
    if not math.isfinite(taken_at) or taken_at <= 0:
        return None

    posted = datetime.fromtimestamp(taken_at, tz=timezone.utc)
    caption_edges = (node.get("edge_media_to_caption") or {}).get("edges") or []
    caption = ""
    if caption_edges and isinstance(caption_edges[0], dict):
        caption = str((caption_edges[0].get("node") or {}).get("text") or "")
    caption = caption.strip()
    shortcode = node.get("shortcode") or node.get("code") or ""

    post = {
        "id": node.get("id") or (f"instagram:{shortcode}" if shortcode else f"instagram:{username}:{int(taken_at)}"),
        "platform": Platform.INSTAGRAM.value,
        "title": caption[:TITLE_MAX_LENGTH] if caption else f"Post from {posted:%Y-%m-%d}",
        "likes": _edge_count(node, "edge_liked_by", "edge_media_preview_like"),
        "comments": _edge_count(node, "edge_media_to_comment"),
        "date": posted.strftime("%Y-%m-%dT%H:%M:%SZ"),
    }
    if shortcode:
        post["url"] = f"{INSTAGRAM_BASE_URL}/p/{shortcode}/"
    return post, detect_format(node)


def build_snapshot(user: dict, fallback_handle: str, now: datetime) -> ProfileSnapshot:
    """Derive the canonical profile and metrics from a web profile user object.

    Engagement by format sums interactions per format here rather than
    counting posts, and ``avgEngagement`` keeps one decimal.
    """
    username = user.get("username") or fallback_handle
    followers = _edge_count(user, "edge_followed_by")

    edges = (user.get("edge_owner_to_timeline_media") or {}).get("edges") or []
    mapped = [m for m in (map_timeline_post((e or {}).get("node"), username) for e in edges) if m is not None]
    raw_posts = [{**post, "format": fmt} for post, fmt in mapped]

    interactions = [post["likes"] + post["comments"] for post in raw_posts]
    avg_interactions = sum(interactions) / len(interactions) if interactions else 0
    avg_engagement = round_half_up(avg_interactions / followers * 100, 1) if followers > 0 else 0.0

    engagement_by_format: dict[str, float] = {}
    for post, score in zip(raw_posts, interactions):
        engagement_by_format[post["format"]] = engagement_by_format.get(post["format"], 0) + score

    verified = user.get("is_verified")
    return build_profile_snapshot(Platform.INSTAGRAM, {
        "id": str(user.get("id") or user.get("pk") or username),
        "handle": username,
        "displayName": user.get("full_name") or username,
        "avatarUrl": user.get("profile_pic_url_hd") or user.get("profile_pic_url"),
        "verified": verified if isinstance(verified, bool) else None,
        "followers": followers,
        "metrics": {
            "weeklyDelta": 0,
            "avgEngagement": avg_engagement,
            "posts7d": count_recent_posts(raw_posts, now),
        },
        "posts": raw_posts,
        "engagementByFormat": engagement_by_format,
    }, now)


class InstagramClient:
    """Client for public Instagram profile data.

    Example:
        client = InstagramClient(InstagramConfig(session_id="..."))
        snapshot = await client.fetch_snapshot("@natgeo")
        print(snapshot.metrics.avg_engagement)
    """

    platform = Platform.INSTAGRAM

    def __init__(
        self,
        config: Optional[InstagramConfig] = None,
        http_client: Optional[httpx.AsyncClient] = None,
        cache_ttl_seconds: float = 300,
        clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ):
        self._config = config or InstagramConfig()
        self._http_client = http_client
        self._clock = clock
        self._profile_cache: ResultCache[ProfileSnapshot] = ResultCache(cache_ttl_seconds, name="instagram_profile")
        self._search_cache: ResultCache[list[SearchIndexEntry]] = ResultCache(cache_ttl_seconds, name="instagram_search")

    @property
    def profile_cache(self) -> ResultCache:
        return self._profile_cache

    @property
    def search_cache(self) -> ResultCache:
        return self._search_cache

    async def fetch_snapshot(self, handle: str) -> ProfileSnapshot:
        """Profile snapshot for a handle, served from cache when fresh.

        Raises:
            AdapterError: 400 for a blank handle, 404 when the profile does
                not exist, 429 when rate limited, or the upstream status.
        """
        normalized = sanitize_handle(handle)
        if not normalized:
            raise AdapterError("Instagram handle is required", status=400)

        key = instagram_profile_key(normalized)
        cached = self._profile_cache.get(key)
        if cached is not None:
            return cached

        data = await self._get_json("/api/v1/users/web_profile_info/", {"username": normalized})
        payload = data.get("data") if isinstance(data, dict) else None
        user = payload.get("user") if isinstance(payload, dict) else None
        if not isinstance(user, dict):
            raise AdapterError("Instagram profile not found", status=404)

        snapshot = build_snapshot(user, normalized, self._clock())
        self._profile_cache.set(key, snapshot)
        return snapshot

    async def search_profiles(self, query: str, limit: int) -> list[SearchIndexEntry]:
        """Topsearch users as search index entries (engagement unknown: 0)."""
        text = (query or "").strip()
        if not text:
            return []
        key = instagram_search_key(text, limit)
        cached = self._search_cache.get(key)
        if cached is not None:
            return list(cached)

        data = await self._get_json(
            "/web/search/topsearch/",
            {"context": "blended", "query": text, "count": str(min(max(limit, 1), SEARCH_MAX_COUNT))},
        )
        users = data.get("users") if isinstance(data, dict) else None

        entries: list[SearchIndexEntry] = []
        for item in users or []:
            user = (item or {}).get("user") if isinstance(item, dict) else None
            if not isinstance(user, dict) or not user.get("username"):
                continue
            username = str(user["username"])
            followers = user.get("follower_count", user.get("search_follower_count"))
            entries.append(SearchIndexEntry(
                id=f"instagram:{user.get('pk') or user.get('pk_id') or username}",
                platform=Platform.INSTAGRAM,
                handle=f"@{username}",
                display_name=user.get("full_name") or username,
                followers=parse_followers(followers) or 0,
                engagement_rate=0.0,
                location=user.get("city_name") or user.get("city") or None,
                verified=bool(user.get("is_verified")),
                normalized_handle=sanitize_handle(username),
            ))
            if len(entries) >= limit:
                break

        self._search_cache.set(key, entries)
        return list(entries)

    async def _get_json(self, path: str, params: dict[str, str]) -> Any:
        if self._http_client is not None:
            return await self._request(self._http_client, path, params)
        async with httpx.AsyncClient(timeout=self._config.timeout) as client:
            return await self._request(client, path, params)

    async def _request(self, client: httpx.AsyncClient, path: str, params: dict[str, str]) -> Any:
        url = f"{self._config.base_url.rstrip('/')}{path}"
        try:
            response = await client.get(url, params=params, headers=self._config.headers())
        except httpx.HTTPError as e:
            raise AdapterError(f"Instagram request failed: {e}") from e

        if response.status_code == 429:
            raise AdapterError("Instagram rate limit reached", status=429)
        if response.status_code == 404:
            raise AdapterError("Instagram profile not found", status=404)
        if not response.is_success:
            raise AdapterError(
                response.text or f"Instagram responded with status {response.status_code}",
                status=response.status_code,
            )
        try:
            return response.json()
        except ValueError as e:
            raise AdapterError("Instagram returned an invalid JSON response", status=response.status_code) from e


class InstagramHandleAdapter:
    """Federated search for Instagram: exact ``@handle`` lookups only."""

    platform = Platform.INSTAGRAM

    def __init__(self, client: InstagramClient):
        self._client = client

    @property
    def client(self) -> InstagramClient:
        return self._client

    async def fetch_snapshot(self, handle: str) -> ProfileSnapshot:
        return await self._client.fetch_snapshot(handle)

    async def search_profiles(self, query: str, limit: int) -> list[SearchIndexEntry]:
        return await self._client.search_profiles(query, limit)

    async def search(self, query: str, limit: int) -> list[FederatedResult]:
        handle = require_exact_handle(query, self.platform)
        try:
            snapshot = await self._client.fetch_snapshot(handle)
        except AdapterError as e:
            if e.status == 404:
                raise AdapterError(f"No Instagram profile found for @{handle}.", status=404) from e
            raise

        profile = snapshot.profile
        account = profile.account(Platform.INSTAGRAM)
        return [build_result(
            platform=Platform.INSTAGRAM,
            id=(account.external_id if account else None) or f"instagram:{handle}",
            name=profile.display_name or f"@{handle}",
            handle=account.handle if account else f"@{handle}",
            avatar=account.avatar_url if account else None,
            profile_url=f"{INSTAGRAM_BASE_URL}/{handle}/",
            followers=snapshot.metrics.followers if snapshot.metrics else None,
            verified=account.verified if account else None,
        )]
