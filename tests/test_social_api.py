"""Tests for the HTTP API (FastAPI TestClient)."""

import json
from datetime import datetime, timezone

import httpx
import pytest
from fastapi.testclient import TestClient

from src.api import build_services, create_app
from src.settings import Settings
from src.social_catalog import Platform, ProfileCatalog


@pytest.fixture
def settings(dataset_file):
    return Settings(data_mode="mock", dataset_path=str(dataset_file))


@pytest.fixture
def client(settings):
    app = create_app(services=build_services(settings))
    return TestClient(app)


def _error(response):
    return response.json()["error"]


# ═══════════════════════════════════════════════════════════════════════
# Catalog routes (mock mode)
# ═══════════════════════════════════════════════════════════════════════


class TestInfluencerSearch:
    """GET /api/social/search/influencers"""

    def test_search(self, client):
        response = client.get("/api/social/search/influencers", params={"q": "alice"})
        assert response.status_code == 200
        results = response.json()["results"]
        assert [r["id"] for r in results] == ["instagram:alice", "x:alice_tweets"]
        assert results[0]["handle"] == "@Alice"
        assert results[0]["engagementRate"] == 4.3

    def test_empty_query_lists_everyone(self, client):
        results = client.get("/api/social/search/influencers").json()["results"]
        assert len(results) == 5
        assert results[0]["followers"] == 5000

    def test_platform_and_limit(self, client):
        response = client.get(
            "/api/social/search/influencers",
            params={"platform": "ig", "limit": "2"},
        )
        assert [r["platform"] for r in response.json()["results"]] == ["instagram", "instagram"]

    def test_unknown_platform(self, client):
        response = client.get("/api/social/search/influencers", params={"platform": "myspace"})
        assert response.status_code == 400
        assert _error(response)["code"] == "INVALID_PLATFORM"


class TestProfileRoutes:
    """Profile and per-platform routes."""

    def test_get_profile(self, client):
        response = client.get("/api/social/influencers/profile", params={"platform": "ig", "handle": "@ALICE"})
        assert response.status_code == 200
        body = response.json()
        assert body["displayName"] == "Alice Wander"
        assert body["accounts"]["instagram"]["handle"] == "@Alice"

    def test_missing_handle(self, client):
        response = client.get("/api/social/influencers/profile", params={"platform": "instagram"})
        assert response.status_code == 400
        error = _error(response)
        assert error["code"] == "MISSING_REQUIRED_FIELD"
        assert error["details"][0]["field"] == "handle"

    def test_unknown_profile(self, client):
        response = client.get("/api/social/influencers/profile", params={"platform": "instagram", "handle": "nobody"})
        assert response.status_code == 404
        error = _error(response)
        assert error["code"] == "PROFILE_NOT_FOUND"
        assert error["message"] == "No profile for nobody on instagram"

    def test_posts(self, client):
        all_posts = client.get("/api/social/platforms/instagram/posts", params={"handle": "alice"}).json()
        assert [p["id"] for p in all_posts] == ["p1", "p2", "p3"]
        assert all_posts[0]["format"] == "Reel"
        limited = client.get("/api/social/platforms/instagram/posts", params={"handle": "alice", "limit": "2"}).json()
        assert len(limited) == 2

    def test_followers(self, client):
        response = client.get("/api/social/platforms/instagram/followers", params={"handle": "alice", "weeks": "4"})
        assert [p["period"] for p in response.json()] == ["2024-W09", "2024-W10", "2024-W11", "2024-W12"]

    def test_followers_without_series(self, client):
        response = client.get("/api/social/platforms/twitter/followers", params={"handle": "alice_tweets"})
        assert response.status_code == 200
        assert response.json() == []

    def test_engagement(self, client):
        response = client.get("/api/social/platforms/instagram/engagement", params={"handle": "alice"})
        assert response.json() == {"Reel": 60.0, "Photo": 40.0}

    def test_metrics(self, client):
        response = client.get("/api/social/platforms/x/metrics", params={"handle": "@alice_tweets"})
        assert response.json() == {"followers": 250, "weeklyDelta": -0.5, "avgEngagement": 0.8, "posts7d": 9}

    def test_unknown_platform_in_path(self, client):
        response = client.get("/api/social/platforms/myspace/metrics", params={"handle": "alice"})
        assert response.status_code == 400
        assert "myspace" in _error(response)["message"]

    def test_account_without_platform_data(self, settings):
        catalog = ProfileCatalog([{"id": "t", "accounts": {"tiktok": {"handle": "dancer"}}}])
        client = TestClient(create_app(services=build_services(settings, catalog=catalog)))
        response = client.get("/api/social/platforms/tiktok/posts", params={"handle": "dancer"})
        assert response.status_code == 404
        assert _error(response)["message"] == "No platform data for tiktok"


def _prolific_catalog(count=60):
    posts = [
        {"id": f"p{i}", "title": f"Post {i}", "likes": i, "comments": 0, "date": "2024-05-01T00:00:00Z"}
        for i in range(count)
    ]
    return ProfileCatalog([{
        "id": "prolific",
        "accounts": {"instagram": {"handle": "prolific"}},
        "platforms": {"instagram": {"metrics": {"followers": 10}, "posts": posts}},
    }])


class TestPostLimits:
    """Post limits: the HTTP route caps by default, the query service does not."""

    def test_query_service_returns_every_post(self, settings):
        services = build_services(settings, catalog=_prolific_catalog())
        assert len(services.queries.get_posts("instagram", "prolific")) == 60

    def test_route_default_limit(self, settings):
        client = TestClient(create_app(services=build_services(settings, catalog=_prolific_catalog())))
        posts = client.get("/api/social/platforms/instagram/posts", params={"handle": "prolific"}).json()
        assert len(posts) == 50
        assert posts[0]["id"] == "p0"


class TestCatalogReload:
    """POST /api/social/catalog/reload"""

    def test_reload_picks_up_new_records(self, client, dataset_file):
        dataset_file.write_text(json.dumps([
            {"id": "zed", "displayName": "Zed", "accounts": {"x": {"handle": "zed"}}},
            "junk",
        ]), encoding="utf-8")
        response = client.post("/api/social/catalog/reload")
        assert response.status_code == 200
        report = response.json()
        assert report["recordsSeen"] == 2
        assert report["profilesKept"] == 1
        assert report["dropped"][0]["index"] == 1

        results = client.get("/api/social/search/influencers").json()["results"]
        assert [r["id"] for r in results] == ["x:zed"]

    def test_reload_missing_dataset_keeps_catalog(self, client, dataset_file):
        dataset_file.unlink()
        response = client.post("/api/social/catalog/reload")
        assert response.status_code == 500
        assert _error(response)["code"] == "DATASET_ERROR"
        assert len(client.get("/api/social/search/influencers").json()["results"]) == 5


# ═══════════════════════════════════════════════════════════════════════
# Federated search, health and tracing
# ═══════════════════════════════════════════════════════════════════════


class TestFederatedSearchRoute:
    """GET /api/search"""

    def test_requires_query(self, client):
        response = client.get("/api/search", params={"q": "  "})
        assert response.status_code == 400
        error = _error(response)
        assert error["message"] == "Query parameter 'q' is required"
        assert error["details"][0]["field"] == "q"

    def test_partial_success(self, client):
        response = client.get("/api/search", params={"q": "alice", "platforms": "instagram,bogus", "limit": "5"})
        assert response.status_code == 200
        body = response.json()
        assert body["platforms"] == ["instagram"]
        assert [r["id"] for r in body["results"]] == ["instagram:alice"]
        assert body["issues"] == [{"platform": "unknown", "message": "Unknown platform: 'bogus'"}]
        assert body["errors"] == body["issues"]

    def test_default_platforms(self, client):
        body = client.get("/api/search", params={"q": "alice"}).json()
        assert body["platforms"] == ["youtube", "x", "facebook"]
        assert body["limit"] == 10
        assert [r["id"] for r in body["results"]] == ["x:alice_tweets"]


class TestHealthAndTracing:
    """Health check and request ids."""

    def test_health(self, client):
        body = client.get("/health").json()
        assert body["status"] == "ok"
        assert body["mode"] == "mock"
        assert body["droppedRecords"] == 0
        assert body["components"]["catalog"] == "ok (3 profiles)"

    def test_health_degraded_when_empty(self, tmp_path):
        settings = Settings(data_mode="mock", dataset_path=str(tmp_path / "missing.json"))
        client = TestClient(create_app(services=build_services(settings)))
        body = client.get("/health").json()
        assert body["status"] == "degraded"

    def test_request_id_generated(self, client):
        response = client.get("/api/social/search/influencers")
        assert response.headers["X-Request-ID"]

    def test_request_id_propagated_into_errors(self, client):
        response = client.get(
            "/api/social/influencers/profile",
            params={"platform": "instagram", "handle": "nobody"},
            headers={"X-Request-ID": "req-42"},
        )
        assert response.headers["X-Request-ID"] == "req-42"
        assert _error(response)["request_id"] == "req-42"


# ═══════════════════════════════════════════════════════════════════════
# Live mode
# ═══════════════════════════════════════════════════════════════════════


LIVE_USER = {
    "id": "42",
    "username": "natgeo",
    "full_name": "Nat Geo",
    "edge_followed_by": {"count": 2000},
    "edge_owner_to_timeline_media": {"edges": [{"node": {
        "id": "m1",
        "shortcode": "abc",
        "taken_at_timestamp": datetime(2024, 5, 19, tzinfo=timezone.utc).timestamp(),
        "edge_liked_by": {"count": 30},
        "edge_media_to_comment": {"count": 10},
    }}]},
}


def _live_handler(request):
    host, path = request.url.host, request.url.path
    if host == "cdn.syndication.twimg.com":
        return httpx.Response(200, json=[{"id": "99", "screen_name": "jack", "name": "Jack", "followers_count": 6000}])
    if host == "www.tiktok.com" and path == "/api/user/detail/":
        return httpx.Response(200, json={"userInfo": {
            "user": {"id": "t1", "uniqueId": "dancer", "nickname": "Dancer"},
            "stats": {"followerCount": 800},
        }})
    if path.startswith("/web/search/topsearch"):
        return httpx.Response(200, json={"users": [{"user": {"pk": "7", "username": "travelbug", "follower_count": 10}}]})
    if request.url.params.get("username") == "ghost":
        return httpx.Response(404)
    if request.url.params.get("username") == "busy":
        return httpx.Response(429)
    return httpx.Response(200, json={"data": {"user": LIVE_USER}})


@pytest.fixture
def live_client(dataset_file):
    settings = Settings(data_mode="live", dataset_path=str(dataset_file))
    http = httpx.AsyncClient(transport=httpx.MockTransport(_live_handler))
    return TestClient(create_app(services=build_services(settings, http_client=http)))


class TestLiveMode:
    """Per-profile routes backed by live profile providers."""

    def test_profile_from_snapshot(self, live_client):
        response = live_client.get("/api/social/influencers/profile", params={"platform": "instagram", "handle": "@natgeo"})
        assert response.status_code == 200
        assert response.json()["displayName"] == "Nat Geo"

    def test_metrics_from_snapshot(self, live_client):
        body = live_client.get("/api/social/platforms/instagram/metrics", params={"handle": "natgeo"}).json()
        assert body["followers"] == 2000
        assert body["avgEngagement"] == 2.0

    def test_followers_default_twelve_weeks(self, live_client):
        body = live_client.get("/api/social/platforms/instagram/followers", params={"handle": "natgeo"}).json()
        assert len(body) == 12

    def test_tiktok_profile(self, live_client):
        response = live_client.get("/api/social/influencers/profile", params={"platform": "tiktok", "handle": "@Dancer"})
        assert response.status_code == 200
        body = response.json()
        assert body["displayName"] == "Dancer"
        assert body["accounts"]["tiktok"]["handle"] == "@dancer"

    def test_x_metrics_without_token(self, live_client):
        body = live_client.get("/api/social/platforms/twitter/metrics", params={"handle": "jack"}).json()
        assert body == {"followers": 6000, "weeklyDelta": 0, "avgEngagement": 0, "posts7d": 0}

    def test_x_engagement_defaults_to_tweets(self, live_client):
        body = live_client.get("/api/social/platforms/x/engagement", params={"handle": "jack"}).json()
        assert body == {"Tweet": 1}

    def test_missing_credentials_answer_501(self, live_client):
        response = live_client.get("/api/social/platforms/youtube/posts", params={"handle": "mkbhd"})
        assert response.status_code == 501
        error = _error(response)
        assert error["code"] == "PLATFORM_NOT_CONFIGURED"
        assert error["message"] == "Set SOCIAL_YOUTUBE_API_KEY to enable YouTube data."

    def test_platform_without_provider(self, dataset_file):
        settings = Settings(data_mode="live", dataset_path=str(dataset_file))
        services = build_services(settings)
        services.providers.pop(Platform.TIKTOK)
        response = TestClient(create_app(services=services)).get(
            "/api/social/influencers/profile", params={"platform": "tiktok", "handle": "dancer"},
        )
        assert response.status_code == 501
        assert _error(response)["message"] == "TikTok is not configured for live data in this environment."

    def test_search_by_exact_handle(self, live_client):
        response = live_client.get("/api/social/search/influencers", params={"q": "@jack", "platform": "x"})
        assert response.json()["results"] == [{
            "id": "x:99", "platform": "x", "handle": "@jack", "displayName": "Jack",
            "followers": 6000, "engagementRate": 0.0,
        }]

    def test_health_lists_profile_providers(self, live_client):
        body = live_client.get("/health").json()
        assert body["components"]["profiles"] == "youtube, x, facebook, instagram, tiktok"

    def test_unknown_instagram_handle(self, live_client):
        response = live_client.get("/api/social/influencers/profile", params={"platform": "instagram", "handle": "ghost"})
        assert response.status_code == 404
        assert _error(response)["code"] == "PROFILE_NOT_FOUND"

    def test_rate_limited(self, live_client):
        response = live_client.get("/api/social/influencers/profile", params={"platform": "instagram", "handle": "busy"})
        assert response.status_code == 429

    def test_search_requires_platform(self, live_client):
        response = live_client.get("/api/social/search/influencers", params={"q": "travel"})
        assert response.status_code == 400

    def test_search_instagram(self, live_client):
        response = live_client.get(
            "/api/social/search/influencers",
            params={"q": "travel", "platform": "instagram"},
        )
        results = response.json()["results"]
        assert [r["handle"] for r in results] == ["@travelbug"]
        assert results[0]["engagementRate"] == 0.0
