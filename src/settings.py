"""Centralized settings for the social analytics service.

Uses pydantic-settings to load from environment variables (prefixed
SOCIAL_) and an optional .env file.
"""

from functools import lru_cache

from pydantic_settings import BaseSettings

from src.social_catalog.platforms import Platform, parse_platform_list


class Settings(BaseSettings):
    """Service settings loaded from environment variables."""

    # --- Data ---
    dataset_path: str = "data/mock_social_data.json"
    data_mode: str = "mock"  # "mock" (bundled dataset) or "live" (platform APIs)

    # --- Federated search ---
    federated_default_platforms: list[str] = ["youtube", "x", "facebook"]
    federated_default_limit: int = 10
    federated_max_limit: int = 25
    adapter_timeout_seconds: float = 10.0

    # --- Catalog queries ---
    search_default_limit: int = 8
    search_max_limit: int = 50
    posts_default_limit: int = 50
    followers_default_weeks: int = 12

    # --- Result cache (0 disables) ---
    cache_ttl_seconds: int = 300

    # --- YouTube Data API ---
    youtube_api_key: str = ""

    # --- X / Twitter ---
    x_bearer_token: str = ""

    # --- Facebook Graph API ---
    facebook_app_id: str = ""
    facebook_app_secret: str = ""
    facebook_access_token: str = ""

    # --- Instagram web session ---
    instagram_session_id: str = ""
    instagram_cookie: str = ""
    instagram_user_agent: str = ""
    instagram_app_id: str = ""

    # --- HTTP server ---
    host: str = "0.0.0.0"
    port: int = 4173
    cors_origins: list[str] = ["*"]

    model_config = {
        "env_prefix": "SOCIAL_",
        "env_file": ".env",
        "extra": "ignore",
    }

    def default_platforms(self) -> list[Platform]:
        """Configured federated default subset, falling back to YouTube, X, Facebook."""
        parsed = parse_platform_list(self.federated_default_platforms)
        return parsed.platforms or [Platform.YOUTUBE, Platform.X, Platform.FACEBOOK]


@lru_cache
def get_settings() -> Settings:
    """Get cached settings singleton."""
    return Settings()
