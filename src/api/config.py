"""API Configuration."""

from dataclasses import dataclass, field


@dataclass
class APIConfig:
    """Core API settings."""

    title: str = "SocialScope API"
    version: str = "1.0.0"
    description: str = "Influencer catalog queries and federated social search"
    docs_url: str = "/docs"
    cors_origins: list[str] = field(default_factory=lambda: ["*"])
    cors_methods: list[str] = field(default_factory=lambda: ["GET", "POST", "OPTIONS"])
    cors_headers: list[str] = field(default_factory=lambda: ["*"])


DEFAULT_API_CONFIG = APIConfig()
