"""Social Analytics HTTP API.

FastAPI application serving catalog queries and federated search.

Example:
    from src.api import create_app
    app = create_app()
"""

from src.api.config import APIConfig, DEFAULT_API_CONFIG
from src.api.dependencies import ServiceContainer, build_services, get_services
from src.api.app import create_app

__all__ = [
    "APIConfig",
    "DEFAULT_API_CONFIG",
    "ServiceContainer",
    "build_services",
    "create_app",
    "get_services",
]
