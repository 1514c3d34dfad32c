"""FastAPI Application Factory.

Creates the social analytics API: request tracing, structured error
responses, CORS, health check and the social/search routers.
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from src.api.config import APIConfig, DEFAULT_API_CONFIG
from src.api.dependencies import ServiceContainer, build_services
from src.api.routes import search as search_routes
from src.api.routes import social as social_routes
from src.api_errors import ErrorConfig, register_exception_handlers
from src.logging_config import LoggingConfig, RequestTracingMiddleware, configure_logging
from src.settings import Settings

logger = logging.getLogger(__name__)


# ── Lifespan (startup / shutdown) ────────────────────────────────────


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan: initialize logging at startup."""
    configure_logging(app.state.logging_config)
    services: ServiceContainer = app.state.services
    logger.info(
        "SocialScope API starting up (%s mode, %d profiles)",
        services.settings.data_mode,
        len(services.catalog),
    )
    yield
    logger.info("SocialScope API shutting down")


# ── App Factory ──────────────────────────────────────────────────────


def create_app(
    config: Optional[APIConfig] = None,
    settings: Optional[Settings] = None,
    services: Optional[ServiceContainer] = None,
    logging_config: Optional[LoggingConfig] = None,
    error_config: Optional[ErrorConfig] = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Middleware stack (outermost → innermost):
        RequestTracing → CORS → App

    Args:
        config: API configuration. Uses defaults if not provided.
        settings: Service settings; ``get_settings()`` when omitted.
        services: Prebuilt service container (tests inject one).

    Returns:
        Configured FastAPI application.
    """
    config = config or DEFAULT_API_CONFIG
    services = services or build_services(settings)

    app = FastAPI(
        title=config.title,
        version=config.version,
        description=config.description,
        docs_url=config.docs_url,
        lifespan=lifespan,
    )
    app.state.services = services
    app.state.logging_config = logging_config or LoggingConfig()

    # add_middleware prepends, so order here is innermost-first.
    cors_origins = services.settings.cors_origins or config.cors_origins
    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins,
        allow_methods=config.cors_methods,
        allow_headers=config.cors_headers,
    )
    app.add_middleware(RequestTracingMiddleware, config=app.state.logging_config)

    register_exception_handlers(app, error_config)

    # ── Health check ─────────────────────────────────────────────

    @app.get("/health")
    async def health():
        catalog = services.catalog
        report = catalog.last_report
        components = {
            "catalog": f"ok ({len(catalog)} profiles)" if len(catalog) else "empty",
            "adapters": ", ".join(p.value for p in services.aggregator.adapters),
        }
        if services.providers:
            components["profiles"] = ", ".join(p.value for p in services.providers)
        return {
            "status": "ok" if len(catalog) or services.live else "degraded",
            "version": config.version,
            "mode": services.settings.data_mode,
            "components": components,
            "droppedRecords": len(report.dropped) if report else 0,
        }

    # ── Route modules ────────────────────────────────────────────

    app.include_router(social_routes.router)
    app.include_router(search_routes.router)

    logger.info(f"SocialScope API v{config.version} initialized")
    return app
