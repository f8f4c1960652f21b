"""FastAPI application entry point with lifespan management.

Startup: configure logging, build the icon service (default provider with
shuffled fallback hosts, extra providers from YAML), mount routers.
Shutdown: close the HTTP client used for API hosts.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from icon_resolver.api import build_service
from icon_resolver.config.settings import IconResolverSettings
from icon_resolver.logging_config import configure_logging
from icon_resolver.middleware.error_handler import register_error_handlers
from icon_resolver.middleware.request_id import RequestIdMiddleware
from icon_resolver.routers.health import create_health_router
from icon_resolver.routers.icons import create_icons_router
from icon_resolver.services.icon_service import IconService

logger = logging.getLogger(__name__)


def create_app(
    settings: IconResolverSettings | None = None,
    *,
    icon_service: IconService | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    ``icon_service`` may be injected (tests); otherwise one is built from
    ``settings`` when the application starts.
    """
    settings = settings or IconResolverSettings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        configure_logging(settings.log_level)
        logger.info("Starting icon resolver on port %d", settings.port)

        service = icon_service or build_service(settings)
        app.state.icon_service = service
        app.include_router(create_health_router(icon_service=service))
        app.include_router(create_icons_router(icon_service=service))

        logger.info(
            "Icon resolver started with providers: %s",
            ", ".join(repr(p) for p in service.registry.providers()),
        )

        yield

        logger.info("Shutting down icon resolver…")
        await service.aclose()
        logger.info("Icon resolver shut down")

    app = FastAPI(
        title="Icon Resolver",
        version="1.0.0",
        lifespan=lifespan,
    )

    register_error_handlers(app)
    app.add_middleware(RequestIdMiddleware)

    return app


app = create_app()
