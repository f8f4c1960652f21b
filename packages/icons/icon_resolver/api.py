"""Process-wide default icon service.

Applications that want a single shared icon store call ``initialize`` once at
startup (or let the first call below create the default service) and then use
the module-level functions. Code that needs isolated state, tests in
particular, should build its own ``IconService`` instead.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import Any

from icon_resolver.config.providers import (
    PartialConfigInput,
    ProviderConfig,
    create_default_registry,
    load_provider_configs,
)
from icon_resolver.config.settings import IconResolverSettings
from icon_resolver.integration.api_client import IconApiClient
from icon_resolver.models.icons import IconDefinition
from icon_resolver.services.icon_service import IconLoadResult, IconService
from icon_resolver.storage.icon_storage import IconStorage

logger = logging.getLogger(__name__)

_service: IconService | None = None


def build_service(settings: IconResolverSettings) -> IconService:
    """Create an ``IconService`` wired from settings."""
    registry = create_default_registry(
        primary=settings.default_api_host,
        fallbacks=settings.fallback_api_hosts,
        seed=settings.random_seed,
    )
    registry.load(load_provider_configs(settings.providers_path))

    return IconService(
        storage=IconStorage(simple_names=settings.simple_names),
        registry=registry,
        api_client=IconApiClient(
            timeout_seconds=settings.http_timeout_seconds,
            user_agent=settings.user_agent,
        ),
    )


def initialize(settings: IconResolverSettings | None = None) -> IconService:
    """Create (or replace) the process-wide default service."""
    global _service
    _service = build_service(settings or IconResolverSettings())
    logger.info("Default icon service initialized")
    return _service


def get_service() -> IconService:
    """Return the default service, initializing it on first use."""
    if _service is None:
        return initialize()
    return _service


def set_api_config(provider: str, partial: PartialConfigInput) -> bool:
    return get_service().set_api_config(provider, partial)


def get_api_config(provider: str) -> ProviderConfig | None:
    return get_service().get_api_config(provider)


def allow_simple_names(allow: bool | None = None) -> bool:
    return get_service().allow_simple_names(allow)


def icon_exists(name: str) -> bool:
    return get_service().icon_exists(name)


def get_icon(name: str) -> IconDefinition | None:
    return get_service().get_icon(name)


def list_icons(provider: str | None = None, prefix: str | None = None) -> list[str]:
    return get_service().list_icons(provider, prefix)


def add_icon(name: str, data: IconDefinition | Mapping[str, Any]) -> bool:
    return get_service().add_icon(name, data)


def add_collection(payload: object, provider: str | None = None) -> bool:
    return get_service().add_collection(payload, provider)


async def load_icons(names: Iterable[str]) -> IconLoadResult:
    return await get_service().load_icons(names)
