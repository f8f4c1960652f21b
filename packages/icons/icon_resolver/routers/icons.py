"""Icon, icon set, and provider endpoints.

- GET  /api/v1/icons                  — list stored icons (?provider=&prefix=)
- GET  /api/v1/icons/{name}           — get icon, loading it from the API if needed
- GET  /api/v1/icons/{name}/exists    — check storage only, no network
- POST /api/v1/collections            — add an icon set (?provider=)
- GET  /api/v1/providers/{provider}   — get API config ("_" is the default provider)
- PUT  /api/v1/providers/{provider}   — set API config
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Body

from icon_resolver.config.providers import PartialProviderConfig
from icon_resolver.middleware.error_handler import (
    IconNotFoundError,
    InvalidCollectionError,
    InvalidIconNameError,
    InvalidProviderConfigError,
    ProviderNotConfiguredError,
)
from icon_resolver.models.responses import ApiResponse, CollectionAdded, IconExistence, IconList
from icon_resolver.services.icon_service import IconService

logger = logging.getLogger(__name__)

# Path segment standing for the default ("") provider
DEFAULT_PROVIDER_ALIAS = "_"


def _provider_key(provider: str) -> str:
    return "" if provider == DEFAULT_PROVIDER_ALIAS else provider


def create_icons_router(*, icon_service: IconService) -> APIRouter:
    """Factory that creates the icons router with an injected service."""

    icons_router = APIRouter(prefix="/api/v1", tags=["icons"])

    @icons_router.get("/icons")
    async def list_icons(provider: str | None = None, prefix: str | None = None) -> dict:
        """List stored icon names, optionally scoped to a provider and prefix."""
        names = icon_service.list_icons(provider, prefix)
        return ApiResponse(
            success=True,
            data=IconList(provider=provider, prefix=prefix, icons=names).model_dump(),
        ).model_dump()

    @icons_router.get("/icons/{name}")
    async def get_icon(name: str) -> dict:
        """Return a fully defaulted icon, fetching it from the API on a miss."""
        if icon_service.parse_name(name) is None:
            raise InvalidIconNameError(name=name)

        icon = await icon_service.load_icon(name)
        if icon is None:
            raise IconNotFoundError(f"Icon '{name}' not found", name=name)

        return ApiResponse(success=True, data=icon.to_json()).model_dump()

    @icons_router.get("/icons/{name}/exists")
    async def icon_exists(name: str) -> dict:
        """Check whether an icon is stored, without network access."""
        if icon_service.parse_name(name) is None:
            raise InvalidIconNameError(name=name)

        return ApiResponse(
            success=True,
            data=IconExistence(name=name, exists=icon_service.icon_exists(name)).model_dump(),
        ).model_dump()

    @icons_router.post("/collections")
    async def add_collection(
        payload: dict[str, Any] = Body(...),
        provider: str | None = None,
    ) -> dict:
        """Add an icon set; 422 when nothing could be stored."""
        if not icon_service.add_collection(payload, provider):
            raise InvalidCollectionError(prefix=payload.get("prefix"))

        effective_provider = provider if provider is not None else payload.get("provider") or ""
        return ApiResponse(
            success=True,
            data=CollectionAdded(
                provider=effective_provider,
                prefix=payload.get("prefix") or "",
                added=True,
            ).model_dump(),
        ).model_dump()

    @icons_router.get("/providers/{provider}")
    async def get_provider(provider: str) -> dict:
        """Return the API config of a provider."""
        config = icon_service.get_api_config(_provider_key(provider))
        if config is None:
            raise ProviderNotConfiguredError(provider=provider)
        return ApiResponse(success=True, data=config.model_dump(by_alias=True)).model_dump()

    @icons_router.put("/providers/{provider}")
    async def set_provider(provider: str, body: PartialProviderConfig) -> dict:
        """Register or replace the API config of a provider."""
        key = _provider_key(provider)
        if not icon_service.set_api_config(key, body):
            raise InvalidProviderConfigError(provider=provider)

        config = icon_service.get_api_config(key)
        logger.info("Provider '%s' configured via API", key, extra={"provider": key})
        return ApiResponse(
            success=True,
            data=config.model_dump(by_alias=True) if config else None,
        ).model_dump()

    return icons_router
