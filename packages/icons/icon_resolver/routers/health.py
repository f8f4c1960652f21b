"""Health and readiness endpoints.

- GET /health — service status + storage and provider stats
- GET /readiness — 200 only when the default provider has an API config
"""

from __future__ import annotations

from fastapi import APIRouter, Response

from icon_resolver.models.responses import ApiResponse
from icon_resolver.services.icon_service import IconService


def create_health_router(*, icon_service: IconService) -> APIRouter:
    """Factory that creates the health router with an injected service."""

    health_router = APIRouter(tags=["health"])

    @health_router.get("/health")
    async def health() -> dict:
        """Service health check with storage statistics."""
        return ApiResponse(
            success=True,
            data={
                "status": "healthy",
                "storage": icon_service.storage.get_stats(),
                "providers": icon_service.registry.providers(),
            },
        ).model_dump()

    @health_router.get("/readiness")
    async def readiness(response: Response) -> dict:
        """Readiness probe — 200 iff the default provider can be queried."""
        is_ready = icon_service.get_api_config("") is not None

        if not is_ready:
            response.status_code = 503

        return ApiResponse(
            success=is_ready,
            data={"ready": is_ready},
            error=None if is_ready else "Default provider not configured",
        ).model_dump()

    return health_router
