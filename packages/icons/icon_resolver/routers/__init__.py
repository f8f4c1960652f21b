"""HTTP routers."""

from icon_resolver.routers.health import create_health_router
from icon_resolver.routers.icons import create_icons_router

__all__ = ["create_health_router", "create_icons_router"]
