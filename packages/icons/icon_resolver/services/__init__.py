"""Service layer — icon lookups backed by storage and the network."""

from icon_resolver.services.icon_service import IconLoadResult, IconService

__all__ = ["IconLoadResult", "IconService"]
