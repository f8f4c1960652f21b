"""Icon resolver — icon storage with redundant API host fetching."""

from icon_resolver.config.providers import ProviderConfig, ProviderConfigRegistry
from icon_resolver.models.icons import IconDefinition
from icon_resolver.models.names import IconName
from icon_resolver.redundancy.scheduler import HostRotationScheduler
from icon_resolver.services.icon_service import IconLoadResult, IconService
from icon_resolver.storage.icon_storage import IconLookup, IconStorage, LookupState

__all__ = [
    "HostRotationScheduler",
    "IconDefinition",
    "IconLoadResult",
    "IconLookup",
    "IconName",
    "IconService",
    "IconStorage",
    "LookupState",
    "ProviderConfig",
    "ProviderConfigRegistry",
]
