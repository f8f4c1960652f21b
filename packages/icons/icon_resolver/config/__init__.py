"""Configuration module — settings and API provider configs."""

from icon_resolver.config.providers import (
    PartialProviderConfig,
    ProviderConfig,
    ProviderConfigRegistry,
    create_config,
    create_default_registry,
    fallback_order,
    load_provider_configs,
)
from icon_resolver.config.settings import IconResolverSettings

__all__ = [
    "IconResolverSettings",
    "PartialProviderConfig",
    "ProviderConfig",
    "ProviderConfigRegistry",
    "create_config",
    "create_default_registry",
    "fallback_order",
    "load_provider_configs",
]
