"""Pydantic Settings for the icon resolver service.

All environment variables use the ICONS_ prefix.
Example: ICONS_PORT=8002, ICONS_SIMPLE_NAMES=true
"""

from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings


class IconResolverSettings(BaseSettings):
    """Icon resolver configuration validated from environment variables."""

    # Service
    port: int = 8002
    log_level: str = "INFO"

    # Storage
    simple_names: bool = False  # Allow bare "name" icons without prefix

    # Default API provider ("" key)
    default_api_host: str = "https://api.iconify.design"
    fallback_api_hosts: list[str] = [
        "https://api.simplesvg.com",
        "https://api.unisvg.com",
    ]
    random_seed: int | None = None  # Fixes fallback host order when set

    # Extra providers
    providers_path: str = "providers.yaml"

    # HTTP transport
    http_timeout_seconds: float = Field(default=10.0, gt=0)
    user_agent: str = "icon-resolver/1.0"

    model_config = {"env_prefix": "ICONS_"}
