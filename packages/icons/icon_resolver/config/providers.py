"""API provider configuration: models, registry, bootstrap, and YAML loader.

Each provider key ("" for the default API) maps to a fully resolved
``ProviderConfig`` built by merging a partial config over fixed defaults.
A partial config without hosts is rejected and leaves any previous config in
place.

The default provider points at the primary API host followed by fallback
hosts. The fallback order is permuted once by ``create_default_registry`` so
that clients spread their load across fallbacks when the primary host is
unreachable. The permutation takes an explicit ``random.Random`` (or seed) so
that it is reproducible in tests.
"""

from __future__ import annotations

import logging
import random
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError

logger = logging.getLogger(__name__)

DEFAULT_API_HOST = "https://api.iconify.design"
FALLBACK_API_HOSTS: tuple[str, ...] = (
    "https://api.simplesvg.com",
    "https://api.unisvg.com",
)

DEFAULT_PATH = "/"
DEFAULT_MAX_URL = 500
DEFAULT_ROTATE_MS = 750
DEFAULT_TIMEOUT_MS = 5000
DEFAULT_LIMIT = 2


class PartialProviderConfig(BaseModel):
    """User-supplied provider config; every field is optional."""

    model_config = ConfigDict(populate_by_name=True)

    resources: list[str] | None = None  # API hosts
    path: str | None = None
    max_url: int | None = Field(default=None, alias="maxURL", ge=0)
    rotate: int | None = Field(default=None, ge=0)
    timeout: int | None = Field(default=None, ge=0)
    limit: int | None = Field(default=None, ge=0)
    random: bool | None = None
    index: int | None = Field(default=None, ge=0)


class ProviderConfig(BaseModel):
    """Fully resolved, immutable provider config."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    # API hosts, in traversal order
    resources: tuple[str, ...] = Field(min_length=1)

    # Root path, after host and before prefix
    path: str = DEFAULT_PATH

    # URL length limit
    max_url: int = Field(default=DEFAULT_MAX_URL, alias="maxURL")

    # Milliseconds before the next host is queried in parallel
    rotate: int = DEFAULT_ROTATE_MS

    # Milliseconds before a single call is considered failed
    timeout: int = DEFAULT_TIMEOUT_MS

    # Number of attempts for each host
    limit: int = DEFAULT_LIMIT

    # Host list was permuted when the config was created
    random: bool = False

    # Start index into resources
    index: int = 0

    @property
    def start_index(self) -> int:
        """Start index clamped into the host list."""
        return self.index % len(self.resources)


PartialConfigInput = PartialProviderConfig | Mapping[str, Any]


def create_config(
    source: PartialConfigInput, *, rng: random.Random | None = None
) -> ProviderConfig | None:
    """Create a full provider config from partial data.

    Returns ``None`` when ``source`` has no hosts. Raises pydantic's
    ``ValidationError`` when a field has the wrong type.
    """
    partial = (
        source
        if isinstance(source, PartialProviderConfig)
        else PartialProviderConfig.model_validate(source)
    )
    if not partial.resources:
        return None

    resources = list(partial.resources)
    if partial.random is True:
        resources = (rng or random.Random()).sample(resources, len(resources))

    return ProviderConfig(
        resources=tuple(resources),
        path=DEFAULT_PATH if partial.path is None else partial.path,
        max_url=partial.max_url or DEFAULT_MAX_URL,
        rotate=partial.rotate or DEFAULT_ROTATE_MS,
        timeout=partial.timeout or DEFAULT_TIMEOUT_MS,
        limit=partial.limit or DEFAULT_LIMIT,
        random=partial.random is True,
        index=partial.index or 0,
    )


class ProviderConfigRegistry:
    """Holds one live ``ProviderConfig`` per provider key.

    Args:
        rng: Random source used to permute host lists of ``random`` configs.
    """

    def __init__(self, rng: random.Random | None = None) -> None:
        self._rng = rng or random.Random()
        self._configs: dict[str, ProviderConfig] = {}

    def set_config(self, provider: str, partial: PartialConfigInput) -> bool:
        """Register a config for ``provider``, replacing any previous one.

        Returns False (and keeps the previous config) when the partial config
        has no hosts or fails validation.
        """
        try:
            config = create_config(partial, rng=self._rng)
        except ValidationError as exc:
            logger.warning("Invalid API config for provider '%s': %s", provider, exc)
            return False

        if config is None:
            logger.warning("API config for provider '%s' has no hosts, ignoring", provider)
            return False

        self._configs[provider] = config
        logger.info(
            "API config set for provider '%s' with %d hosts",
            provider,
            len(config.resources),
        )
        return True

    def get_config(self, provider: str) -> ProviderConfig | None:
        """Return the config for ``provider`` or None if never set."""
        return self._configs.get(provider)

    def record_index(self, provider: str, host: str) -> None:
        """Make ``host`` the first host tried by the next query for ``provider``."""
        config = self._configs.get(provider)
        if config is None:
            return
        try:
            index = config.resources.index(host)
        except ValueError:
            # Config was replaced while the query was running
            return
        if index != config.index:
            self._configs[provider] = config.model_copy(update={"index": index})
            logger.info("Provider '%s' now starts at host %s", provider, host)

    def providers(self) -> list[str]:
        return list(self._configs)

    def load(self, partials: Mapping[str, PartialConfigInput]) -> int:
        """Register several configs at once; returns how many were accepted."""
        return sum(1 for provider, partial in partials.items() if self.set_config(provider, partial))


def fallback_order(hosts: Sequence[str], rng: random.Random) -> list[str]:
    """Permute fallback hosts by repeatedly taking the first or last one."""
    remaining = list(hosts)
    ordered: list[str] = []
    while remaining:
        if len(remaining) == 1 or rng.random() > 0.5:
            ordered.append(remaining.pop(0))
        else:
            ordered.append(remaining.pop())
    return ordered


def create_default_registry(
    *,
    primary: str = DEFAULT_API_HOST,
    fallbacks: Sequence[str] = FALLBACK_API_HOSTS,
    seed: int | None = None,
    rng: random.Random | None = None,
) -> ProviderConfigRegistry:
    """Create a registry with the default ("") provider pre-registered."""
    rng = rng or random.Random(seed)
    registry = ProviderConfigRegistry(rng=rng)
    registry.set_config("", {"resources": [primary, *fallback_order(fallbacks, rng)]})
    return registry


def load_provider_configs(yaml_path: str) -> dict[str, PartialProviderConfig]:
    """Parse a providers YAML file into partial provider configs.

    Args:
        yaml_path: Path to the YAML file, shaped as ``providers: {key: {...}}``.

    Returns:
        A dict mapping provider keys to ``PartialProviderConfig`` instances.
        Missing or unreadable files yield an empty dict.
    """
    path = Path(yaml_path)

    if not path.exists():
        logger.warning("Providers file not found at %s, using default provider only", yaml_path)
        return {}

    try:
        raw = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:
        logger.error("Failed to parse providers YAML at %s: %s", yaml_path, exc)
        return {}

    if not isinstance(raw, dict) or not isinstance(raw.get("providers"), dict):
        logger.warning("Providers YAML missing 'providers' mapping, ignoring %s", yaml_path)
        return {}

    partials: dict[str, PartialProviderConfig] = {}
    for provider, config in raw["providers"].items():
        key = "" if provider is None else str(provider)
        try:
            partials[key] = PartialProviderConfig.model_validate(config or {})
        except ValidationError as exc:
            logger.error("Invalid config for provider '%s': %s, skipping", key, exc)

    return partials
