"""Icon lookup service — storage first, redundant API hosts on a miss.

Coordinates a lookup through the pipeline:
parse names → check storage → group unknown icons by (provider, prefix) →
split into URL-length-bounded queries → run each query through the host
rotation scheduler → ingest the returned icon set → re-read storage.

Outcome of a query, per requested icon:
- success: icons in the response are stored, requested icons absent from it
  are marked missing
- not found (hard failure): every requested icon is marked missing
- exhausted (all hosts failed): icons stay unknown so a later lookup retries

Storage is only written after the scheduler has picked a winning response,
so responses from abandoned calls never reach it. Concurrent lookups of the
same icon share one fetch.
"""

from __future__ import annotations

import asyncio
import functools
import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any

from icon_resolver.config.providers import (
    PartialConfigInput,
    ProviderConfig,
    ProviderConfigRegistry,
)
from icon_resolver.ingestion.ingest import IconSetIngestor, add_icon_set
from icon_resolver.ingestion.validator import validate_icon_set_shape
from icon_resolver.integration.api_client import IconApiClient, IconQuery
from icon_resolver.models.icons import IconDefinition
from icon_resolver.models.names import IconName, string_to_icon, validate_icon_name
from icon_resolver.redundancy.scheduler import HostRotationScheduler
from icon_resolver.redundancy.types import FetchResult, FetchStatus
from icon_resolver.storage.icon_storage import IconBucket, IconLookup, IconStorage, LookupState

logger = logging.getLogger(__name__)


@dataclass
class IconLoadResult:
    """Icons of a ``load_icons`` call, sorted by final state."""

    loaded: list[IconName] = field(default_factory=list)
    missing: list[IconName] = field(default_factory=list)
    unresolved: list[IconName] = field(default_factory=list)  # could not be determined
    invalid: list[str] = field(default_factory=list)  # malformed names


class IconService:
    """Lookup API over storage, ingestion, and the network.

    Dependencies are injected via the constructor so the service is testable
    with a fake scheduler or transport.
    """

    def __init__(
        self,
        *,
        storage: IconStorage,
        registry: ProviderConfigRegistry,
        scheduler: HostRotationScheduler | None = None,
        api_client: IconApiClient | None = None,
    ) -> None:
        self._storage = storage
        self._registry = registry
        self._ingestor = IconSetIngestor(storage)
        self._scheduler = scheduler or HostRotationScheduler(registry)
        self._api_client = api_client or IconApiClient()
        self._pending: dict[IconName, asyncio.Task[None]] = {}

    @property
    def storage(self) -> IconStorage:
        return self._storage

    @property
    def registry(self) -> ProviderConfigRegistry:
        return self._registry

    async def aclose(self) -> None:
        await self._api_client.aclose()

    # ------------------------------------------------------------------
    # Config surface
    # ------------------------------------------------------------------

    def set_api_config(self, provider: str, partial: PartialConfigInput) -> bool:
        return self._registry.set_config(provider, partial)

    def get_api_config(self, provider: str) -> ProviderConfig | None:
        return self._registry.get_config(provider)

    def allow_simple_names(self, allow: bool | None = None) -> bool:
        return self._storage.allow_simple_names(allow)

    # ------------------------------------------------------------------
    # Storage surface
    # ------------------------------------------------------------------

    def parse_name(self, name: str | IconName) -> IconName | None:
        """Parse a name, honouring the simple names toggle; None if malformed."""
        simple = self._storage.simple_names
        if isinstance(name, IconName):
            return name if validate_icon_name(name, allow_simple_name=simple) else None
        return string_to_icon(name, allow_simple_name=simple)

    def get_icon_data(self, name: str | IconName) -> IconLookup | None:
        """Three-way storage lookup; None for malformed names."""
        icon = self.parse_name(name)
        if icon is None:
            return None
        bucket = self._storage.get_bucket(icon.provider, icon.prefix)
        return self._storage.get(bucket, icon.name)

    def icon_exists(self, name: str | IconName) -> bool:
        lookup = self.get_icon_data(name)
        return lookup is not None and lookup.found

    def get_icon(self, name: str | IconName) -> IconDefinition | None:
        """Stored icon with every property defaulted, or None."""
        lookup = self.get_icon_data(name)
        return lookup.icon if lookup is not None else None

    def list_icons(self, provider: str | None = None, prefix: str | None = None) -> list[str]:
        return self._storage.list_icons(provider, prefix)

    def add_icon(self, name: str, data: IconDefinition | Mapping[str, Any]) -> bool:
        return self._ingestor.add_icon(name, data)

    def add_collection(self, payload: object, provider: str | None = None) -> bool:
        return self._ingestor.ingest(payload, provider)

    # ------------------------------------------------------------------
    # Network loading
    # ------------------------------------------------------------------

    async def load_icon(self, name: str | IconName) -> IconDefinition | None:
        """Load one icon, fetching it if needed."""
        await self.load_icons([name])
        return self.get_icon(name)

    async def load_icons(self, names: Iterable[str | IconName]) -> IconLoadResult:
        """Make sure every named icon is either stored or known to be missing."""
        result = IconLoadResult()
        icons: list[IconName] = []
        to_fetch: dict[tuple[str, str], list[str]] = {}
        waiting: set[asyncio.Task[None]] = set()

        for raw in names:
            icon = self.parse_name(raw)
            if icon is None:
                result.invalid.append(str(raw))
                continue
            if icon in icons:
                continue
            icons.append(icon)

            bucket = self._storage.get_bucket(icon.provider, icon.prefix)
            if not self._storage.get(bucket, icon.name).unknown:
                continue

            pending = self._pending.get(icon)
            if pending is not None:
                waiting.add(pending)
            else:
                to_fetch.setdefault((icon.provider, icon.prefix), []).append(icon.name)

        for (provider, prefix), group in to_fetch.items():
            task = asyncio.create_task(self._fetch_group(provider, prefix, group))
            keys = [IconName(provider, prefix, name) for name in group]
            for key in keys:
                self._pending[key] = task
            task.add_done_callback(functools.partial(self._clear_pending, keys))
            waiting.add(task)

        if waiting:
            # Shielded: other lookups may be waiting on the same fetch
            await asyncio.gather(*(asyncio.shield(task) for task in waiting))

        for icon in icons:
            state = self.get_icon_data(icon)
            if state is None or state.state is LookupState.UNKNOWN:
                result.unresolved.append(icon)
            elif state.state is LookupState.FOUND:
                result.loaded.append(icon)
            else:
                result.missing.append(icon)

        logger.debug(
            "Loaded %d icons, %d missing, %d unresolved",
            len(result.loaded),
            len(result.missing),
            len(result.unresolved),
        )
        return result

    def _clear_pending(self, keys: list[IconName], task: asyncio.Task[None]) -> None:
        for key in keys:
            if self._pending.get(key) is task:
                del self._pending[key]

    async def _fetch_group(self, provider: str, prefix: str, names: list[str]) -> None:
        """Fetch icons of one icon set, one scheduler session per query."""
        if not prefix:
            logger.debug("Icons without prefix cannot be fetched: %s", ", ".join(names))
            return

        config = self._registry.get_config(provider)
        if config is None:
            logger.warning(
                "No API config for provider '%s', cannot load %d icons",
                provider,
                len(names),
                extra={"provider": provider, "prefix": prefix},
            )
            return

        bucket = self._storage.get_bucket(provider, prefix)
        queries = self._api_client.build_queries(config, prefix, names)
        await asyncio.gather(*(self._run_query(config, provider, bucket, q) for q in queries))

    async def _run_query(
        self,
        config: ProviderConfig,
        provider: str,
        bucket: IconBucket,
        icon_query: IconQuery,
    ) -> None:
        fetch = await self._scheduler.resolve(
            config, self._api_client.query(icon_query), provider=provider
        )
        self._store_result(bucket, icon_query, fetch)

    def _store_result(self, bucket: IconBucket, icon_query: IconQuery, fetch: FetchResult) -> None:
        if fetch.status is FetchStatus.EXHAUSTED:
            logger.warning(
                "Could not load %d icons from '%s': %s",
                len(icon_query.names),
                bucket.prefix,
                fetch.error,
                extra={"provider": bucket.provider, "prefix": bucket.prefix},
            )
            return

        if fetch.status is FetchStatus.SUCCESS:
            payload = fetch.data
            if not validate_icon_set_shape(payload) or payload.get("prefix") != bucket.prefix:
                logger.warning(
                    "Malformed icon set from %s for prefix '%s', ignoring",
                    fetch.host,
                    bucket.prefix,
                    extra={"host": fetch.host, "prefix": bucket.prefix},
                )
                return
            add_icon_set(self._storage, bucket, payload)

        # Requested icons that did not arrive do not exist upstream
        for name in icon_query.names:
            self._storage.mark_missing(bucket, name)
