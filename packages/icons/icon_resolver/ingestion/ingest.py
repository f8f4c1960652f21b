"""Icon set and single icon ingestion into ``IconStorage``."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from icon_resolver.ingestion.parser import parse_icon_set
from icon_resolver.ingestion.validator import validate_icon_set_shape
from icon_resolver.models.icons import IconDefinition
from icon_resolver.models.names import IconName, string_to_icon, validate_icon_name
from icon_resolver.storage.icon_storage import IconBucket, IconStorage

logger = logging.getLogger(__name__)


def add_icon_set(storage: IconStorage, bucket: IconBucket, payload: Mapping[str, Any]) -> list[str]:
    """Store every icon of an already validated icon set in ``bucket``.

    Names listed in ``not_found`` are marked as missing. Returns the names of
    the icons that were stored.
    """
    added: list[str] = []
    for name, data in parse_icon_set(payload):
        if data is None:
            storage.mark_missing(bucket, name)
        elif storage.put(bucket, name, data):
            added.append(name)
    return added


class IconSetIngestor:
    """Validates icon names and icon sets and writes them to storage."""

    def __init__(self, storage: IconStorage) -> None:
        self._storage = storage

    def add_icon(self, name: str, data: IconDefinition | Mapping[str, Any]) -> bool:
        """Store a single icon given by its full name."""
        icon = string_to_icon(name, allow_simple_name=self._storage.simple_names)
        if icon is None:
            return False
        bucket = self._storage.get_bucket(icon.provider, icon.prefix)
        return self._storage.put(bucket, icon.name, data)

    def ingest(self, payload: object, provider: str | None = None) -> bool:
        """Add an icon set; returns True if at least one icon was stored.

        The provider passed in wins over the payload's own ``provider``.
        In simple names mode an icon set without provider and prefix is
        stored icon by icon, each name parsed on its own.
        """
        if not isinstance(payload, Mapping):
            return False

        if not isinstance(provider, str):
            declared = payload.get("provider")
            provider = declared if isinstance(declared, str) else ""

        prefix = payload.get("prefix")

        if self._storage.simple_names and not provider and not prefix:
            return self._ingest_simple(payload)

        if not isinstance(prefix, str) or not validate_icon_name(IconName(provider, prefix, "a")):
            logger.warning("Rejected icon set with invalid provider/prefix %r/%r", provider, prefix)
            return False

        if not validate_icon_set_shape(payload):
            logger.warning("Rejected malformed icon set for prefix '%s'", prefix)
            return False

        bucket = self._storage.get_bucket(provider, prefix)
        added = add_icon_set(self._storage, bucket, payload)
        logger.info(
            "Added %d icons to '%s'",
            len(added),
            prefix,
            extra={"provider": provider, "prefix": prefix},
        )
        return bool(added)

    def _ingest_simple(self, payload: Mapping[str, Any]) -> bool:
        unprefixed = {**payload, "prefix": ""}
        if not validate_icon_set_shape(unprefixed):
            logger.warning("Rejected malformed icon set without prefix")
            return False

        added = False
        for name, data in parse_icon_set(unprefixed):
            if data is not None and self.add_icon(name, data):
                added = True
        return added
