"""In-memory icon storage, bucketed by (provider, prefix).

Each bucket holds resolved icon definitions and a set of names known to be
absent upstream. A name is never in both: storing a definition clears the
missing marker, and marking a stored icon as missing is a no-op.

Lookups return an explicit three-way ``IconLookup``:
- FOUND: definition is stored
- MISSING: upstream said the icon does not exist, don't query again
- UNKNOWN: never looked up, caller may fetch it
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from pydantic import ValidationError

from icon_resolver.models.icons import IconDefinition
from icon_resolver.models.names import IconName, icon_to_string, validate_icon_name

logger = logging.getLogger(__name__)


class LookupState(str, Enum):
    """State of an icon name in storage."""

    FOUND = "found"
    MISSING = "missing"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class IconLookup:
    """Tagged lookup result; ``icon`` is set only for FOUND."""

    state: LookupState
    icon: IconDefinition | None = None

    @property
    def found(self) -> bool:
        return self.state is LookupState.FOUND

    @property
    def missing(self) -> bool:
        return self.state is LookupState.MISSING

    @property
    def unknown(self) -> bool:
        return self.state is LookupState.UNKNOWN


_MISSING = IconLookup(LookupState.MISSING)
_UNKNOWN = IconLookup(LookupState.UNKNOWN)


@dataclass
class IconBucket:
    """Icons of one icon set from one provider."""

    provider: str
    prefix: str
    icons: dict[str, IconDefinition] = field(default_factory=dict)
    missing: set[str] = field(default_factory=set)


class IconStorage:
    """Table of icon buckets plus the simple-names toggle.

    Args:
        simple_names: Allow icons without provider and prefix, stored in the
            ("", "") bucket.
    """

    def __init__(self, *, simple_names: bool = False) -> None:
        self._buckets: dict[str, dict[str, IconBucket]] = {}
        self._simple_names = simple_names

    def allow_simple_names(self, allow: bool | None = None) -> bool:
        """Query or set whether provider- and prefix-free names are accepted."""
        if isinstance(allow, bool):
            self._simple_names = allow
        return self._simple_names

    @property
    def simple_names(self) -> bool:
        return self._simple_names

    # ------------------------------------------------------------------
    # Buckets
    # ------------------------------------------------------------------

    def get_bucket(self, provider: str, prefix: str) -> IconBucket:
        """Return the bucket for (provider, prefix), creating it if needed."""
        prefixes = self._buckets.setdefault(provider, {})
        if prefix not in prefixes:
            prefixes[prefix] = IconBucket(provider=provider, prefix=prefix)
        return prefixes[prefix]

    def find_bucket(self, provider: str, prefix: str) -> IconBucket | None:
        """Return the bucket if it exists, without creating it."""
        return self._buckets.get(provider, {}).get(prefix)

    # ------------------------------------------------------------------
    # Icons
    # ------------------------------------------------------------------

    def has(self, bucket: IconBucket, name: str) -> bool:
        return name in bucket.icons

    def get(self, bucket: IconBucket, name: str) -> IconLookup:
        icon = bucket.icons.get(name)
        if icon is not None:
            return IconLookup(LookupState.FOUND, icon)
        if name in bucket.missing:
            return _MISSING
        return _UNKNOWN

    def put(
        self,
        bucket: IconBucket,
        name: str,
        data: IconDefinition | Mapping[str, Any],
    ) -> bool:
        """Validate and store one icon. Returns False without changes on bad input."""
        key = IconName(bucket.provider, bucket.prefix, name)
        if not validate_icon_name(key, allow_simple_name=self._simple_names):
            logger.debug("Rejected icon with invalid name %r", icon_to_string(key))
            return False

        if isinstance(data, IconDefinition):
            icon = data
        else:
            try:
                icon = IconDefinition.model_validate(data)
            except ValidationError as exc:
                logger.debug("Rejected icon %s: %s", icon_to_string(key), exc)
                return False

        bucket.icons[name] = icon
        bucket.missing.discard(name)
        return True

    def mark_missing(self, bucket: IconBucket, name: str) -> None:
        """Remember that upstream does not have ``name``, unless it is stored."""
        if name not in bucket.icons:
            bucket.missing.add(name)

    def list_icons(self, provider: str | None = None, prefix: str | None = None) -> list[str]:
        """List stored icon names, in insertion order.

        With both ``provider`` and ``prefix`` the names of that one bucket are
        returned as is; otherwise names are qualified as
        ``[@provider:]prefix:name``.
        """
        if provider is not None and prefix is not None:
            bucket = self.find_bucket(provider, prefix)
            return list(bucket.icons) if bucket else []

        providers = [provider] if provider is not None else list(self._buckets)
        names: list[str] = []
        for provider_key in providers:
            for bucket in self._buckets.get(provider_key, {}).values():
                if prefix is not None and bucket.prefix != prefix:
                    continue
                names.extend(
                    icon_to_string(IconName(bucket.provider, bucket.prefix, name))
                    for name in bucket.icons
                )
        return names

    # ------------------------------------------------------------------
    # Stats
    # ------------------------------------------------------------------

    def get_stats(self) -> dict:
        """Return storage statistics for the health endpoint."""
        buckets = [b for prefixes in self._buckets.values() for b in prefixes.values()]
        return {
            "buckets": len(buckets),
            "icons": sum(len(b.icons) for b in buckets),
            "missing": sum(len(b.missing) for b in buckets),
            "simple_names": self._simple_names,
        }
