"""Icon name parsing and validation.

Accepted forms:
- ``prefix:name``
- ``provider:prefix:name`` or ``@provider:prefix:name``
- ``prefix-name`` (first dash separates prefix from name)
- ``name`` — only when simple names are allowed

Every segment must match ``[a-z0-9]+(-[a-z0-9]+)*``. Malformed input yields
``None``; nothing in this module raises for bad names.
"""

from __future__ import annotations

import re
from typing import NamedTuple

ICON_NAME_PATTERN = re.compile(r"^[a-z0-9]+(-[a-z0-9]+)*$")


class IconName(NamedTuple):
    """Fully qualified icon key: (provider, prefix, name)."""

    provider: str
    prefix: str
    name: str

    def __str__(self) -> str:
        return icon_to_string(self)


def _matches(value: object) -> bool:
    return isinstance(value, str) and ICON_NAME_PATTERN.match(value) is not None


def validate_icon_name(icon: IconName | None, *, allow_simple_name: bool = False) -> bool:
    """Check that provider, prefix and name are syntactically valid.

    An empty provider is always valid. An empty prefix is valid only when
    ``allow_simple_name`` is set.
    """
    if icon is None:
        return False
    provider_ok = icon.provider == "" or _matches(icon.provider)
    prefix_ok = (allow_simple_name and icon.prefix == "") or _matches(icon.prefix)
    return provider_ok and prefix_ok and _matches(icon.name)


def string_to_icon(
    value: object,
    *,
    validate: bool = True,
    allow_simple_name: bool = False,
    provider: str = "",
) -> IconName | None:
    """Parse an icon name string into an ``IconName``."""
    if not isinstance(value, str) or not value:
        return None

    segments = value.split(":")

    if value.startswith("@"):
        if len(segments) < 2 or len(segments) > 3:
            return None
        provider = segments.pop(0)[1:]

    if len(segments) > 3 or not segments:
        return None

    if len(segments) > 1:
        name = segments.pop()
        prefix = segments.pop()
        icon = IconName(
            provider=segments[0] if segments else provider,
            prefix=prefix,
            name=name,
        )
        return None if validate and not validate_icon_name(icon) else icon

    name = segments[0]
    dashed = name.split("-")
    if len(dashed) > 1:
        icon = IconName(provider=provider, prefix=dashed[0], name="-".join(dashed[1:]))
        return None if validate and not validate_icon_name(icon) else icon

    if allow_simple_name and provider == "":
        icon = IconName(provider=provider, prefix="", name=name)
        if validate and not validate_icon_name(icon, allow_simple_name=True):
            return None
        return icon

    return None


def icon_to_string(icon: IconName) -> str:
    """Format an ``IconName`` back into its canonical string form."""
    result = icon.name
    if icon.prefix:
        result = f"{icon.prefix}:{result}"
    if icon.provider:
        result = f"@{icon.provider}:{result}"
    return result
