"""Structural validation for icon set payloads.

A quick shape check done before any icon is parsed or stored, so that a
malformed payload is rejected as a whole.
"""

from __future__ import annotations

from collections.abc import Mapping

from icon_resolver.models.names import ICON_NAME_PATTERN

_DIMENSION_PROPS = ("left", "top", "width", "height")
_FLIP_PROPS = ("hFlip", "vFlip")


def _is_number(value: object) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _is_icon_name(value: object) -> bool:
    return isinstance(value, str) and ICON_NAME_PATTERN.match(value) is not None


def check_optional_props(obj: Mapping) -> bool:
    """Optional icon properties, when present, must have the right type."""
    for key in _DIMENSION_PROPS:
        if key in obj and not _is_number(obj[key]):
            return False
    if "rotate" in obj and (not isinstance(obj["rotate"], int) or isinstance(obj["rotate"], bool)):
        return False
    return all(isinstance(obj[key], bool) for key in _FLIP_PROPS if key in obj)


def validate_icon_set_shape(payload: object) -> bool:
    """Return True if ``payload`` looks like a valid icon set.

    Checks the required top-level fields, that every icon has a string body,
    that every alias points at an existing icon or alias, and the types of
    optional properties.
    """
    if not isinstance(payload, Mapping):
        return False

    if not isinstance(payload.get("prefix"), str):
        return False
    if "provider" in payload and not isinstance(payload["provider"], str):
        return False

    icons = payload.get("icons")
    if not isinstance(icons, Mapping) or not check_optional_props(payload):
        return False

    not_found = payload.get("not_found")
    if not_found is not None and (
        not isinstance(not_found, list) or not all(isinstance(n, str) for n in not_found)
    ):
        return False

    for name, icon in icons.items():
        if (
            not _is_icon_name(name)
            or not isinstance(icon, Mapping)
            or not isinstance(icon.get("body"), str)
            or not check_optional_props(icon)
        ):
            return False

    aliases = payload.get("aliases")
    if aliases is None:
        return True
    if not isinstance(aliases, Mapping):
        return False

    for name, alias in aliases.items():
        if not _is_icon_name(name) or not isinstance(alias, Mapping):
            return False
        parent = alias.get("parent")
        if (
            not isinstance(parent, str)
            or (parent not in icons and parent not in aliases)
            or not check_optional_props(alias)
        ):
            return False

    return True
