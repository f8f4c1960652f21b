"""Icon set parsing: alias resolution and property merging.

An icon set payload looks like::

    {
        "prefix": "mdi",
        "width": 24, "height": 24,          # defaults for all icons
        "icons": {"home": {"body": "<path d='...'/>"}},
        "aliases": {"house": {"parent": "home", "hFlip": true}},
        "not_found": ["missing-icon"],
    }

Aliases may point at other aliases. Transformations accumulate along the
chain (rotations add up modulo 4, flips toggle); other properties set on the
child override the parent's.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from typing import Any

# Properties copied child-over-parent when merging
_COPIED_PROPS = ("body", "left", "top", "width", "height")


def merge_icon_data(parent: Mapping[str, Any], child: Mapping[str, Any]) -> dict[str, Any]:
    """Merge ``child`` icon properties over ``parent``."""
    result: dict[str, Any] = {}

    if bool(parent.get("hFlip")) != bool(child.get("hFlip")):
        result["hFlip"] = True
    if bool(parent.get("vFlip")) != bool(child.get("vFlip")):
        result["vFlip"] = True
    rotate = (parent.get("rotate", 0) + child.get("rotate", 0)) % 4
    if rotate:
        result["rotate"] = rotate

    for key in _COPIED_PROPS:
        if key in child:
            result[key] = child[key]
        elif key in parent:
            result[key] = parent[key]
    return result


def get_icons_tree(payload: Mapping[str, Any]) -> dict[str, list[str] | None]:
    """Map every icon and alias name to its chain of parents.

    Icons map to ``[]``; aliases map to the list of names leading to an icon;
    aliases with a broken or looping chain map to ``None``.
    """
    icons: Mapping[str, Any] = payload.get("icons") or {}
    aliases: Mapping[str, Any] = payload.get("aliases") or {}
    resolved: dict[str, list[str] | None] = {}

    def resolve(name: str) -> list[str] | None:
        if name in icons:
            resolved[name] = []
            return resolved[name]
        if name not in resolved:
            # Placeholder breaks loops
            resolved[name] = None
            alias = aliases.get(name)
            parent = alias.get("parent") if isinstance(alias, Mapping) else None
            if isinstance(parent, str):
                chain = resolve(parent)
                if chain is not None:
                    resolved[name] = [parent, *chain]
        return resolved[name]

    for name in [*icons, *aliases]:
        resolve(name)
    return resolved


def _resolve_icon(payload: Mapping[str, Any], name: str, chain: list[str]) -> dict[str, Any]:
    icons: Mapping[str, Any] = payload["icons"]
    aliases: Mapping[str, Any] = payload.get("aliases") or {}

    props: dict[str, Any] = {}
    for item in (name, *chain):
        props = merge_icon_data(icons.get(item) or aliases[item], props)

    # Root level dimensions act as defaults for every icon
    return merge_icon_data(payload, props)


def parse_icon_set(payload: Mapping[str, Any]) -> Iterator[tuple[str, dict[str, Any] | None]]:
    """Yield ``(name, icon_data)`` for every icon and resolvable alias.

    Names listed in ``not_found`` are yielded with ``None``.
    """
    for name in payload.get("not_found") or []:
        yield name, None

    for name, chain in get_icons_tree(payload).items():
        if chain is not None:
            yield name, _resolve_icon(payload, name, chain)
