"""Icon definition model.

Stored definitions are frozen so callers can be handed the stored object
directly without risking in-place mutation of the storage.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

# Defaults applied to any property missing from an icon or icon set
DEFAULT_ICON_DIMENSIONS: dict[str, Any] = {
    "left": 0,
    "top": 0,
    "width": 16,
    "height": 16,
}

DEFAULT_ICON_TRANSFORMATIONS: dict[str, Any] = {
    "rotate": 0,
    "hFlip": False,
    "vFlip": False,
}

# Every optional icon property with its default, keyed by wire name
DEFAULT_ICON_PROPS: dict[str, Any] = {
    **DEFAULT_ICON_DIMENSIONS,
    **DEFAULT_ICON_TRANSFORMATIONS,
}


class IconDefinition(BaseModel):
    """Renderable icon: SVG body plus viewBox and transformation attributes."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    body: str = Field(min_length=1)
    left: float = 0
    top: float = 0
    width: float = 16
    height: float = 16
    rotate: int = 0  # quarter turns
    h_flip: bool = Field(default=False, alias="hFlip")
    v_flip: bool = Field(default=False, alias="vFlip")

    def to_json(self) -> dict[str, Any]:
        """Serialize using the wire names (``hFlip``/``vFlip``)."""
        return self.model_dump(by_alias=True)
