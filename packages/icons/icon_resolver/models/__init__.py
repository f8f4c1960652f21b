"""Public models for the icon resolver."""

from icon_resolver.models.icons import DEFAULT_ICON_PROPS, IconDefinition
from icon_resolver.models.names import (
    IconName,
    icon_to_string,
    string_to_icon,
    validate_icon_name,
)
from icon_resolver.models.responses import (
    ApiResponse,
    CollectionAdded,
    IconExistence,
    IconList,
)

__all__ = [
    "ApiResponse",
    "CollectionAdded",
    "DEFAULT_ICON_PROPS",
    "IconDefinition",
    "IconExistence",
    "IconList",
    "IconName",
    "icon_to_string",
    "string_to_icon",
    "validate_icon_name",
]
