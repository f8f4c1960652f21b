"""Icon set validation, parsing, and ingestion."""

from icon_resolver.ingestion.ingest import IconSetIngestor, add_icon_set
from icon_resolver.ingestion.parser import get_icons_tree, merge_icon_data, parse_icon_set
from icon_resolver.ingestion.validator import validate_icon_set_shape

__all__ = [
    "IconSetIngestor",
    "add_icon_set",
    "get_icons_tree",
    "merge_icon_data",
    "parse_icon_set",
    "validate_icon_set_shape",
]
