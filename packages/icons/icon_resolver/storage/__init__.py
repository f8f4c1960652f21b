"""Icon storage package."""

from icon_resolver.storage.icon_storage import IconBucket, IconLookup, IconStorage, LookupState

__all__ = ["IconBucket", "IconLookup", "IconStorage", "LookupState"]
