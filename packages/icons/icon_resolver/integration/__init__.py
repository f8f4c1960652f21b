"""Integrations with external icon API hosts."""

from icon_resolver.integration.api_client import IconApiClient, IconQuery

__all__ = ["IconApiClient", "IconQuery"]
