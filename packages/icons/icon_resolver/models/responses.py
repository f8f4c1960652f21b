"""API response envelope and icon payload models.

All API responses are wrapped in ``ApiResponse``:
{ success: bool, data: T | None, error: str | None, meta: dict | None }
"""

from __future__ import annotations

from typing import Generic, TypeVar

from pydantic import BaseModel

T = TypeVar("T")


class ApiResponse(BaseModel, Generic[T]):
    """JSON envelope for all API responses."""

    success: bool
    data: T | None = None
    error: str | None = None
    meta: dict | None = None


class IconExistence(BaseModel):
    """Result of a local existence check."""

    name: str
    exists: bool


class IconList(BaseModel):
    """Icon names known for a provider/prefix scope."""

    provider: str | None = None
    prefix: str | None = None
    icons: list[str]


class CollectionAdded(BaseModel):
    """Outcome of an icon set upload."""

    provider: str
    prefix: str
    added: bool
