"""Redundancy for API hosts — rotation, retries, and racing slow hosts."""

from icon_resolver.redundancy.scheduler import HostRotationScheduler
from icon_resolver.redundancy.types import (
    AttemptResult,
    AttemptStatus,
    FetchResult,
    FetchSession,
    FetchStatus,
    HostQuery,
)

__all__ = [
    "AttemptResult",
    "AttemptStatus",
    "FetchResult",
    "FetchSession",
    "FetchStatus",
    "HostQuery",
    "HostRotationScheduler",
]
