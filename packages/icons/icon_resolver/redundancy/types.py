"""Data models for the host rotation scheduler."""

from __future__ import annotations

import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class AttemptStatus(str, Enum):
    """Classification of a single call to one host."""

    SUCCESS = "success"
    SOFT_FAILURE = "soft_failure"  # timeout / network, retryable
    HARD_FAILURE = "hard_failure"  # authoritative "does not exist"


@dataclass(frozen=True)
class AttemptResult:
    """Outcome of one call, as reported by the transport."""

    status: AttemptStatus
    data: Any = None
    error: str | None = None

    @classmethod
    def success(cls, data: Any) -> AttemptResult:
        return cls(AttemptStatus.SUCCESS, data=data)

    @classmethod
    def soft(cls, error: str) -> AttemptResult:
        return cls(AttemptStatus.SOFT_FAILURE, error=error)

    @classmethod
    def hard(cls, error: str) -> AttemptResult:
        return cls(AttemptStatus.HARD_FAILURE, error=error)


# Performs one call to the given host
HostQuery = Callable[[str], Awaitable[AttemptResult]]


class FetchStatus(str, Enum):
    """Terminal state of a fetch session."""

    SUCCESS = "success"
    NOT_FOUND = "not_found"
    EXHAUSTED = "exhausted"


@dataclass
class FetchResult:
    """Result of ``HostRotationScheduler.resolve``."""

    status: FetchStatus
    data: Any = None
    host: str | None = None
    attempts: int = 0
    error: str | None = None
    duration_ms: float = 0.0

    @property
    def ok(self) -> bool:
        return self.status is FetchStatus.SUCCESS


@dataclass
class FetchSession:
    """Mutable state of one logical query across the host list."""

    hosts: list[str]
    remaining: list[int]  # attempts left, per position in ``hosts``
    next_position: int = 0  # first host not started yet
    attempts: int = 0
    started_at: float = field(default_factory=time.monotonic)

    @classmethod
    def start(cls, hosts: list[str], attempts_per_host: int) -> FetchSession:
        return cls(hosts=hosts, remaining=[attempts_per_host] * len(hosts))

    @property
    def has_unstarted(self) -> bool:
        return self.next_position < len(self.hosts)

    def advance(self) -> int:
        """Return the position of the next unstarted host and move past it."""
        position = self.next_position
        self.next_position += 1
        return position

    @property
    def elapsed_ms(self) -> float:
        return (time.monotonic() - self.started_at) * 1000
