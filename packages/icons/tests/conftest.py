"""Shared test fixtures and hypothesis strategies for the icon resolver test suite."""

from __future__ import annotations

import asyncio
import random

import pytest
from hypothesis import strategies as st

from icon_resolver.config.providers import ProviderConfig, ProviderConfigRegistry
from icon_resolver.ingestion.ingest import IconSetIngestor
from icon_resolver.redundancy.scheduler import HostRotationScheduler
from icon_resolver.redundancy.types import AttemptResult
from icon_resolver.storage.icon_storage import IconStorage


# ---------------------------------------------------------------------------
# Scripted hosts for scheduler tests
# ---------------------------------------------------------------------------


class ScriptedHosts:
    """Fake transport: each host answers with a scripted (delay, result) per call.

    The last script entry repeats once the script runs out. Calls and
    cancellations are recorded in order.
    """

    def __init__(self, scripts: dict[str, list[tuple[float, AttemptResult]]]) -> None:
        self._scripts = scripts
        self._counts: dict[str, int] = {}
        self.calls: list[str] = []
        self.cancelled: list[str] = []

    async def __call__(self, host: str) -> AttemptResult:
        self.calls.append(host)
        count = self._counts.get(host, 0)
        self._counts[host] = count + 1
        script = self._scripts[host]
        delay, result = script[min(count, len(script) - 1)]
        try:
            await asyncio.sleep(delay)
        except asyncio.CancelledError:
            self.cancelled.append(host)
            raise
        return result


SOFT = AttemptResult.soft("connection refused")
HARD = AttemptResult.hard("404")
NEVER = 60.0  # seconds; longer than any test


def ok(data: object = "payload") -> AttemptResult:
    return AttemptResult.success(data)


# ---------------------------------------------------------------------------
# Component fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def storage() -> IconStorage:
    return IconStorage()


@pytest.fixture
def simple_storage() -> IconStorage:
    return IconStorage(simple_names=True)


@pytest.fixture
def ingestor(storage: IconStorage) -> IconSetIngestor:
    return IconSetIngestor(storage)


@pytest.fixture
def registry() -> ProviderConfigRegistry:
    return ProviderConfigRegistry(rng=random.Random(1234))


@pytest.fixture
def scheduler(registry: ProviderConfigRegistry) -> HostRotationScheduler:
    return HostRotationScheduler(registry, rng=random.Random(1234))


@pytest.fixture
def three_hosts() -> ProviderConfig:
    """Fast config: 50ms rotation, 1s per call, 2 attempts per host."""
    return ProviderConfig(
        resources=("https://a.test", "https://b.test", "https://c.test"),
        rotate=50,
        timeout=1000,
        limit=2,
    )


# ---------------------------------------------------------------------------
# Hypothesis strategies (reusable across property tests)
# ---------------------------------------------------------------------------

# Valid icon name segments: lowercase alphanumerics joined by single dashes
name_segments = st.from_regex(r"[a-z0-9]{1,8}(-[a-z0-9]{1,8}){0,2}", fullmatch=True)

# Strings that are never valid segments
invalid_segments = st.one_of(
    st.just(""),
    st.from_regex(r"[A-Z]{1,5}", fullmatch=True),
    st.from_regex(r"[a-z]{1,5}--[a-z]{1,5}", fullmatch=True),
    st.from_regex(r"-[a-z]{1,5}", fullmatch=True),
    st.from_regex(r"[a-z]{1,5} [a-z]{1,5}", fullmatch=True),
)

icon_bodies = st.from_regex(r"<path d=\"M[0-9 ]{1,20}\"/>", fullmatch=True)

icon_data = st.fixed_dictionaries(
    {"body": icon_bodies},
    optional={
        "width": st.integers(min_value=1, max_value=64),
        "height": st.integers(min_value=1, max_value=64),
        "rotate": st.integers(min_value=0, max_value=3),
        "hFlip": st.booleans(),
    },
)

icon_sets = st.builds(
    lambda prefix, icons: {"prefix": prefix, "icons": icons},
    name_segments,
    st.dictionaries(name_segments, icon_data, min_size=1, max_size=8),
)
