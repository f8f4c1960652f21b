"""HTTP transport for icon API hosts.

Builds icon set queries (``{path}{prefix}.json?icons=a,b,c``) that fit within
the provider's URL length limit and performs single calls against a given
host, classifying each response for the host rotation scheduler:

- 2xx with a JSON object body → success
- 404, or a JSON body that is not an object (the API answers ``404`` for
  unknown prefixes) → hard failure
- any other status, invalid JSON, or a request error (connection problems,
  redirect loops, undecodable bodies) → soft failure

Retries, host selection, and deadlines are the scheduler's job; a cancelled
call simply propagates ``CancelledError`` out of httpx.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass

import httpx

from icon_resolver.config.providers import ProviderConfig
from icon_resolver.redundancy.types import AttemptResult, HostQuery

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class IconQuery:
    """One API request for several icons of the same prefix."""

    prefix: str
    names: tuple[str, ...]
    path: str


class IconApiClient:
    """Async HTTP client for icon API hosts.

    Parameters
    ----------
    client:
        Pre-configured ``httpx.AsyncClient``. When omitted a client is created
        on first use and closed by ``aclose``.
    timeout_seconds:
        Socket-level timeout for the created client. The scheduler applies
        the provider's own per-host timeout on top of it.
    user_agent:
        User-Agent header for the created client.
    """

    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        *,
        timeout_seconds: float = 10.0,
        user_agent: str = "icon-resolver/1.0",
    ) -> None:
        self._client = client
        self._owns_client = client is None
        self._timeout_seconds = timeout_seconds
        self._user_agent = user_agent

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(self._timeout_seconds),
                headers={"User-Agent": self._user_agent},
                follow_redirects=True,
            )
        return self._client

    async def aclose(self) -> None:
        """Close the underlying client if this instance created it."""
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    # ------------------------------------------------------------------
    # Query building
    # ------------------------------------------------------------------

    @staticmethod
    def icons_path(config: ProviderConfig, prefix: str, names: Sequence[str]) -> str:
        return f"{config.path}{prefix}.json?icons={','.join(names)}"

    @staticmethod
    def max_names_length(config: ProviderConfig, prefix: str) -> int:
        """Room left for the comma separated icon list in a URL."""
        longest_host = max(len(host) for host in config.resources)
        fixed = len(config.path) + len(f"{prefix}.json?icons=")
        return config.max_url - longest_host - fixed

    def build_queries(
        self, config: ProviderConfig, prefix: str, names: Sequence[str]
    ) -> list[IconQuery]:
        """Split ``names`` into queries that keep URLs within ``max_url``.

        A single name longer than the limit still gets its own query.
        """
        max_length = self.max_names_length(config, prefix)
        groups: list[list[str]] = []
        current: list[str] = []
        length = 0

        for name in names:
            length += len(name) + 1
            if length >= max_length and current:
                groups.append(current)
                current = []
                length = len(name)
            current.append(name)

        if current:
            groups.append(current)

        return [
            IconQuery(prefix=prefix, names=tuple(group), path=self.icons_path(config, prefix, group))
            for group in groups
        ]

    # ------------------------------------------------------------------
    # Calls
    # ------------------------------------------------------------------

    def query(self, icon_query: IconQuery) -> HostQuery:
        """Bind a query to the per-host callable the scheduler expects."""

        async def send(host: str) -> AttemptResult:
            return await self.fetch(host, icon_query.path)

        return send

    async def fetch(self, host: str, path: str) -> AttemptResult:
        """Perform one GET against ``host`` and classify the outcome."""
        url = host.rstrip("/") + path

        try:
            response = await self._get_client().get(url)
        except httpx.RequestError as exc:
            logger.debug("Request error for %s: %s", url, exc)
            return AttemptResult.soft(f"{type(exc).__name__}: {exc}")

        if response.status_code == 404:
            return AttemptResult.hard(f"{url} returned 404")

        if not response.is_success:
            return AttemptResult.soft(f"{url} returned {response.status_code}")

        try:
            data = response.json()
        except ValueError:
            return AttemptResult.soft(f"{url} returned invalid JSON")

        if not isinstance(data, dict):
            return AttemptResult.hard(f"{url} returned {data!r}")

        return AttemptResult.success(data)
