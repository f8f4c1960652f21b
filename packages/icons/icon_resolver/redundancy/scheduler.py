"""Host rotation scheduler — runs one logical query across redundant API hosts.

API hosts should have very high uptime, but routing problems and outages
happen, and it takes a while before an outage is detected upstream. The
scheduler hides those failures from callers:

- Hosts are tried in order, starting at the provider's start index.
- Each call is bounded by the provider's ``timeout``.
- If no call has finished ``rotate`` ms after the last one was started, the
  next host is queried in parallel. The slow call keeps running and may still
  win; whichever usable response arrives first is returned and the remaining
  calls are cancelled.
- Soft failures (timeouts, network errors) are retried on the same host up to
  ``limit`` attempts, then the next host is used.
- A hard failure ends the session immediately with ``NOT_FOUND``.
- When every attempt on every host failed, the session ends with
  ``EXHAUSTED``.

After a success the answering host becomes the provider's start index, so a
host outage costs the rotation delay once instead of on every query.
"""

from __future__ import annotations

import asyncio
import logging
import random

from icon_resolver.config.providers import ProviderConfig, ProviderConfigRegistry
from icon_resolver.redundancy.types import (
    AttemptResult,
    AttemptStatus,
    FetchResult,
    FetchSession,
    FetchStatus,
    HostQuery,
)

logger = logging.getLogger(__name__)


def _failure_rank(task: asyncio.Task[AttemptResult]) -> int:
    """Sort key putting successful attempts before failed ones."""
    return 0 if task.result().status is AttemptStatus.SUCCESS else 1


class HostRotationScheduler:
    """Selects hosts and timing for queries; the transport does the calls.

    Args:
        registry: Registry whose start index is updated after successful
            queries. Optional; without it the start index never moves.
        rng: Random source for per-call shuffling.
    """

    def __init__(
        self,
        registry: ProviderConfigRegistry | None = None,
        *,
        rng: random.Random | None = None,
    ) -> None:
        self._registry = registry
        self._rng = rng or random.Random()

    def traversal_order(self, config: ProviderConfig, *, shuffle: bool = False) -> list[str]:
        """Hosts in the order a session will try them."""
        hosts = list(config.resources)
        if shuffle:
            return self._rng.sample(hosts, len(hosts))
        start = config.start_index
        return hosts[start:] + hosts[:start]

    async def resolve(
        self,
        config: ProviderConfig,
        query: HostQuery,
        *,
        provider: str | None = None,
        shuffle: bool = False,
    ) -> FetchResult:
        """Run ``query`` against the provider's hosts until one answers.

        Args:
            config: Provider config supplying hosts and timing.
            query: Coroutine function performing one call to a host.
            provider: Provider key; when given, a success moves the
                provider's start index to the answering host.
            shuffle: Use a fresh random host order for this call only.
        """
        hosts = self.traversal_order(config, shuffle=shuffle)
        session = FetchSession.start(hosts, config.limit)
        loop = asyncio.get_running_loop()
        rotate_seconds = config.rotate / 1000.0
        call_timeout = config.timeout / 1000.0

        in_flight: dict[asyncio.Task[AttemptResult], int] = {}
        deadline = 0.0
        last_error: str | None = None

        def launch(position: int) -> None:
            nonlocal deadline
            session.remaining[position] -= 1
            session.attempts += 1
            logger.debug(
                "Querying %s (attempt %d, %d left for host)",
                hosts[position],
                session.attempts,
                session.remaining[position],
            )
            task = asyncio.create_task(self._attempt(hosts[position], query, call_timeout))
            in_flight[task] = position
            deadline = loop.time() + rotate_seconds

        launch(session.advance())

        try:
            while in_flight:
                timeout = max(0.0, deadline - loop.time()) if session.has_unstarted else None
                done, _ = await asyncio.wait(
                    set(in_flight),
                    timeout=timeout,
                    return_when=asyncio.FIRST_COMPLETED,
                )

                if not done:
                    # Current hosts are slow: race the next one
                    logger.info(
                        "No response within %dms, also querying %s",
                        config.rotate,
                        hosts[session.next_position],
                    )
                    launch(session.advance())
                    continue

                for task in sorted(done, key=_failure_rank):
                    position = in_flight.pop(task)
                    host = hosts[position]
                    result = task.result()

                    if result.status is AttemptStatus.SUCCESS:
                        return self._complete(session, host, result, provider, shuffle)

                    if result.status is AttemptStatus.HARD_FAILURE:
                        logger.info(
                            "Host %s reported data as missing: %s",
                            host,
                            result.error,
                            extra={"host": host, "attempts": session.attempts},
                        )
                        return FetchResult(
                            status=FetchStatus.NOT_FOUND,
                            host=host,
                            attempts=session.attempts,
                            error=result.error,
                            duration_ms=session.elapsed_ms,
                        )

                    last_error = result.error
                    logger.warning(
                        "Soft failure from %s (%d attempts left): %s",
                        host,
                        session.remaining[position],
                        result.error,
                    )
                    if session.remaining[position] > 0:
                        launch(position)
                    elif not in_flight and session.has_unstarted:
                        launch(session.advance())

            logger.error(
                "All %d hosts failed after %d attempts: %s",
                len(hosts),
                session.attempts,
                last_error,
                extra={"attempts": session.attempts, "duration_ms": round(session.elapsed_ms)},
            )
            return FetchResult(
                status=FetchStatus.EXHAUSTED,
                attempts=session.attempts,
                error=last_error,
                duration_ms=session.elapsed_ms,
            )
        finally:
            await self._cancel(in_flight)

    def _complete(
        self,
        session: FetchSession,
        host: str,
        result: AttemptResult,
        provider: str | None,
        shuffle: bool,
    ) -> FetchResult:
        if provider is not None and not shuffle and self._registry is not None:
            self._registry.record_index(provider, host)

        duration_ms = session.elapsed_ms
        logger.info(
            "Query answered by %s after %d attempts",
            host,
            session.attempts,
            extra={
                "host": host,
                "provider": provider,
                "attempts": session.attempts,
                "duration_ms": round(duration_ms),
            },
        )
        return FetchResult(
            status=FetchStatus.SUCCESS,
            data=result.data,
            host=host,
            attempts=session.attempts,
            duration_ms=duration_ms,
        )

    @staticmethod
    async def _attempt(host: str, query: HostQuery, timeout: float) -> AttemptResult:
        """One call, bounded by the per-host timeout."""
        try:
            return await asyncio.wait_for(query(host), timeout=timeout)
        except asyncio.TimeoutError:
            return AttemptResult.soft(f"No response from {host} within {timeout:g}s")
        except OSError as exc:
            return AttemptResult.soft(f"Network error from {host}: {exc}")

    @staticmethod
    async def _cancel(in_flight: dict[asyncio.Task[AttemptResult], int]) -> None:
        """Cancel losing calls and wait until they are gone."""
        if not in_flight:
            return
        for task in in_flight:
            task.cancel()
        await asyncio.gather(*in_flight, return_exceptions=True)
        in_flight.clear()
