"""Startup readiness gate.

Before the server binds its port, every declared dependency must be
reachable in the same attempt. Attempts are retried with a fixed delay up to
a bounded count. The gate reports the result as a boolean and never raises;
the process entry point decides what a negative result means.
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Awaitable, Callable, Sequence

import structlog
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_result,
    stop_after_attempt,
    wait_fixed,
)

from app.core.config import Settings
from app.core.metrics import (
    hackathon_core_readiness_attempts_total,
    hackathon_core_readiness_probe_latency_seconds,
    hackathon_core_readiness_probe_total,
)
from app.readiness.models import DependencyCheckResult, Unreachable, all_healthy
from app.readiness.probes import (
    IDENTITY_SERVICE,
    NOTIFICATION_SERVICE,
    DatabaseDependency,
    Dependency,
    HttpDependency,
)

logger = structlog.get_logger(__name__)

Sleeper = Callable[[float], Awaitable[None]]


class ReadinessGate:
    """Probes a fixed set of dependencies concurrently and retries failed rounds."""

    def __init__(
        self,
        dependencies: Sequence[Dependency],
        *,
        sleep: Sleeper = asyncio.sleep,
    ) -> None:
        self._dependencies = tuple(dependencies)
        self._sleep = sleep

    @property
    def dependencies(self) -> tuple[Dependency, ...]:
        return self._dependencies

    async def probe(self, dependency: Dependency) -> DependencyCheckResult:
        """Probe one dependency, timing it and recording the outcome."""
        started = time.perf_counter()
        outcome = await dependency.probe()
        elapsed = time.perf_counter() - started

        hackathon_core_readiness_probe_latency_seconds.labels(dependency=dependency.name).observe(
            elapsed
        )
        hackathon_core_readiness_probe_total.labels(
            dependency=dependency.name, outcome=outcome.kind.value
        ).inc()
        return DependencyCheckResult(
            name=dependency.name, outcome=outcome, latency_ms=elapsed * 1000
        )

    async def check_all_results(self) -> list[DependencyCheckResult]:
        """Run one attempt and return every dependency's result.

        Probes run concurrently. A probe that raises is recorded as
        unreachable and does not cancel the others.
        """
        gathered = await asyncio.gather(
            *(self.probe(dependency) for dependency in self._dependencies),
            return_exceptions=True,
        )

        results: list[DependencyCheckResult] = []
        for dependency, item in zip(self._dependencies, gathered, strict=True):
            if isinstance(item, BaseException):
                if not isinstance(item, Exception):
                    raise item
                hackathon_core_readiness_probe_total.labels(
                    dependency=dependency.name, outcome="unreachable"
                ).inc()
                item = DependencyCheckResult(
                    name=dependency.name,
                    outcome=Unreachable(f"{dependency.name} probe failed: {item!r}"),
                )
            results.append(item)

        for result in results:
            if result.healthy:
                logger.info(
                    "Dependency healthy",
                    dependency=result.name,
                    latency_ms=round(result.latency_ms, 1),
                )
            else:
                logger.error(
                    "Dependency unhealthy",
                    dependency=result.name,
                    outcome=result.outcome.kind.value,
                    reason=result.outcome.reason,
                )
        return results

    async def check_all(self) -> bool:
        """Run one attempt; True when every dependency is healthy."""
        logger.info("Checking external service dependencies", count=len(self._dependencies))
        ready = all_healthy(await self.check_all_results())

        if ready:
            logger.info("All external services are healthy")
        else:
            logger.error("Some external services are unhealthy")
        hackathon_core_readiness_attempts_total.labels(
            result="ready" if ready else "not_ready"
        ).inc()
        return ready

    async def wait_for_services(self, max_attempts: int = 5, retry_delay: float = 10.0) -> bool:
        """Retry ``check_all`` until it succeeds or ``max_attempts`` is reached.

        Sleeps ``retry_delay`` seconds between failed attempts, never after
        the last one. Returns as soon as an attempt succeeds.
        """
        retrying = AsyncRetrying(
            stop=stop_after_attempt(max_attempts),
            wait=wait_fixed(retry_delay),
            retry=retry_if_result(lambda ready: not ready),
            sleep=self._sleep,
            before=lambda state: logger.info(
                "Health check attempt", attempt=state.attempt_number, max_attempts=max_attempts
            ),
            before_sleep=_log_retry,
            retry_error_callback=_give_up,
        )
        return await retrying(self.check_all)


def _log_retry(retry_state: RetryCallState) -> None:
    logger.warning("Retrying health check", retry_in_seconds=retry_state.next_action.sleep)


def _give_up(retry_state: RetryCallState) -> bool:
    logger.error(
        "Dependencies not ready after all attempts", max_attempts=retry_state.attempt_number
    )
    return False


def build_dependencies(settings: Settings) -> list[Dependency]:
    """Declare the dependencies the service needs before serving traffic."""
    timeout = settings.startup.probe_timeout_seconds
    return [
        HttpDependency(
            name=IDENTITY_SERVICE,
            base_url=settings.identity.service_url,
            health_path=settings.identity.health_path,
            timeout=timeout,
            url_setting="AUTH_SERVICE_URL",
        ),
        HttpDependency(
            name=NOTIFICATION_SERVICE,
            base_url=settings.notification.service_url,
            health_path=settings.notification.health_path,
            timeout=timeout,
            url_setting="NOTIFICATION_SERVICE_URL",
        ),
        DatabaseDependency(
            config=settings.database,
            connect_check=settings.startup.database_connect_check,
            timeout=timeout,
        ),
    ]


def build_readiness_gate(settings: Settings, *, sleep: Sleeper = asyncio.sleep) -> ReadinessGate:
    return ReadinessGate(build_dependencies(settings), sleep=sleep)
