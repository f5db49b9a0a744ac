"""Dependency descriptors and their reachability probes.

Each descriptor knows how to probe exactly one dependency once. Probes do
not retry; the retry policy belongs to the gate.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from dataclasses import dataclass, field

import httpx
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncEngine

from app.core.config import DatabaseConfig, join_health_url
from app.readiness.models import HEALTHY, ConfigurationMissing, Outcome, Unreachable

HEALTHCHECK_USER_AGENT = "Hackathon-Core-HealthCheck/1.0"
DEFAULT_PROBE_TIMEOUT_SECONDS = 5.0

IDENTITY_SERVICE = "identity-service"
NOTIFICATION_SERVICE = "notification-service"
DATABASE = "database"


def _describe(exc: BaseException) -> str:
    return str(exc) or type(exc).__name__


@dataclass(frozen=True)
class HttpDependency:
    """A sibling service reachable over HTTP.

    Any HTTP response, whatever its status code, means the service is
    reachable. Only the absence of a response makes it unreachable.
    """

    name: str
    base_url: str
    health_path: str = "/health"
    timeout: float = DEFAULT_PROBE_TIMEOUT_SECONDS
    url_setting: str = "SERVICE_URL"
    transport: httpx.AsyncBaseTransport | None = field(default=None, compare=False, repr=False)

    @property
    def target(self) -> str:
        return join_health_url(self.base_url, self.health_path)

    async def probe(self) -> Outcome:
        if not self.base_url:
            return ConfigurationMissing(f"{self.url_setting} not configured")

        try:
            async with asyncio.timeout(self.timeout):
                async with httpx.AsyncClient(
                    timeout=httpx.Timeout(self.timeout),
                    transport=self.transport,
                    trust_env=False,
                ) as client:
                    await client.get(self.target, headers={"User-Agent": HEALTHCHECK_USER_AGENT})
        except TimeoutError:
            return Unreachable(f"{self.name} unreachable: timed out after {self.timeout:g}s")
        except httpx.TimeoutException as exc:
            return Unreachable(f"{self.name} unreachable: timed out ({_describe(exc)})")
        except (httpx.HTTPError, httpx.InvalidURL, OSError) as exc:
            return Unreachable(f"{self.name} unreachable: {_describe(exc)}")

        return HEALTHY


@dataclass(frozen=True)
class DatabaseDependency:
    """The relational database.

    By default only the presence of host, port and database name is
    checked and no connection is opened. With ``connect_check`` enabled the
    probe also runs ``SELECT 1`` through ``engine_factory``.
    """

    config: DatabaseConfig
    name: str = DATABASE
    connect_check: bool = False
    timeout: float = DEFAULT_PROBE_TIMEOUT_SECONDS
    engine_factory: Callable[[], AsyncEngine] | None = field(
        default=None, compare=False, repr=False
    )

    async def probe(self) -> Outcome:
        missing = self.config.missing_fields()
        if missing:
            return ConfigurationMissing(
                f"Database configuration incomplete: missing {', '.join(missing)}"
            )

        if not self.connect_check:
            return HEALTHY

        if self.engine_factory is None:
            from app.core.database import get_engine

            engine = get_engine()
        else:
            engine = self.engine_factory()

        try:
            async with asyncio.timeout(self.timeout):
                async with engine.connect() as conn:
                    await conn.execute(text("SELECT 1"))
        except TimeoutError:
            return Unreachable(f"{self.name} unreachable: timed out after {self.timeout:g}s")
        except Exception as exc:
            return Unreachable(f"{self.name} unreachable: {_describe(exc)}")

        return HEALTHY


Dependency = HttpDependency | DatabaseDependency
