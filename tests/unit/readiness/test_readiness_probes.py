"""Unit tests for dependency probes."""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest

from app.core.config import DatabaseConfig
from app.readiness.models import ConfigurationMissing, Healthy, Unreachable
from app.readiness.probes import (
    HEALTHCHECK_USER_AGENT,
    DatabaseDependency,
    HttpDependency,
)


def _http(handler, base_url="http://identity.test", **kwargs) -> HttpDependency:
    return HttpDependency(
        name="identity-service",
        base_url=base_url,
        url_setting="AUTH_SERVICE_URL",
        transport=httpx.MockTransport(handler),
        **kwargs,
    )


def _db_config(**overrides) -> DatabaseConfig:
    values = {"host": "db.test", "port": "5432", "database": "hackathons"}
    values.update(overrides)
    return DatabaseConfig(**values)


@pytest.mark.asyncio
@pytest.mark.parametrize("status_code", [200, 204, 401, 404, 500, 503])
async def test_http_probe_any_response_is_healthy(status_code):
    dependency = _http(lambda request: httpx.Response(status_code))
    assert isinstance(await dependency.probe(), Healthy)


@pytest.mark.asyncio
async def test_http_probe_sends_user_agent_to_health_path():
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200)

    dependency = _http(handler, base_url="http://identity.test/", health_path="status")
    await dependency.probe()

    assert len(seen) == 1
    assert str(seen[0].url) == "http://identity.test/status"
    assert seen[0].method == "GET"
    assert seen[0].headers["User-Agent"] == HEALTHCHECK_USER_AGENT


@pytest.mark.asyncio
async def test_http_probe_connection_refused_is_unreachable():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("Connection refused", request=request)

    outcome = await _http(handler).probe()
    assert isinstance(outcome, Unreachable)
    assert outcome.reason == "identity-service unreachable: Connection refused"


@pytest.mark.asyncio
async def test_http_probe_dns_failure_is_unreachable():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("[Errno -2] Name or service not known", request=request)

    outcome = await _http(handler).probe()
    assert isinstance(outcome, Unreachable)
    assert "Name or service not known" in outcome.reason


@pytest.mark.asyncio
async def test_http_probe_transport_timeout_is_unreachable():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectTimeout("timed out", request=request)

    outcome = await _http(handler).probe()
    assert isinstance(outcome, Unreachable)
    assert "timed out" in outcome.reason


@pytest.mark.asyncio
async def test_http_probe_slow_service_is_abandoned_after_timeout():
    async def handler(request: httpx.Request) -> httpx.Response:
        await asyncio.sleep(5)
        return httpx.Response(200)

    outcome = await _http(handler, timeout=0.05).probe()
    assert isinstance(outcome, Unreachable)
    assert outcome.reason == "identity-service unreachable: timed out after 0.05s"


@pytest.mark.asyncio
async def test_http_probe_without_base_url_is_configuration_missing():
    handler = MagicMock()
    outcome = await _http(handler, base_url="").probe()

    assert outcome == ConfigurationMissing("AUTH_SERVICE_URL not configured")
    handler.assert_not_called()


@pytest.mark.asyncio
async def test_database_probe_presence_only_is_healthy():
    engine_factory = MagicMock()
    dependency = DatabaseDependency(config=_db_config(), engine_factory=engine_factory)

    assert isinstance(await dependency.probe(), Healthy)
    engine_factory.assert_not_called()


@pytest.mark.asyncio
async def test_database_probe_missing_host_is_configuration_missing():
    dependency = DatabaseDependency(config=_db_config(host=""))
    outcome = await dependency.probe()

    assert isinstance(outcome, ConfigurationMissing)
    assert outcome.reason == "Database configuration incomplete: missing DB_HOST"


@pytest.mark.asyncio
async def test_database_probe_lists_every_missing_field():
    dependency = DatabaseDependency(config=_db_config(host="", port="", database=""))
    outcome = await dependency.probe()

    assert outcome.reason == (
        "Database configuration incomplete: missing DB_HOST, DB_PORT, DB_DATABASE"
    )


def _engine(execute: AsyncMock) -> MagicMock:
    conn = MagicMock()
    conn.execute = execute
    engine = MagicMock()
    engine.connect.return_value.__aenter__.return_value = conn
    return engine


@pytest.mark.asyncio
async def test_database_connect_check_runs_select_one():
    execute = AsyncMock()
    engine = _engine(execute)
    dependency = DatabaseDependency(
        config=_db_config(), connect_check=True, engine_factory=lambda: engine
    )

    assert isinstance(await dependency.probe(), Healthy)
    execute.assert_awaited_once()
    assert str(execute.await_args.args[0]) == "SELECT 1"


@pytest.mark.asyncio
async def test_database_connect_check_failure_is_unreachable():
    engine = _engine(AsyncMock(side_effect=OSError("connection refused")))
    dependency = DatabaseDependency(
        config=_db_config(), connect_check=True, engine_factory=lambda: engine
    )

    outcome = await dependency.probe()
    assert outcome == Unreachable("database unreachable: connection refused")
