"""Unit tests for the process entry point."""

from unittest.mock import AsyncMock, patch

import pytest

from app import main
from app.core import database
from app.core.config import Settings, StartupConfig


class StubGate:
    def __init__(self, ready: bool):
        self.ready = ready
        self.calls: list[tuple[int, float]] = []

    async def wait_for_services(self, max_attempts: int, retry_delay: float) -> bool:
        self.calls.append((max_attempts, retry_delay))
        return self.ready


def test_wait_for_dependencies_uses_startup_policy(monkeypatch):
    gate = StubGate(ready=True)
    monkeypatch.setattr(main, "build_readiness_gate", lambda settings: gate)
    settings = Settings(
        startup=StartupConfig(health_check_enabled=True, max_attempts=4, retry_delay_ms=250)
    )

    assert main.wait_for_dependencies(settings) is True
    assert gate.calls == [(4, 0.25)]


def test_wait_for_dependencies_skipped_when_disabled(monkeypatch):
    gate = StubGate(ready=False)
    monkeypatch.setattr(main, "build_readiness_gate", lambda settings: gate)

    settings = Settings(startup=StartupConfig(health_check_enabled=False))
    assert main.wait_for_dependencies(settings) is True
    assert gate.calls == []


def test_run_exits_before_binding_when_not_ready(monkeypatch):
    monkeypatch.setenv("STARTUP_HEALTH_CHECK_ENABLED", "true")
    monkeypatch.setattr(main, "build_readiness_gate", lambda settings: StubGate(ready=False))

    with patch("uvicorn.run") as uvicorn_run:
        with pytest.raises(SystemExit) as exc_info:
            main.run()

    assert exc_info.value.code == 1
    uvicorn_run.assert_not_called()


def test_run_starts_server_when_ready(monkeypatch):
    monkeypatch.setenv("STARTUP_HEALTH_CHECK_ENABLED", "true")
    monkeypatch.setenv("SERVER_PORT", "4321")
    monkeypatch.setattr(main, "build_readiness_gate", lambda settings: StubGate(ready=True))

    with patch("uvicorn.run") as uvicorn_run:
        main.run()

    uvicorn_run.assert_called_once()
    assert uvicorn_run.call_args.kwargs["port"] == 4321
    assert uvicorn_run.call_args.kwargs["factory"] is True


class EngineOpeningGate:
    """Opens the shared engine during the wait, like the SELECT 1 database check."""

    def __init__(self, engine):
        self.engine = engine

    async def wait_for_services(self, max_attempts: int, retry_delay: float) -> bool:
        database._engine = self.engine
        return True


def test_wait_for_dependencies_disposes_engine_opened_by_checks(monkeypatch):
    engine = AsyncMock()
    monkeypatch.setattr(main, "build_readiness_gate", lambda settings: EngineOpeningGate(engine))
    settings = Settings(
        startup=StartupConfig(health_check_enabled=True, database_connect_check=True)
    )

    assert main.wait_for_dependencies(settings) is True
    engine.dispose.assert_awaited_once()
    assert database._engine is None
    assert database._session_factory is None


def test_wait_for_dependencies_disposes_engine_when_not_ready(monkeypatch):
    engine = AsyncMock()
    gate = EngineOpeningGate(engine)

    async def never_ready(max_attempts: int, retry_delay: float) -> bool:
        database._engine = engine
        return False

    gate.wait_for_services = never_ready
    monkeypatch.setattr(main, "build_readiness_gate", lambda settings: gate)

    settings = Settings(startup=StartupConfig(health_check_enabled=True))
    assert main.wait_for_dependencies(settings) is False
    assert database._engine is None
