"""Root conftest for tests."""

import os

import pytest

if os.getenv("APP_ENV", "").strip().lower() == "prod":
    raise RuntimeError("Refusing to run tests with APP_ENV=prod")

os.environ["APP_ENV"] = "test"
os.environ["API_KEYS"] = "test-api-key"
os.environ["STARTUP_HEALTH_CHECK_ENABLED"] = "false"
os.environ.setdefault("SERVER_PORT", "3002")
os.environ.setdefault("METRICS_TOKEN", "test-metrics-token")


def pytest_collection_modifyitems(items: list[pytest.Item]) -> None:
    """Auto-apply markers based on test directory structure."""
    dir_marker_map = {
        "unit": pytest.mark.unit,
        "smoke": pytest.mark.smoke,
    }
    for item in items:
        test_path = str(item.fspath)
        for dir_name, marker in dir_marker_map.items():
            if f"/{dir_name}/" in test_path or f"\\{dir_name}\\" in test_path:
                item.add_marker(marker)
                break


@pytest.fixture(autouse=True)
def _fresh_settings():
    """Settings are cached per process; drop the cache around every test."""
    from app.core.config import get_settings

    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def mock_session():
    """Mock database session for tests."""

    class MockSession:
        async def execute(self, *args, **kwargs):
            class MockResult:
                def fetchone(self):
                    return None

                def fetchall(self):
                    return []

            return MockResult()

        async def commit(self):
            pass

        async def rollback(self):
            pass

    return MockSession()
