"""Smoke tests for API endpoints."""

from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient

from app.readiness.models import HEALTHY, ConfigurationMissing, DependencyCheckResult

API_KEY_HEADERS = {"x-api-key": "test-api-key"}
ADMIN_HEADERS = {**API_KEY_HEADERS, "Authorization": "Bearer admin-token"}


@pytest.fixture
def identity_client():
    client = AsyncMock()
    client.get_admin_profile.return_value = {"id": "adm-1", "name": "Root", "role": 0}
    return client


@pytest.fixture
def notification_client():
    return AsyncMock()


@pytest.fixture
def app(identity_client, notification_client):
    """Create app with mocked database session and sibling service clients."""
    from app.core.auth import get_identity_client
    from app.core.database import get_session
    from app.core.dependencies import get_notification_client
    from app.main import create_app

    app = create_app()

    mock_session = AsyncMock()
    mock_result = MagicMock()
    mock_result.fetchone.return_value = None
    mock_result.fetchall.return_value = []
    mock_result.scalar_one.return_value = 0
    mock_session.execute.return_value = mock_result

    async def mock_get_session():
        yield mock_session

    app.dependency_overrides[get_session] = mock_get_session
    app.dependency_overrides[get_identity_client] = lambda: identity_client
    app.dependency_overrides[get_notification_client] = lambda: notification_client
    return app


@pytest.fixture
def client(app):
    return TestClient(app, raise_server_exceptions=False)


@pytest.fixture
def healthy_engine(monkeypatch):
    conn = MagicMock()
    conn.execute = AsyncMock()
    engine = MagicMock()
    engine.connect.return_value.__aenter__.return_value = conn
    monkeypatch.setattr("app.api.routes.health.get_engine", lambda: engine)
    return engine


class StubGate:
    def __init__(self, results):
        self._results = results

    async def check_all_results(self):
        return self._results


# --- Health endpoints (no API key) ---


def test_health_endpoint(client, healthy_engine):
    response = client.get("/api/v1/health")
    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "ok"
    assert body["database"]["status"] == "healthy"
    assert body["version"] == "1.0.0"
    assert "total_mb" in body["memory"]
    assert "rss_mb" in body["process"]


def test_health_endpoint_reports_database_failure_with_200(client, monkeypatch):
    def broken_engine():
        raise RuntimeError("no database")

    monkeypatch.setattr("app.api.routes.health.get_engine", broken_engine)
    response = client.get("/api/v1/health")

    assert response.status_code == 200
    assert response.json()["database"]["status"] == "unhealthy"
    assert response.json()["status"] == "degraded"


def test_live_endpoint(client):
    response = client.get("/api/v1/health/live")
    assert response.status_code == 200
    assert response.json()["status"] == "alive"


def test_ready_endpoint_all_healthy(client, monkeypatch):
    results = [
        DependencyCheckResult("identity-service", HEALTHY),
        DependencyCheckResult("notification-service", HEALTHY),
        DependencyCheckResult("database", HEALTHY),
    ]
    monkeypatch.setattr(
        "app.api.routes.health.build_readiness_gate", lambda settings: StubGate(results)
    )

    response = client.get("/api/v1/health/ready")
    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "ready"
    assert [dep["name"] for dep in body["dependencies"]] == [
        "identity-service",
        "notification-service",
        "database",
    ]


def test_ready_endpoint_degraded_is_503(client, monkeypatch):
    results = [
        DependencyCheckResult("identity-service", HEALTHY),
        DependencyCheckResult(
            "database", ConfigurationMissing("Database configuration incomplete: missing DB_HOST")
        ),
    ]
    monkeypatch.setattr(
        "app.api.routes.health.build_readiness_gate", lambda settings: StubGate(results)
    )

    response = client.get("/api/v1/health/ready")
    assert response.status_code == 503
    body = response.json()
    assert body["status"] == "degraded"
    database = body["dependencies"][1]
    assert database["healthy"] is False
    assert database["outcome"] == "configuration_missing"
    assert "DB_HOST" in database["reason"]


def test_metrics_endpoint(client):
    response = client.get("/api/v1/metrics", headers={"X-Metrics-Token": "test-metrics-token"})
    assert response.status_code == 200
    assert "hackathon_core_readiness_probe_total" in response.text
    assert response.headers.get("X-Content-Type-Options") == "nosniff"
    assert response.headers.get("X-Frame-Options") == "DENY"


def test_metrics_endpoint_rejects_wrong_token(client):
    response = client.get("/api/v1/metrics", headers={"X-Metrics-Token": "wrong"})
    assert response.status_code == 403


def test_request_id_is_echoed_or_generated(client):
    echoed = client.get("/api/v1/health/live", headers={"X-Request-ID": "req-smoke-1"})
    assert echoed.headers["X-Request-ID"] == "req-smoke-1"

    generated = client.get("/api/v1/health/live")
    assert generated.headers["X-Request-ID"]


# --- Hackathon endpoints (API key + admin bearer) ---


def test_hackathons_reject_missing_api_key(client):
    response = client.get("/api/v1/hackathons/public")
    assert response.status_code == 401
    assert response.json()["detail"] == "Invalid or missing API key"


def test_hackathons_accept_api_key_in_query(client):
    response = client.get("/api/v1/hackathons/public", params={"apiKey": "test-api-key"})
    assert response.status_code == 200
    assert response.json() == {"hackathons": [], "total": 0, "page": 1, "total_pages": 0}


def test_admin_list_requires_bearer(client):
    response = client.get("/api/v1/hackathons", headers=API_KEY_HEADERS)
    assert response.status_code == 401


def test_admin_list_with_bearer(client, identity_client):
    response = client.get("/api/v1/hackathons", headers=ADMIN_HEADERS)
    assert response.status_code == 200
    assert response.json()["total"] == 0
    identity_client.get_admin_profile.assert_awaited_with("admin-token")


def test_get_missing_hackathon_is_404(client):
    response = client.get("/api/v1/hackathons/does-not-exist", headers=API_KEY_HEADERS)
    assert response.status_code == 404


def test_create_hackathon_validates_mode(client):
    response = client.post(
        "/api/v1/hackathons",
        headers=ADMIN_HEADERS,
        json={"title": "HackNight", "problem_statement": "Build", "mode": "Underwater"},
    )
    assert response.status_code == 422


def test_publish_missing_hackathon_is_404(client):
    response = client.post("/api/v1/hackathons/nope/publish", headers=ADMIN_HEADERS)
    assert response.status_code == 404


def test_announce_missing_hackathon_is_404(client, notification_client):
    response = client.post(
        "/api/v1/hackathons/nope/announce",
        headers=ADMIN_HEADERS,
        json={
            "recipients": [{"email": "ada@x.test", "name": "Ada"}],
            "subject": "Open",
            "content": "Registration is open",
        },
    )
    assert response.status_code == 404
    notification_client.send_hackathon_notification.assert_not_awaited()


def test_announce_requires_recipients(client):
    response = client.post(
        "/api/v1/hackathons/nope/announce",
        headers=ADMIN_HEADERS,
        json={"recipients": [], "subject": "Open", "content": "Registration is open"},
    )
    assert response.status_code == 422
