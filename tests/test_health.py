"""Tests for the /health endpoint."""

from fastapi.testclient import TestClient


def test_health_returns_ok(client: TestClient) -> None:
    """GET /health should return 200 with status 'ok'."""
    response = client.get("/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ok"
    assert data["database"] == "connected"


def test_health_without_registry_reports_no_definitions(client: TestClient) -> None:
    """lifespan 없이 띄운 앱은 정의 수가 비어 있다."""
    response = client.get("/health")
    assert response.json()["definitions"] == {}
