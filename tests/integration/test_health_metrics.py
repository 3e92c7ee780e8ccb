"""Integration tests for /health, /healthz and /metrics endpoints."""

from unittest.mock import AsyncMock, patch

from fastapi.testclient import TestClient


def test_health_is_always_ok(client: TestClient) -> None:
    assert client.get("/health").json() == {"status": "ok"}


def test_healthz_in_memory(client: TestClient) -> None:
    response = client.get("/healthz")

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ok"
    assert data["components"]["store"] == "in_memory"
    assert data["components"]["db"] == "not_configured"
    assert data["components"]["openai"] == "mock"
    assert data["components"]["ocr"] == "disabled"


@patch("backend.docchat.api.routes.health.check_db", new_callable=AsyncMock)
def test_healthz_returns_503_when_db_fails(mock_check_db: AsyncMock, client: TestClient) -> None:
    mock_check_db.return_value = (False, "error: OperationalError")

    response = client.get("/healthz")

    assert response.status_code == 503
    assert response.json()["status"] == "degraded"
    assert response.json()["components"]["db"] == "error: OperationalError"


def test_metrics_exposes_pipeline_series(admin_client: TestClient) -> None:
    admin_client.post("/upload", files=[("files", ("a.txt", b"alpha", "text/plain"))])
    admin_client.post("/chat/complete", json={"message": "alpha"})

    response = admin_client.get("/metrics")

    assert response.status_code == 200
    assert "text/plain" in response.headers["content-type"]
    assert "documents_ingested_total" in response.text
    assert "completion_latency_ms" in response.text
    assert "retrieval_sources" in response.text
