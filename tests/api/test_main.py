"""Tests for the application entrypoint."""

from fastapi.testclient import TestClient

from main import app


class TestApp:
    """Lifespan wiring and health check."""

    def test_health(self) -> None:
        with TestClient(app) as client:
            response = client.get("/health")

            assert response.status_code == 200
            assert response.json()["status"] == "healthy"
            assert response.json()["tracked_tools"] == 0

    def test_lifespan_shares_metrics(self) -> None:
        with TestClient(app) as client:
            client.post("/api/tool-policy/metrics/record", json={"tool_name": "echo", "duration_ms": 1})

            assert client.get("/health").json()["tracked_tools"] == 1
            assert app.state.tool_metrics.tools["echo"].count == 1
