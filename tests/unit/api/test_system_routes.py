"""Unit tests for system routes and error mapping."""

import pytest
from fastapi.testclient import TestClient

from spectre.api.app import create_app
from spectre.api.dependencies import get_orchestrator
from spectre.config import Settings


@pytest.mark.unit
class TestHealth:
    """Tests for GET /system/health."""

    def test_health(self, client: TestClient) -> None:
        data = client.get("/api/v1/system/health").json()["data"]

        assert data["status"] == "healthy"
        assert data["agents"] == ["planner", "executor", "reviewer", "validator", "questioner"]
        assert data["agent_count"] == 5
        assert data["project_count"] == 0

    def test_health_after_shutdown(self, client: TestClient, orchestrator) -> None:
        orchestrator.shutdown()

        data = client.get("/api/v1/system/health").json()["data"]

        assert data["status"] == "shutdown"
        assert data["agent_count"] == 0

    def test_requests_after_shutdown_unavailable(self, client: TestClient, orchestrator) -> None:
        orchestrator.shutdown()

        response = client.get("/api/v1/projects")

        assert response.status_code == 503
        assert response.json()["message"] == "Service shutting down"


@pytest.mark.unit
class TestAgents:
    """Tests for GET /system/agents."""

    def test_list_agents(self, client: TestClient) -> None:
        body = client.get("/api/v1/system/agents").json()

        assert body["count"] == 5
        planner = body["data"][0]
        assert planner["name"] == "planner"
        assert planner["version"] == "1.0.0"
        assert planner["health"]["status"] == "healthy"


@pytest.mark.unit
class TestUnexpectedErrors:
    """Tests for the 500 handler."""

    @pytest.mark.parametrize(
        ("debug", "expected"), [(False, "Internal server error"), (True, "db exploded")]
    )
    def test_internal_details_only_in_debug(self, debug: bool, expected: str) -> None:
        class ExplodingOrchestrator:
            def list_projects(self, status=None):
                raise RuntimeError("db exploded")

        app = create_app(Settings(debug_mode=debug))

        def override_get_orchestrator():
            yield ExplodingOrchestrator()

        app.dependency_overrides[get_orchestrator] = override_get_orchestrator
        client = TestClient(app, raise_server_exceptions=False)

        response = client.get("/api/v1/projects")

        assert response.status_code == 500
        assert response.json()["error"] == expected
