"""Integration tests for the project delivery lifecycle over HTTP."""

import pytest
from fastapi.testclient import TestClient

from spectre.agents import ReviewerAgent
from spectre.api import runner
from spectre.api.app import create_app
from spectre.api.dependencies import get_orchestrator
from spectre.config import Settings


def passing_signal(step, signal: str) -> float:
    return 95.0


def failing_coverage(step, signal: str) -> float:
    return 10.0 if signal == "coverage" else 95.0


@pytest.fixture
def client():
    """Client running the real lifespan on an in-memory store."""
    app = create_app(Settings(seconds_per_minute=0.0))
    with TestClient(app, raise_server_exceptions=False) as client:
        yield client


def use_reviewer(signal_source) -> None:
    """Replace the live reviewer with one driven by ``signal_source``."""
    orchestrator = next(get_orchestrator())
    orchestrator.registry.unregister("reviewer")
    orchestrator.register_agent(
        ReviewerAgent(signal_source=signal_source, event_manager=orchestrator.event_manager)
    )


def create_active_project(client: TestClient, project_type: str = "website") -> str:
    response = client.post("/api/v1/projects", json={"name": "Acme", "project_type": project_type})
    project_id = response.json()["data"]["id"]
    assert client.post(f"/api/v1/projects/{project_id}/start").status_code == 200
    return project_id


@pytest.mark.integration
class TestDeliveryLifecycle:
    """Interview, plan, execute and validate a project."""

    def test_website_delivery(self, client: TestClient) -> None:
        use_reviewer(passing_signal)
        response = client.post(
            "/api/v1/projects", json={"name": "Acme", "project_type": "website"}
        )
        project_id = response.json()["data"]["id"]

        session = client.post(f"/api/v1/projects/{project_id}/questions").json()["data"]
        client.post(f"/api/v1/questions/{session['id']}/answers", json={"answer": "Sell shoes"})
        project = client.post(f"/api/v1/questions/{session['id']}/complete").json()["data"]
        assert project["requirements"]["answers"]["website_basic"] == ["Sell shoes"]

        client.post(f"/api/v1/projects/{project_id}/start")
        plan = client.post(f"/api/v1/projects/{project_id}/plan").json()["data"]
        approved = client.post(f"/api/v1/plans/{plan['id']}/approve").json()["data"]
        assert approved["status"] == "approved"

        response = client.post(f"/api/v1/projects/{project_id}/execute")
        assert response.status_code == 202
        assert response.json()["data"]["plan_id"] == plan["id"]

        result = runner.wait_for_execution(project_id, timeout=10)
        assert result is not None
        assert result.success
        assert result.completed_steps == result.total_steps == 9

        project = client.get(f"/api/v1/projects/{project_id}").json()["data"]
        finished = client.get(f"/api/v1/plans/{plan['id']}").json()["data"]
        assert project["status"] == "completed"
        assert finished["status"] == "completed"
        assert finished["validation"]["score"] == 85
        assert {step["status"] for step in finished["steps"]} == {"completed"}

        validation = client.post(f"/api/v1/projects/{project_id}/validate").json()["data"]
        assert validation["valid"] is True

        logs = client.get(f"/api/v1/projects/{project_id}/logs", params={"limit": 1000})
        actions = [entry["action"] for entry in logs.json()["data"]]
        assert "execution_started" in actions
        assert "execution_completed" in actions

    def test_failed_review_fails_project(self, client: TestClient) -> None:
        use_reviewer(failing_coverage)
        project_id = create_active_project(client, "automation")
        plan = client.post(f"/api/v1/projects/{project_id}/plan").json()["data"]

        client.post(f"/api/v1/projects/{project_id}/execute")
        result = runner.wait_for_execution(project_id, timeout=10)

        assert result is not None
        assert not result.success
        assert any("Insufficient test coverage" in error for error in result.errors)

        project = client.get(f"/api/v1/projects/{project_id}").json()["data"]
        finished = client.get(f"/api/v1/plans/{plan['id']}").json()["data"]
        assert project["status"] == "failed"
        assert finished["status"] == "failed"
        assert "skipped" in {step["status"] for step in finished["steps"]}

    def test_execute_twice_conflicts(self, client: TestClient) -> None:
        use_reviewer(passing_signal)
        project_id = create_active_project(client)
        client.post(f"/api/v1/projects/{project_id}/plan")

        client.post(f"/api/v1/projects/{project_id}/execute")
        runner.wait_for_execution(project_id, timeout=10)

        response = client.post(f"/api/v1/projects/{project_id}/execute")
        assert response.status_code == 409


@pytest.mark.integration
class TestSystemEndpoints:
    """System routes backed by the lifespan-built orchestrator."""

    def test_default_agents_registered(self, client: TestClient) -> None:
        agents = client.get("/api/v1/system/agents").json()["data"]

        assert [agent["name"] for agent in agents] == [
            "planner",
            "executor",
            "reviewer",
            "validator",
            "questioner",
        ]

    def test_health_counts(self, client: TestClient) -> None:
        project_id = create_active_project(client)
        client.post(f"/api/v1/projects/{project_id}/plan")

        health = client.get("/api/v1/system/health").json()["data"]

        assert health["project_count"] == 1
        assert health["plan_count"] == 1
        assert health["active_executions"] == 0
