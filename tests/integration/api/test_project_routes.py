"""Integration tests for project routes with the real application lifespan."""

import tempfile
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from spectre.api.app import create_app
from spectre.config import Settings


@pytest.fixture
def temp_db_path():
    """Create a temporary database path."""
    with tempfile.NamedTemporaryFile(suffix=".db", delete=False) as f:
        path = f.name
    yield path
    Path(path).unlink(missing_ok=True)
    Path(f"{path}-wal").unlink(missing_ok=True)
    Path(f"{path}-shm").unlink(missing_ok=True)


@pytest.fixture
def client(temp_db_path: str):
    """Create a test client running the app lifespan against a database file."""
    app = create_app(Settings(db_path=temp_db_path, seconds_per_minute=0.0))
    with TestClient(app, raise_server_exceptions=False) as client:
        yield client


@pytest.mark.integration
class TestProjectCrudFullFlow:
    """Integration test for full CRUD flow."""

    def test_project_crud_full_flow(self, client: TestClient) -> None:
        """Create -> Read -> Update -> Delete flow."""
        create_response = client.post(
            "/api/v1/projects",
            json={
                "name": "Acme Site",
                "project_type": "website",
                "requirements": {"cms": True},
            },
        )
        assert create_response.status_code == 201
        project_id = create_response.json()["data"]["id"]

        get_response = client.get(f"/api/v1/projects/{project_id}")
        assert get_response.json()["data"]["status"] == "planning"

        update_response = client.patch(
            f"/api/v1/projects/{project_id}", json={"description": "Marketing site"}
        )
        assert update_response.status_code == 200
        data = update_response.json()["data"]
        assert data["description"] == "Marketing site"
        assert data["requirements"] == {"cms": True}

        delete_response = client.delete(f"/api/v1/projects/{project_id}")
        assert delete_response.status_code == 204
        assert client.get(f"/api/v1/projects/{project_id}").status_code == 404

    def test_status_filter(self, client: TestClient) -> None:
        first = client.post("/api/v1/projects", json={"name": "A", "project_type": "website"})
        client.post("/api/v1/projects", json={"name": "B", "project_type": "automation"})
        client.post(f"/api/v1/projects/{first.json()['data']['id']}/start")

        active = client.get("/api/v1/projects", params={"status": "active"}).json()
        planning = client.get("/api/v1/projects", params={"status": "planning"}).json()

        assert [p["name"] for p in active["data"]] == ["A"]
        assert [p["name"] for p in planning["data"]] == ["B"]

    def test_unsupported_project_type(self, client: TestClient) -> None:
        response = client.post("/api/v1/projects", json={"name": "X", "project_type": "mobile"})

        assert response.status_code == 400
        assert response.json()["success"] is False


@pytest.mark.integration
class TestPersistenceAcrossRestarts:
    """Projects outlive the application that created them."""

    def test_project_survives_restart(self, temp_db_path: str) -> None:
        settings = Settings(db_path=temp_db_path)
        with TestClient(create_app(settings)) as client:
            response = client.post(
                "/api/v1/projects", json={"name": "Ops", "project_type": "automation"}
            )
            project_id = response.json()["data"]["id"]
            client.post(f"/api/v1/projects/{project_id}/plan")

        with TestClient(create_app(settings)) as client:
            project = client.get(f"/api/v1/projects/{project_id}").json()["data"]
            plan = client.get(f"/api/v1/projects/{project_id}/plan").json()["data"]

        assert project["name"] == "Ops"
        assert plan["id"] == project["active_plan_id"]
        assert plan["status"] == "draft"
