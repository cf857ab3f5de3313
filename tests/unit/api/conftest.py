"""Fixtures for API route tests."""

import pytest
from fastapi.testclient import TestClient

from spectre.api.app import create_app
from spectre.api.dependencies import get_event_manager, get_orchestrator
from spectre.config import Settings


@pytest.fixture
def app(orchestrator, event_manager):
    """Create the app with the shared orchestrator injected (lifespan not run)."""
    app = create_app(Settings())

    def override_get_orchestrator():
        yield orchestrator

    def override_get_event_manager():
        yield event_manager

    app.dependency_overrides[get_orchestrator] = override_get_orchestrator
    app.dependency_overrides[get_event_manager] = override_get_event_manager
    return app


@pytest.fixture
def client(app) -> TestClient:
    """Create a test client."""
    return TestClient(app, raise_server_exceptions=False)
