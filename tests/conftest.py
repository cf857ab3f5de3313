"""Shared pytest fixtures and configuration."""

import pytest

from spectre.agents import (
    ExecutorAgent,
    PlannerAgent,
    QuestionerAgent,
    ReviewerAgent,
    ValidatorAgent,
)
from spectre.events import EventManager
from spectre.orchestrator import Orchestrator
from spectre.state_store import StateStore


# Register custom markers
def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers for test categorization."""
    config.addinivalue_line("markers", "unit: fast tests with no external dependencies")
    config.addinivalue_line("markers", "integration: component interaction tests")


def no_sleep(seconds: float) -> None:
    """Sleep replacement so simulated work finishes instantly."""


def perfect_signal(step, signal: str) -> float:
    """Reviewer signal source where every check passes."""
    return 100.0


# Shared fixtures


@pytest.fixture
def store():
    """Create an in-memory StateStore."""
    s = StateStore(":memory:")
    yield s
    s.close()


@pytest.fixture
def event_manager() -> EventManager:
    """Create an EventManager."""
    return EventManager()


@pytest.fixture
def project(store: StateStore):
    """A website project in PLANNING status."""
    return store.create_project(name="Acme Site", project_type="website")


@pytest.fixture
def orchestrator(store: StateStore, event_manager: EventManager):
    """Orchestrator with deterministic default agents registered."""
    orch = Orchestrator(state_store=store, event_manager=event_manager)
    orch.register_agent(PlannerAgent(store, event_manager=event_manager))
    orch.register_agent(ExecutorAgent(sleep=no_sleep, event_manager=event_manager))
    orch.register_agent(
        ReviewerAgent(signal_source=perfect_signal, event_manager=event_manager)
    )
    orch.register_agent(ValidatorAgent(event_manager=event_manager))
    orch.register_agent(QuestionerAgent(event_manager=event_manager))
    yield orch
    orch.shutdown()
