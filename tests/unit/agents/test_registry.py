"""Unit tests for AgentRegistry."""

import pytest

from spectre.agents import Agent, AgentRegistry
from spectre.events import EventManager
from spectre.exceptions import AgentUnavailableError, InvalidInputError


class StubAgent:
    """Minimal agent satisfying the Agent protocol."""

    description = "stub"

    def __init__(self, name: str, version: str = "1.0.0") -> None:
        self.name = name
        self.version = version

    def health(self) -> dict:
        return {"status": "healthy"}


@pytest.fixture
def registry(event_manager: EventManager) -> AgentRegistry:
    return AgentRegistry(event_manager)


@pytest.mark.unit
class TestRegistry:
    """Tests for registration and lookup."""

    def test_register_and_get(self, registry: AgentRegistry) -> None:
        agent = StubAgent("planner")
        registry.register(agent)

        assert registry.get("planner") is agent
        assert registry.require("planner") is agent
        assert "planner" in registry
        assert len(registry) == 1

    def test_get_missing_returns_none(self, registry: AgentRegistry) -> None:
        assert registry.get("executor") is None

    def test_require_missing_raises(self, registry: AgentRegistry) -> None:
        with pytest.raises(AgentUnavailableError) as exc_info:
            registry.require("executor")
        assert exc_info.value.agent_name == "executor"

    def test_replace_keeps_position(self, registry: AgentRegistry) -> None:
        registry.register(StubAgent("planner"))
        registry.register(StubAgent("executor"))
        replacement = StubAgent("planner", version="2.0.0")
        registry.register(replacement)

        assert registry.names() == ["planner", "executor"]
        assert registry.list()[0] is replacement

    def test_empty_name_rejected(self, registry: AgentRegistry) -> None:
        with pytest.raises(InvalidInputError):
            registry.register(StubAgent(""))

    def test_unregister(self, registry: AgentRegistry) -> None:
        agent = StubAgent("validator")
        registry.register(agent)

        assert registry.unregister("validator") is agent
        assert registry.unregister("validator") is None
        assert "validator" not in registry

    def test_clear(self, registry: AgentRegistry) -> None:
        registry.register(StubAgent("planner"))
        registry.clear()

        assert registry.list() == []

    def test_emits_registration(self, registry: AgentRegistry, event_manager: EventManager) -> None:
        registry.register(StubAgent("reviewer", version="3.1.0"))

        [record] = event_manager.get_logs()
        assert record.action == "agent_registered"
        assert record.metadata == {"agent": "reviewer", "version": "3.1.0"}

    def test_stub_satisfies_protocol(self) -> None:
        assert isinstance(StubAgent("x"), Agent)
