"""Agent Registry - named lookup of pluggable agents."""

from __future__ import annotations

import logging
import threading
from typing import TYPE_CHECKING

from spectre.exceptions import AgentUnavailableError, InvalidInputError

if TYPE_CHECKING:
    from spectre.agents.base import Agent
    from spectre.events import EventManager

logger = logging.getLogger(__name__)


class AgentRegistry:
    """Holds agents by unique name.

    Registering a name twice replaces the earlier agent but keeps its
    position in ``list()``.
    """

    def __init__(self, event_manager: EventManager | None = None) -> None:
        """Initialize an empty registry.

        Args:
            event_manager: Optional telemetry sink for registration events.
        """
        self.event_manager = event_manager
        self._agents: dict[str, Agent] = {}
        self._lock = threading.Lock()

    def register(self, agent: Agent) -> None:
        """Register an agent under its ``name``.

        Raises:
            InvalidInputError: If the agent has no name.
        """
        name = getattr(agent, "name", None)
        if not name:
            raise InvalidInputError("Agent must have a non-empty name")

        with self._lock:
            replaced = name in self._agents
            self._agents[name] = agent

        if replaced:
            logger.info("Replaced agent %s", name)
        else:
            logger.info("Registered agent %s", name)

        if self.event_manager is not None:
            self.event_manager.success(
                "orchestrator",
                "agent_registered",
                context=f"Agent {name} registered",
                metadata={"agent": name, "version": getattr(agent, "version", None)},
            )

    def get(self, name: str) -> Agent | None:
        """Get an agent by name, or None if it is not registered."""
        with self._lock:
            return self._agents.get(name)

    def require(self, name: str) -> Agent:
        """Get an agent by name.

        Raises:
            AgentUnavailableError: If no agent is registered under ``name``.
        """
        agent = self.get(name)
        if agent is None:
            raise AgentUnavailableError(name)
        return agent

    def list(self) -> list[Agent]:
        """All agents in registration order."""
        with self._lock:
            return list(self._agents.values())

    def names(self) -> list[str]:
        """Registered agent names in registration order."""
        with self._lock:
            return list(self._agents)

    def unregister(self, name: str) -> Agent | None:
        """Remove an agent. Returns it, or None if it was not registered."""
        with self._lock:
            agent = self._agents.pop(name, None)
        if agent is not None:
            logger.info("Unregistered agent %s", name)
        return agent

    def clear(self) -> None:
        """Release every agent."""
        with self._lock:
            self._agents.clear()

    def __contains__(self, name: object) -> bool:
        with self._lock:
            return name in self._agents

    def __len__(self) -> int:
        with self._lock:
            return len(self._agents)
