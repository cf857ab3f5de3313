"""Data models for the Orchestrator module."""

from dataclasses import dataclass, field


@dataclass
class SystemHealth:
    """Snapshot of orchestrator health.

    Attributes:
        status: "healthy" while running, "shutdown" afterwards.
        agents: Registered agent names in registration order.
        project_count: Number of stored projects.
        plan_count: Number of stored plans.
        active_executions: Plans currently being driven.
        uptime_seconds: Seconds since the orchestrator was created.
    """

    status: str
    agents: list[str] = field(default_factory=list)
    project_count: int = 0
    plan_count: int = 0
    active_executions: int = 0
    uptime_seconds: float = 0.0

    @property
    def agent_count(self) -> int:
        """Number of registered agents."""
        return len(self.agents)
