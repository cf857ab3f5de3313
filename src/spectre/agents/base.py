"""Agent capability protocol."""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class Agent(Protocol):
    """Interface every registered agent satisfies.

    Attributes:
        name: Unique registry key (e.g. "planner", "executor").
        description: Short human-readable purpose.
        version: Agent version string.
    """

    name: str
    description: str
    version: str

    def health(self) -> dict[str, Any]:
        """Return a health snapshot containing at least a ``status`` key."""
        ...
