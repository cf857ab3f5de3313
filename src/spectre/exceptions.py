"""Error taxonomy shared by every Spectre component.

Each package defines its concrete exceptions on top of these categories so the
API layer can map a whole category to one HTTP status code.
"""


class SpectreError(Exception):
    """Base exception for all Spectre errors."""


class NotFoundError(SpectreError):
    """A project, plan, step, agent or session identity is unknown."""


class InvalidInputError(SpectreError):
    """Caller supplied missing or malformed input."""


class InvalidStateError(SpectreError):
    """The requested transition is not allowed from the entity's current state."""


class AgentUnavailableError(SpectreError):
    """A required agent is not registered.

    Attributes:
        agent_name: Name of the missing agent.
    """

    def __init__(self, agent_name: str, message: str | None = None) -> None:
        self.agent_name = agent_name
        super().__init__(message or f"Required agent '{agent_name}' is not registered")
