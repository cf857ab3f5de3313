"""Exceptions for the agents package."""

from spectre.exceptions import InvalidInputError, InvalidStateError, NotFoundError, SpectreError


class AgentError(SpectreError):
    """Base exception for agent errors."""


class MissingHandlerError(AgentError):
    """A step type has no executor handler."""


class SessionNotFoundError(AgentError, NotFoundError):
    """Question session does not exist."""


class SessionStateError(AgentError, InvalidStateError):
    """Question session cannot accept the requested operation."""


class InvalidPatternError(AgentError, InvalidInputError):
    """Question pattern is malformed."""
