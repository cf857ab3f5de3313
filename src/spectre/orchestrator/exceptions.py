"""Exceptions for the Orchestrator module."""

from spectre.exceptions import InvalidInputError, InvalidStateError, SpectreError


class OrchestratorError(SpectreError):
    """Base exception for orchestrator errors."""

    pass


class OrchestratorShutdownError(OrchestratorError):
    """The orchestrator has been shut down."""

    pass


class InvalidProjectError(OrchestratorError, InvalidInputError):
    """Project fields are missing or malformed."""

    pass


class InvalidTransitionError(OrchestratorError, InvalidStateError):
    """A project or plan status change is not allowed from its current status."""

    pass
