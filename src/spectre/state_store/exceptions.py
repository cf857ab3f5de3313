"""Custom exceptions for State Store."""

from spectre.exceptions import InvalidInputError, NotFoundError, SpectreError


class StateStoreError(SpectreError):
    """Base exception for State Store errors."""


class ProjectNotFoundError(StateStoreError, NotFoundError):
    """Project with given ID does not exist."""


class PlanNotFoundError(StateStoreError, NotFoundError):
    """Execution plan does not exist."""


class StepNotFoundError(StateStoreError, NotFoundError):
    """Execution step does not exist."""


class StepExistsError(StateStoreError, InvalidInputError):
    """A step with the same ID already exists."""


class StoreClosedError(StateStoreError):
    """The store has been closed and holds no state."""
