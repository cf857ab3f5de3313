"""Exceptions for the planning package."""

from spectre.exceptions import InvalidInputError, InvalidStateError, SpectreError


class PlanningError(SpectreError):
    """Base exception for planning errors."""


class UnknownProjectTypeError(PlanningError, InvalidInputError):
    """No plan template exists for the requested project type."""


class InvalidTemplateError(PlanningError):
    """A step template set is malformed (duplicate IDs, cycles, bad ordering)."""


class InvalidStepError(PlanningError, InvalidInputError):
    """A step added to a plan would break the plan's ordering invariants."""


class PlanTransitionError(PlanningError, InvalidStateError):
    """A plan status change would move the plan backwards or skip a stage."""
