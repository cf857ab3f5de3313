"""Scheduler - Dependency-ordered step dispatch for plan execution."""

from spectre.scheduler.models import PlanExecutionResult, StepOutcome
from spectre.scheduler.scheduler import StepScheduler

__all__ = [
    "PlanExecutionResult",
    "StepOutcome",
    "StepScheduler",
]
