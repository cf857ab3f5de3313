"""Data models for the Scheduler module."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from spectre.agents import ReviewResult, StepExecutionResult


@dataclass
class PlanExecutionResult:
    """Result of executing a plan.

    Attributes:
        success: Whether the plan completed.
        plan_id: The executed plan's ID.
        completed_steps: Number of steps that completed.
        total_steps: Number of steps in the plan.
        duration_seconds: Wall-clock duration of the run.
        errors: Step failures and interruptions, in the order they happened.
    """

    success: bool
    plan_id: str
    completed_steps: int = 0
    total_steps: int = 0
    duration_seconds: float = 0.0
    errors: list[str] = field(default_factory=list)


@dataclass
class StepOutcome:
    """What happened to one dispatched step.

    Attributes:
        step_id: The dispatched step's ID.
        execution: Executor result.
        review: Reviewer result; None when execution failed.
    """

    step_id: str
    execution: StepExecutionResult
    review: ReviewResult | None = None

    @property
    def passed(self) -> bool:
        """Whether the step executed and passed review."""
        return self.execution.success and self.review is not None and self.review.passed

    @property
    def error(self) -> str | None:
        """Error to record on the step, if any."""
        if not self.execution.success:
            return self.execution.error or "Step execution failed"
        if self.review is not None and not self.review.passed:
            issues = ", ".join(self.review.issues) or self.review.feedback
            return f"Review failed (score {self.review.score}): {issues}"
        return None
