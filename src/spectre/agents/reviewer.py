"""Reviewer Agent - scores a completed step with type-specific checks."""

from __future__ import annotations

import logging
import random
import threading
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from spectre.agents.models import ReviewResult
from spectre.events import EventManager
from spectre.state_store import StepType

if TYPE_CHECKING:
    from collections.abc import Callable

    from spectre.state_store import ExecutionStep

    SignalSource = Callable[[ExecutionStep, str], float]

logger = logging.getLogger(__name__)

PASS_THRESHOLD = 80


@dataclass(frozen=True)
class ReviewCheck:
    """One weighted quality check.

    Attributes:
        signal: Name of the quality signal to sample.
        threshold: The check fails when the signal is below this value.
        penalty: Points deducted on failure.
        issue: Issue text reported on failure.
        name_markers: The check only applies to steps whose name contains
            one of these markers. Empty means it always applies.
    """

    signal: str
    threshold: float
    penalty: int
    issue: str
    name_markers: tuple[str, ...] = ()

    def applies_to(self, step: ExecutionStep) -> bool:
        return not self.name_markers or any(m in step.name for m in self.name_markers)


_GENERIC_CHECKS = (ReviewCheck("completion", 90, 10, "Step not fully completed"),)

REVIEW_CHECKS: dict[StepType, tuple[ReviewCheck, ...]] = {
    StepType.DEVELOPMENT: (
        ReviewCheck(
            "code_quality", 70, 20, "Code quality below standards", ("Backend", "Frontend")
        ),
        ReviewCheck("security", 80, 15, "Security vulnerabilities detected", ("API", "Backend")),
    ),
    StepType.TESTING: (
        ReviewCheck("coverage", 80, 25, "Insufficient test coverage"),
        ReviewCheck("test_quality", 75, 15, "Test quality needs improvement"),
    ),
    StepType.DEPLOYMENT: (
        ReviewCheck("configuration", 85, 20, "Deployment configuration issues"),
        ReviewCheck("environment", 90, 10, "Environment setup incomplete"),
    ),
    StepType.INTEGRATION: (
        ReviewCheck("completeness", 85, 20, "Integration incomplete"),
        ReviewCheck("api_docs", 70, 15, "API documentation missing"),
    ),
    StepType.SETUP: _GENERIC_CHECKS,
    StepType.PLANNING: _GENERIC_CHECKS,
    StepType.INFRASTRUCTURE: _GENERIC_CHECKS,
    StepType.ANALYSIS: _GENERIC_CHECKS,
}


class ReviewerAgent:
    """Agent that reviews executed steps.

    Each check samples a 0-100 quality signal from ``signal_source`` and
    deducts its penalty when the signal is below threshold. The default
    signal source is a (seedable) random generator.
    """

    name = "reviewer"
    description = "Reviews generated code against requirements"
    version = "1.0.0"

    def __init__(
        self,
        signal_source: SignalSource | None = None,
        seed: int | None = None,
        event_manager: EventManager | None = None,
    ) -> None:
        """Initialize the Reviewer.

        Args:
            signal_source: Callable ``(step, signal_name) -> 0..100``.
            seed: Seed for the default random signal source.
            event_manager: Telemetry sink.
        """
        self._random = random.Random(seed)
        self._random_lock = threading.Lock()
        self.signal_source = signal_source or self._random_signal
        self.event_manager = event_manager or EventManager()
        self._reviews = 0
        self._counter_lock = threading.Lock()

    def health(self) -> dict[str, Any]:
        """Return reviewer health."""
        with self._counter_lock:
            return {"status": "healthy", "reviews": self._reviews}

    def review_step(self, step: ExecutionStep, project_id: str) -> ReviewResult:
        """Review one executed step.

        Args:
            step: The step to review.
            project_id: Owning project ID (for telemetry).

        Returns:
            ReviewResult; a failing signal source yields a failed review.
        """
        with self._counter_lock:
            self._reviews += 1
        try:
            result = self._score(step)
        except Exception as e:
            error = str(e) or type(e).__name__
            logger.error("Review of step %s failed: %s", step.id, error)
            self.event_manager.failure(
                self.name,
                "step_review_error",
                error=error,
                project_id=project_id,
                context=step.name,
                metadata={"step_id": step.id},
            )
            return ReviewResult(
                passed=False,
                score=0,
                issues=[f"Review error: {error}"],
                feedback="Step review error",
            )

        if result.passed:
            self.event_manager.success(
                self.name,
                "step_review_passed",
                project_id=project_id,
                context=f"Step review passed: {step.name}",
                metadata={"step_id": step.id, "score": result.score},
            )
        else:
            self.event_manager.failure(
                self.name,
                "step_review_failed",
                error=", ".join(result.issues),
                project_id=project_id,
                context=step.name,
                metadata={"step_id": step.id, "score": result.score},
            )
        return result

    def _score(self, step: ExecutionStep) -> ReviewResult:
        issues: list[str] = []
        score = 100
        for check in REVIEW_CHECKS.get(StepType(step.step_type), _GENERIC_CHECKS):
            if not check.applies_to(step):
                continue
            if self.signal_source(step, check.signal) < check.threshold:
                issues.append(check.issue)
                score -= check.penalty

        score = max(0, score)
        passed = score >= PASS_THRESHOLD
        feedback = (
            f"Review passed with score {score}"
            if passed
            else f"Review failed with score {score}: {', '.join(issues)}"
        )
        return ReviewResult(passed=passed, score=score, issues=issues, feedback=feedback)

    def _random_signal(self, step: ExecutionStep, signal: str) -> float:
        with self._random_lock:
            return self._random.random() * 100
