"""Validator Agent - checks that a finished plan covers what the project needs."""

from __future__ import annotations

import logging
import threading
from typing import TYPE_CHECKING, Any

from spectre.agents.models import ValidationResult
from spectre.events import EventManager
from spectre.state_store import ProjectType, StepStatus, StepType

if TYPE_CHECKING:
    from collections.abc import Callable

    from spectre.state_store import ExecutionPlan, ExecutionStep

logger = logging.getLogger(__name__)

PASS_THRESHOLD = 85


def _named(*markers: str) -> Callable[[ExecutionStep], bool]:
    return lambda step: any(marker in step.name for marker in markers)


def _typed(step_type: StepType) -> Callable[[ExecutionStep], bool]:
    return lambda step: step.step_type == step_type.value


# (predicate, penalty, issue, recommendation) applied when no step matches.
_WEBSITE_CHECKS = (
    (_named("Backend"), 20, "Backend implementation missing", "Implement backend API"),
    (_named("Frontend"), 20, "Frontend implementation missing", "Implement frontend interface"),
    (_named("Deploy"), 15, "Deployment configuration missing", "Configure deployment pipeline"),
    (_typed(StepType.TESTING), 10, "Testing not implemented", "Add comprehensive testing"),
    (
        _named("Security", "Authentication"),
        15,
        "Security measures not implemented",
        "Implement security measures",
    ),
)

_AUTOMATION_CHECKS = (
    (_named("Workflow"), 25, "Workflow design missing", "Design automation workflow"),
    (
        _typed(StepType.INTEGRATION),
        20,
        "System integrations missing",
        "Configure system integrations",
    ),
    (_named("Monitoring"), 15, "Monitoring not configured", "Setup monitoring and alerts"),
    (_typed(StepType.TESTING), 15, "Automation testing missing", "Add automation testing"),
    (
        _named("Error", "Recovery"),
        10,
        "Error handling not implemented",
        "Implement error handling",
    ),
)


class ValidatorAgent:
    """Agent that scores a plan for completeness.

    Website and automation plans are checked for the features those project
    types need; other plans get a generic completion check.
    """

    name = "validator"
    description = "Confirms project is complete and functioning"
    version = "1.0.0"

    def __init__(self, event_manager: EventManager | None = None) -> None:
        self.event_manager = event_manager or EventManager()
        self._validations = 0
        self._counter_lock = threading.Lock()

    def health(self) -> dict[str, Any]:
        """Return validator health."""
        with self._counter_lock:
            return {"status": "healthy", "validations": self._validations}

    def validate_project(self, plan: ExecutionPlan, project_id: str) -> ValidationResult:
        """Validate a plan.

        Args:
            plan: The plan to check, with its steps.
            project_id: Owning project ID (for telemetry).

        Returns:
            ValidationResult; a failing check yields ``valid=False, score=0``.
        """
        with self._counter_lock:
            self._validations += 1
        self.event_manager.success(
            self.name,
            "project_validation_started",
            project_id=project_id,
            context=f"Validating plan {plan.id}",
        )
        try:
            result = self._check(plan)
        except Exception as e:
            error = str(e) or type(e).__name__
            logger.error("Validation of plan %s failed: %s", plan.id, error)
            self.event_manager.failure(
                self.name,
                "project_validation_error",
                error=error,
                project_id=project_id,
                context=f"Plan {plan.id}",
            )
            return ValidationResult(
                valid=False,
                score=0,
                issues=[f"Validation error: {error}"],
                recommendations=["Retry validation process"],
            )

        if result.valid:
            self.event_manager.success(
                self.name,
                "project_validation_passed",
                project_id=project_id,
                context=f"Project validation passed with score {result.score}",
                metadata={"plan_id": plan.id, "score": result.score},
            )
        else:
            self.event_manager.failure(
                self.name,
                "project_validation_failed",
                error=", ".join(result.issues),
                project_id=project_id,
                context=f"Project validation failed with score {result.score}",
                metadata={"plan_id": plan.id, "score": result.score},
            )
        return result

    def _check(self, plan: ExecutionPlan) -> ValidationResult:
        issues: list[str] = []
        recommendations: list[str] = []
        steps = list(plan.steps)

        if plan.project_type in (ProjectType.WEBSITE, ProjectType.AUTOMATION):
            score = 100.0
            required = [step for step in steps if step.required]
            missing = sum(1 for step in required if step.status != StepStatus.COMPLETED)
            if missing:
                issues.append(f"{missing} required steps not completed")
                score -= missing * 10

            checks = (
                _WEBSITE_CHECKS
                if plan.project_type == ProjectType.WEBSITE
                else _AUTOMATION_CHECKS
            )
            for predicate, penalty, issue, recommendation in checks:
                if not any(predicate(step) for step in steps):
                    issues.append(issue)
                    recommendations.append(recommendation)
                    score -= penalty
        else:
            score = self._check_generic(steps, issues, recommendations)

        score = round(min(100.0, max(0.0, score)))
        return ValidationResult(
            valid=score >= PASS_THRESHOLD,
            score=score,
            issues=issues,
            recommendations=recommendations,
        )

    @staticmethod
    def _check_generic(
        steps: list[ExecutionStep], issues: list[str], recommendations: list[str]
    ) -> float:
        score = 100.0
        incomplete = sum(1 for step in steps if step.status != StepStatus.COMPLETED)
        if incomplete:
            issues.append(f"{incomplete} steps not completed")
            recommendations.append("Complete all planned steps")
            score -= incomplete * 5

        if not any(step.step_type == StepType.PLANNING for step in steps):
            issues.append("Planning phase missing")
            recommendations.append("Include planning phase")
            score -= 10
        return score
