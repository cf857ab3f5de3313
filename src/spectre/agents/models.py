"""Data models for agents."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import UTC, datetime
from enum import StrEnum
from typing import Any


@dataclass
class StepExecutionResult:
    """Result of executing one step.

    Attributes:
        success: Whether the simulated work completed.
        step_id: The executed step's ID.
        duration_seconds: Wall-clock time spent in the handler.
        error: Error message if execution failed.
        output: Handler output for logging.
    """

    success: bool
    step_id: str
    duration_seconds: float = 0.0
    error: str | None = None
    output: str = ""


@dataclass
class ReviewResult:
    """Result of reviewing a completed step.

    Attributes:
        passed: Whether the score reached the pass threshold.
        score: Quality score in the range 0-100.
        issues: Problems found by the weighted checks.
        feedback: One-line summary for logs.
    """

    passed: bool
    score: int
    issues: list[str] = field(default_factory=list)
    feedback: str = ""


@dataclass
class ValidationResult:
    """Result of validating a whole plan.

    Attributes:
        valid: Whether the score reached the pass threshold.
        score: Completeness score in the range 0-100.
        issues: Missing or incomplete parts of the project.
        recommendations: Suggested follow-up work.
    """

    valid: bool
    score: int
    issues: list[str] = field(default_factory=list)
    recommendations: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-serializable dict for storage on the plan."""
        return asdict(self)


class SessionStatus(StrEnum):
    """Question session lifecycle status."""

    ACTIVE = "active"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


@dataclass(frozen=True)
class QuestionPattern:
    """An ordered group of questions for one project type.

    Attributes:
        id: Unique pattern ID.
        project_type: Project type the pattern applies to.
        questions: Questions asked in order.
        required: Whether the pattern must be answered.
        order: Rank among the patterns of the same project type.
    """

    id: str
    project_type: str
    questions: tuple[str, ...]
    required: bool = True
    order: int = 1


@dataclass
class QuestionSession:
    """An in-progress requirements interview for a project.

    Attributes:
        id: Unique session ID.
        project_id: Project the answers belong to.
        project_type: Project type used to select the patterns.
        patterns: Patterns asked in order.
        answers: Answers collected per pattern ID.
        current_pattern: Index into ``patterns`` of the pattern being asked.
        status: Session lifecycle status.
    """

    id: str
    project_id: str
    project_type: str
    patterns: list[QuestionPattern]
    answers: dict[str, list[str]] = field(default_factory=dict)
    current_pattern: int = 0
    status: SessionStatus = SessionStatus.ACTIVE
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    updated_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    @property
    def answered_count(self) -> int:
        """Total number of answers collected."""
        return sum(len(answers) for answers in self.answers.values())

    @property
    def question_count(self) -> int:
        """Total number of questions across all patterns."""
        return sum(len(pattern.questions) for pattern in self.patterns)
