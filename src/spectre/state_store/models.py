"""SQLAlchemy models for State Store."""

from __future__ import annotations

import uuid
from datetime import UTC, datetime
from enum import StrEnum
from typing import Any

from sqlalchemy import (
    JSON,
    Boolean,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import (
    DeclarativeBase,
    Mapped,
    mapped_column,
    relationship,
)


class ProjectType(StrEnum):
    """Kinds of project the planner has templates for."""

    WEBSITE = "website"
    AUTOMATION = "automation"


class ProjectStatus(StrEnum):
    """Project lifecycle status."""

    PLANNING = "planning"
    ACTIVE = "active"
    EXECUTING = "executing"
    COMPLETED = "completed"
    STOPPED = "stopped"
    FAILED = "failed"


class PlanStatus(StrEnum):
    """Execution plan lifecycle status."""

    DRAFT = "draft"
    APPROVED = "approved"
    EXECUTING = "executing"
    COMPLETED = "completed"
    FAILED = "failed"


class StepStatus(StrEnum):
    """Runtime status of an execution step."""

    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    FAILED = "failed"
    SKIPPED = "skipped"


class StepType(StrEnum):
    """Closed set of step types. Every agent dispatch table covers all of them."""

    SETUP = "setup"
    PLANNING = "planning"
    DEVELOPMENT = "development"
    TESTING = "testing"
    DEPLOYMENT = "deployment"
    INTEGRATION = "integration"
    INFRASTRUCTURE = "infrastructure"
    ANALYSIS = "analysis"


TERMINAL_PROJECT_STATUSES = frozenset(
    {ProjectStatus.COMPLETED, ProjectStatus.FAILED, ProjectStatus.STOPPED}
)
TERMINAL_PLAN_STATUSES = frozenset({PlanStatus.COMPLETED, PlanStatus.FAILED})
TERMINAL_STEP_STATUSES = frozenset({StepStatus.COMPLETED, StepStatus.FAILED, StepStatus.SKIPPED})

# Allowed forward moves; stopped -> active is the only re-entry.
PROJECT_TRANSITIONS: dict[ProjectStatus, frozenset[ProjectStatus]] = {
    ProjectStatus.PLANNING: frozenset({ProjectStatus.ACTIVE, ProjectStatus.STOPPED}),
    ProjectStatus.ACTIVE: frozenset({ProjectStatus.EXECUTING, ProjectStatus.STOPPED}),
    ProjectStatus.EXECUTING: frozenset(
        {ProjectStatus.COMPLETED, ProjectStatus.FAILED, ProjectStatus.STOPPED}
    ),
    ProjectStatus.STOPPED: frozenset({ProjectStatus.ACTIVE}),
    ProjectStatus.COMPLETED: frozenset(),
    ProjectStatus.FAILED: frozenset(),
}

PLAN_TRANSITIONS: dict[PlanStatus, frozenset[PlanStatus]] = {
    PlanStatus.DRAFT: frozenset({PlanStatus.APPROVED}),
    PlanStatus.APPROVED: frozenset({PlanStatus.EXECUTING}),
    PlanStatus.EXECUTING: frozenset({PlanStatus.COMPLETED, PlanStatus.FAILED}),
    PlanStatus.COMPLETED: frozenset(),
    PlanStatus.FAILED: frozenset(),
}


def generate_uuid() -> str:
    """Generate a new UUID string."""
    return str(uuid.uuid4())


def utcnow() -> datetime:
    """Current UTC time."""
    return datetime.now(UTC)


class Base(DeclarativeBase):
    """Base class for all models."""

    pass


class Project(Base):
    """Project model - a website or automation build owned by the orchestrator."""

    __tablename__ = "projects"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    project_type: Mapped[str] = mapped_column(String(20), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False)
    requirements: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False)
    active_plan_id: Mapped[str | None] = mapped_column(String(36), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=utcnow, onupdate=utcnow
    )

    # Relationships
    plans: Mapped[list[ExecutionPlan]] = relationship(
        "ExecutionPlan", back_populates="project", cascade="all, delete-orphan"
    )

    def __init__(
        self,
        name: str,
        project_type: str,
        id: str | None = None,
        description: str = "",
        status: str | None = None,
        requirements: dict[str, Any] | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(**kwargs)
        self.id = id if id is not None else generate_uuid()
        self.name = name
        self.project_type = project_type
        self.description = description
        self.status = status if status is not None else ProjectStatus.PLANNING.value
        self.requirements = dict(requirements or {})
        self.active_plan_id = None
        now = utcnow()
        self.created_at = now
        self.updated_at = now

    @property
    def project_status(self) -> ProjectStatus:
        """Get status as ProjectStatus enum."""
        return ProjectStatus(self.status)

    @property
    def type(self) -> ProjectType:
        """Get project_type as ProjectType enum."""
        return ProjectType(self.project_type)

    def __repr__(self) -> str:
        return f"<Project(id={self.id!r}, name={self.name!r}, status={self.status!r})>"


class ExecutionPlan(Base):
    """Execution plan model - an ordered, dependency-annotated set of steps."""

    __tablename__ = "execution_plans"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    project_id: Mapped[str] = mapped_column(String(36), ForeignKey("projects.id"), nullable=False)
    project_type: Mapped[str] = mapped_column(String(20), nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False)
    estimated_duration: Mapped[int] = mapped_column(Integer, nullable=False)
    requirements: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False)
    validation: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=utcnow, onupdate=utcnow
    )

    # Relationships
    project: Mapped[Project] = relationship("Project", back_populates="plans")
    steps: Mapped[list[ExecutionStep]] = relationship(
        "ExecutionStep",
        back_populates="plan",
        cascade="all, delete-orphan",
        order_by="ExecutionStep.order",
        lazy="selectin",
    )

    def __init__(
        self,
        project_id: str,
        project_type: str,
        id: str | None = None,
        status: str | None = None,
        estimated_duration: int = 0,
        requirements: dict[str, Any] | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(**kwargs)
        self.id = id if id is not None else generate_uuid()
        self.project_id = project_id
        self.project_type = project_type
        self.status = status if status is not None else PlanStatus.DRAFT.value
        self.estimated_duration = estimated_duration
        self.requirements = dict(requirements or {})
        self.validation = None
        now = utcnow()
        self.created_at = now
        self.updated_at = now

    @property
    def plan_status(self) -> PlanStatus:
        """Get status as PlanStatus enum."""
        return PlanStatus(self.status)

    def get_step(self, step_id: str) -> ExecutionStep | None:
        """Find a step of this plan by ID."""
        for step in self.steps:
            if step.id == step_id:
                return step
        return None

    def __repr__(self) -> str:
        return (
            f"<ExecutionPlan(id={self.id!r}, project_id={self.project_id!r}, "
            f"status={self.status!r})>"
        )


class ExecutionStep(Base):
    """Execution step model - one typed unit of work inside a plan.

    Composition fields are written once by the planner; only status,
    timestamps and error change while the plan executes.
    """

    __tablename__ = "execution_steps"

    id: Mapped[str] = mapped_column(String(100), primary_key=True)
    plan_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("execution_plans.id"), nullable=False
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    step_type: Mapped[str] = mapped_column(String(20), nullable=False)
    dependencies: Mapped[list[str]] = mapped_column(JSON, nullable=False)
    estimated_duration: Mapped[int] = mapped_column(Integer, nullable=False)
    required: Mapped[bool] = mapped_column(Boolean, nullable=False)
    order: Mapped[int] = mapped_column("step_order", Integer, nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False)
    started_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    completed_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    error: Mapped[str | None] = mapped_column(Text, nullable=True)
    details: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False)

    # Relationships
    plan: Mapped[ExecutionPlan] = relationship("ExecutionPlan", back_populates="steps")

    def __init__(
        self,
        id: str,
        name: str,
        step_type: str,
        order: int,
        description: str = "",
        dependencies: list[str] | None = None,
        estimated_duration: int = 0,
        required: bool = True,
        status: str | None = None,
        details: dict[str, Any] | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(**kwargs)
        self.id = id
        self.name = name
        self.description = description
        self.step_type = step_type
        self.dependencies = list(dependencies or [])
        self.estimated_duration = estimated_duration
        self.required = required
        self.order = order
        self.status = status if status is not None else StepStatus.PENDING.value
        self.started_at = None
        self.completed_at = None
        self.error = None
        self.details = dict(details or {})

    @property
    def step_status(self) -> StepStatus:
        """Get status as StepStatus enum."""
        return StepStatus(self.status)

    @property
    def type(self) -> StepType:
        """Get step_type as StepType enum."""
        return StepType(self.step_type)

    def __repr__(self) -> str:
        return f"<ExecutionStep(id={self.id!r}, order={self.order!r}, status={self.status!r})>"
