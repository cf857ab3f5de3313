"""Pydantic models for REST API."""

from datetime import datetime
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field

T = TypeVar("T")


class APIResponse(BaseModel, Generic[T]):
    """Standard API response wrapper."""

    success: bool = True
    data: T | None = None
    error: str | None = None
    message: str | None = None
    count: int | None = None


def error_response(error: str, message: str | None = None) -> dict[str, Any]:
    """Serialized error envelope."""
    return APIResponse[None](success=False, error=error, message=message).model_dump()


class ActionResponse(BaseModel):
    """Response model for actions with no other payload."""

    message: str


# Project models


class ProjectCreate(BaseModel):
    """Request model for creating a project."""

    name: str = Field(..., min_length=1, max_length=255)
    project_type: str = Field(..., min_length=1, max_length=20)
    description: str = Field(default="", max_length=10_000)
    requirements: dict[str, Any] = Field(default_factory=dict)


class ProjectUpdate(BaseModel):
    """Request model for updating a project (partial update)."""

    name: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = Field(default=None, max_length=10_000)
    requirements: dict[str, Any] | None = None


class ProjectResponse(BaseModel):
    """Response model for a project."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    project_type: str
    description: str
    status: str
    requirements: dict[str, Any]
    active_plan_id: str | None
    created_at: datetime
    updated_at: datetime


def project_to_response(project: Any) -> ProjectResponse:
    """Convert a Project model to ProjectResponse."""
    return ProjectResponse.model_validate(project)


# Plan models


class StepResponse(BaseModel):
    """Response model for an execution step."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    description: str
    step_type: str
    dependencies: list[str]
    estimated_duration: int
    required: bool
    order: int
    status: str
    started_at: datetime | None
    completed_at: datetime | None
    error: str | None
    details: dict[str, Any]


class PlanResponse(BaseModel):
    """Response model for an execution plan."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    project_id: str
    project_type: str
    status: str
    estimated_duration: int
    requirements: dict[str, Any]
    validation: dict[str, Any] | None
    steps: list[StepResponse]
    created_at: datetime
    updated_at: datetime


def plan_to_response(plan: Any) -> PlanResponse:
    """Convert an ExecutionPlan model to PlanResponse."""
    return PlanResponse.model_validate(plan)


class StepCreate(BaseModel):
    """Request model for adding a custom step to a plan."""

    name: str = Field(..., min_length=1, max_length=255)
    step_type: str
    order: int = Field(..., ge=1)
    id: str | None = Field(default=None, min_length=1, max_length=100)
    description: str = ""
    dependencies: list[str] = Field(default_factory=list)
    estimated_duration: int = Field(default=0, ge=0)
    required: bool = True


# Execution models


class ExecutionAcceptedResponse(BaseModel):
    """Response model for a plan execution that was started in the background."""

    project_id: str
    plan_id: str
    status: str


class ValidationResponse(BaseModel):
    """Response model for a validation result."""

    model_config = ConfigDict(from_attributes=True)

    valid: bool
    score: int
    issues: list[str]
    recommendations: list[str]


class LogEntryResponse(BaseModel):
    """Response model for a telemetry record."""

    model_config = ConfigDict(from_attributes=True)

    timestamp: str
    level: str
    kind: str
    source: str
    action: str
    project_id: str | None
    context: str | None
    error: str | None
    metadata: dict[str, Any] | None


# Question models


class QuestionSessionResponse(BaseModel):
    """Response model for a question session."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    project_id: str
    project_type: str
    status: str
    current_pattern: int
    answered_count: int
    question_count: int


class NextQuestionResponse(BaseModel):
    """Response model for the next question of a session."""

    session_id: str
    question: str | None
    done: bool


class AnswerSubmit(BaseModel):
    """Request model for answering the current question."""

    answer: str = Field(..., min_length=1)


# System models


class AgentResponse(BaseModel):
    """Response model for a registered agent."""

    name: str
    description: str
    version: str
    health: dict[str, Any]


class SystemHealthResponse(BaseModel):
    """Response model for system health."""

    model_config = ConfigDict(from_attributes=True)

    status: str
    agents: list[str]
    agent_count: int
    project_count: int
    plan_count: int
    active_executions: int
    uptime_seconds: float
