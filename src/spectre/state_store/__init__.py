"""State Store - Persistent storage for projects, execution plans and steps."""

from spectre.state_store.exceptions import (
    PlanNotFoundError,
    ProjectNotFoundError,
    StateStoreError,
    StepExistsError,
    StepNotFoundError,
    StoreClosedError,
)
from spectre.state_store.models import (
    PLAN_TRANSITIONS,
    PROJECT_TRANSITIONS,
    TERMINAL_PLAN_STATUSES,
    TERMINAL_PROJECT_STATUSES,
    TERMINAL_STEP_STATUSES,
    ExecutionPlan,
    ExecutionStep,
    PlanStatus,
    Project,
    ProjectStatus,
    ProjectType,
    StepStatus,
    StepType,
)
from spectre.state_store.store import StateStore

__all__ = [
    "PLAN_TRANSITIONS",
    "PROJECT_TRANSITIONS",
    "TERMINAL_PLAN_STATUSES",
    "TERMINAL_PROJECT_STATUSES",
    "TERMINAL_STEP_STATUSES",
    "ExecutionPlan",
    "ExecutionStep",
    "PlanNotFoundError",
    "PlanStatus",
    "Project",
    "ProjectNotFoundError",
    "ProjectStatus",
    "ProjectType",
    "StateStore",
    "StateStoreError",
    "StepExistsError",
    "StepNotFoundError",
    "StepStatus",
    "StepType",
    "StoreClosedError",
]
