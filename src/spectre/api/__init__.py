"""REST API for Spectre."""

from spectre.api.app import build_orchestrator, create_app
from spectre.api.models import (
    APIResponse,
    PlanResponse,
    ProjectCreate,
    ProjectResponse,
    ProjectUpdate,
)

__all__ = [
    "APIResponse",
    "PlanResponse",
    "ProjectCreate",
    "ProjectResponse",
    "ProjectUpdate",
    "build_orchestrator",
    "create_app",
]
