"""Project lifecycle endpoints (start, stop, plan, execute, validate)."""

from fastapi import APIRouter, Query, status

from spectre.api.dependencies import OrchestratorDep
from spectre.api.models import (
    APIResponse,
    ExecutionAcceptedResponse,
    LogEntryResponse,
    PlanResponse,
    ProjectResponse,
    ValidationResponse,
    plan_to_response,
    project_to_response,
)
from spectre.api.runner import start_execution

router = APIRouter(prefix="/projects/{project_id}", tags=["control"])


@router.post("/start", response_model=APIResponse[ProjectResponse])
def start_project(project_id: str, orchestrator: OrchestratorDep) -> APIResponse[ProjectResponse]:
    """Activate a project."""
    project = orchestrator.start_project(project_id)
    return APIResponse(data=project_to_response(project), message="Project started")


@router.post("/stop", response_model=APIResponse[ProjectResponse])
def stop_project(project_id: str, orchestrator: OrchestratorDep) -> APIResponse[ProjectResponse]:
    """Stop a project, cancelling a running execution."""
    project = orchestrator.stop_project(project_id)
    return APIResponse(data=project_to_response(project), message="Project stopped")


@router.post(
    "/plan",
    response_model=APIResponse[PlanResponse],
    status_code=status.HTTP_201_CREATED,
)
def generate_plan(project_id: str, orchestrator: OrchestratorDep) -> APIResponse[PlanResponse]:
    """Generate a new execution plan and make it the project's active plan."""
    plan = orchestrator.generate_execution_plan(project_id)
    return APIResponse(data=plan_to_response(plan), message="Execution plan generated")


@router.get("/plan", response_model=APIResponse[PlanResponse])
def get_active_plan(project_id: str, orchestrator: OrchestratorDep) -> APIResponse[PlanResponse]:
    """Get the project's active plan."""
    plan = orchestrator.get_active_plan(project_id)
    return APIResponse(data=plan_to_response(plan))


@router.post(
    "/execute",
    response_model=APIResponse[ExecutionAcceptedResponse],
    status_code=status.HTTP_202_ACCEPTED,
)
def execute_plan(
    project_id: str, orchestrator: OrchestratorDep
) -> APIResponse[ExecutionAcceptedResponse]:
    """Start executing the project's active plan in the background."""
    plan = start_execution(orchestrator, project_id)
    return APIResponse(
        data=ExecutionAcceptedResponse(project_id=project_id, plan_id=plan.id, status=plan.status),
        message="Execution started",
    )


@router.post("/validate", response_model=APIResponse[ValidationResponse])
def validate_project(
    project_id: str, orchestrator: OrchestratorDep
) -> APIResponse[ValidationResponse]:
    """Validate the project's active plan."""
    result = orchestrator.validate_project(project_id)
    return APIResponse(data=ValidationResponse.model_validate(result))


@router.get("/logs", response_model=APIResponse[list[LogEntryResponse]])
def get_project_logs(
    project_id: str,
    orchestrator: OrchestratorDep,
    limit: int = Query(default=50, ge=1, le=1000),
) -> APIResponse[list[LogEntryResponse]]:
    """Get the most recent telemetry records for a project, oldest first."""
    logs = orchestrator.get_project_logs(project_id, limit=limit)
    return APIResponse(
        data=[LogEntryResponse.model_validate(entry.to_dict()) for entry in logs],
        count=len(logs),
    )
