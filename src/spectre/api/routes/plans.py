"""Execution plan endpoints."""

from fastapi import APIRouter, status

from spectre.api.dependencies import OrchestratorDep
from spectre.api.models import APIResponse, PlanResponse, StepCreate, plan_to_response

router = APIRouter(prefix="/plans", tags=["plans"])


@router.get("", response_model=APIResponse[list[PlanResponse]])
def list_plans(
    orchestrator: OrchestratorDep, project_id: str | None = None
) -> APIResponse[list[PlanResponse]]:
    """List plans, most recent first, optionally for one project."""
    plans = orchestrator.list_plans(project_id=project_id)
    return APIResponse(data=[plan_to_response(p) for p in plans], count=len(plans))


@router.get("/{plan_id}", response_model=APIResponse[PlanResponse])
def get_plan(plan_id: str, orchestrator: OrchestratorDep) -> APIResponse[PlanResponse]:
    """Get a plan by ID."""
    plan = orchestrator.get_plan(plan_id)
    return APIResponse(data=plan_to_response(plan))


@router.post("/{plan_id}/approve", response_model=APIResponse[PlanResponse])
def approve_plan(plan_id: str, orchestrator: OrchestratorDep) -> APIResponse[PlanResponse]:
    """Approve a draft plan."""
    plan = orchestrator.approve_plan(plan_id)
    return APIResponse(data=plan_to_response(plan), message="Plan approved")


@router.post(
    "/{plan_id}/steps",
    response_model=APIResponse[PlanResponse],
    status_code=status.HTTP_201_CREATED,
)
def add_step(
    plan_id: str, step: StepCreate, orchestrator: OrchestratorDep
) -> APIResponse[PlanResponse]:
    """Add a custom step to a plan that has not started executing."""
    plan = orchestrator.add_plan_step(
        plan_id,
        name=step.name,
        step_type=step.step_type,
        order=step.order,
        step_id=step.id,
        description=step.description,
        dependencies=step.dependencies,
        estimated_duration=step.estimated_duration,
        required=step.required,
    )
    return APIResponse(data=plan_to_response(plan), message="Step added")
