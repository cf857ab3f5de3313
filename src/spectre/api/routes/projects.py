"""Project CRUD endpoints."""

from fastapi import APIRouter, status

from spectre.api.dependencies import OrchestratorDep
from spectre.api.models import (
    APIResponse,
    ProjectCreate,
    ProjectResponse,
    ProjectUpdate,
    project_to_response,
)
from spectre.state_store import ProjectStatus

router = APIRouter(prefix="/projects", tags=["projects"])


@router.get("", response_model=APIResponse[list[ProjectResponse]])
def list_projects(
    orchestrator: OrchestratorDep, status: ProjectStatus | None = None
) -> APIResponse[list[ProjectResponse]]:
    """List all projects, optionally filtered by status."""
    projects = orchestrator.list_projects(status=status)
    return APIResponse(data=[project_to_response(p) for p in projects], count=len(projects))


@router.post(
    "",
    response_model=APIResponse[ProjectResponse],
    status_code=status.HTTP_201_CREATED,
)
def create_project(
    project: ProjectCreate, orchestrator: OrchestratorDep
) -> APIResponse[ProjectResponse]:
    """Create a new project."""
    created = orchestrator.create_project(
        name=project.name,
        project_type=project.project_type,
        description=project.description,
        requirements=project.requirements,
    )
    return APIResponse(data=project_to_response(created), message="Project created")


@router.get("/{project_id}", response_model=APIResponse[ProjectResponse])
def get_project(project_id: str, orchestrator: OrchestratorDep) -> APIResponse[ProjectResponse]:
    """Get a project by ID."""
    project = orchestrator.get_project(project_id)
    return APIResponse(data=project_to_response(project))


@router.patch("/{project_id}", response_model=APIResponse[ProjectResponse])
def update_project(
    project_id: str, project: ProjectUpdate, orchestrator: OrchestratorDep
) -> APIResponse[ProjectResponse]:
    """Update a project (partial update)."""
    updated = orchestrator.update_project(
        project_id,
        name=project.name,
        description=project.description,
        requirements=project.requirements,
    )
    return APIResponse(data=project_to_response(updated))


@router.delete("/{project_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_project(project_id: str, orchestrator: OrchestratorDep) -> None:
    """Delete a project."""
    orchestrator.delete_project(project_id)
