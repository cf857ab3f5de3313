"""System health and agent endpoints."""

from fastapi import APIRouter

from spectre.api.dependencies import OrchestratorDep
from spectre.api.models import AgentResponse, APIResponse, SystemHealthResponse

router = APIRouter(prefix="/system", tags=["system"])


@router.get("/health", response_model=APIResponse[SystemHealthResponse])
def get_health(orchestrator: OrchestratorDep) -> APIResponse[SystemHealthResponse]:
    """Get orchestrator health."""
    health = orchestrator.get_system_health()
    return APIResponse(data=SystemHealthResponse.model_validate(health))


@router.get("/agents", response_model=APIResponse[list[AgentResponse]])
def list_agents(orchestrator: OrchestratorDep) -> APIResponse[list[AgentResponse]]:
    """List registered agents with their health."""
    agents = [
        AgentResponse(
            name=agent.name,
            description=agent.description,
            version=agent.version,
            health=agent.health(),
        )
        for agent in orchestrator.list_agents()
    ]
    return APIResponse(data=agents, count=len(agents))
