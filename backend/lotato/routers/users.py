from fastapi import APIRouter, Depends, Query, status

from lotato.dependencies import Services, get_current_principal, get_services, require_roles
from lotato.models.principal import (
    SUPERVISOR_ROLES,
    AgentCreate,
    AgentReassign,
    AgentStatusUpdate,
    Principal,
)

router = APIRouter(prefix="/api/users", tags=["users"])

_supervisor = require_roles(*SUPERVISOR_ROLES)


@router.get("/agents")
async def list_agents(
    limit: int = Query(100, ge=1),
    principal: Principal = Depends(_supervisor),
    services: Services = Depends(get_services),
):
    agents = await services.users.list_agents(principal, limit)
    return {"agents": agents, "count": len(agents)}


@router.post("/agents", status_code=status.HTTP_201_CREATED)
async def create_agent(
    body: AgentCreate,
    principal: Principal = Depends(_supervisor),
    services: Services = Depends(get_services),
):
    return await services.users.create_agent(principal, body)


@router.patch("/agents/{agent_id}/status")
async def set_agent_status(
    agent_id: str,
    body: AgentStatusUpdate,
    principal: Principal = Depends(_supervisor),
    services: Services = Depends(get_services),
):
    return await services.users.set_agent_active(principal, agent_id, body.is_active)


@router.patch("/agents/{agent_id}/supervisor")
async def reassign_agent(
    agent_id: str,
    body: AgentReassign,
    principal: Principal = Depends(_supervisor),
    services: Services = Depends(get_services),
):
    return await services.users.reassign_agent(principal, agent_id, body.supervisor1_id)


@router.get("/profile")
async def profile(
    principal: Principal = Depends(get_current_principal),
    services: Services = Depends(get_services),
):
    return await services.users.profile(principal)
