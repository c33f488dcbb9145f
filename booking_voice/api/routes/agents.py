"""
Voice agent API routes
"""

from fastapi import APIRouter, Depends

from booking_voice.api.dependencies import get_agent_service
from booking_voice.api.middleware.auth import get_current_organization
from booking_voice.core.logging import get_logger
from booking_voice.db.models import OrganizationDB
from booking_voice.models.agent import AgentCreateRequest, AgentUpdateRequest
from booking_voice.services.agent_service import AgentService

logger = get_logger(__name__)

router = APIRouter(prefix="/bolna/agents", tags=["bolna"])


@router.post("")
async def create_agent(
    request: AgentCreateRequest,
    organization: OrganizationDB = Depends(get_current_organization),
    service: AgentService = Depends(get_agent_service)
):
    """
    Create a voice agent on Bolna and record it locally

    - **name**: Agent name
    - **welcomeMessage**: First thing the agent says
    - **instructions**: System prompt for the agent
    - **language**: Transcriber language (default: en)
    - **voiceId**: Optional synthesizer voice
    """
    agent = await service.create_agent(organization, request)
    return {"success": True, "data": {"agent": agent.to_response()}}


@router.get("")
async def list_agents(
    organization: OrganizationDB = Depends(get_current_organization),
    service: AgentService = Depends(get_agent_service)
):
    """List the organization's agents, newest first, with call counts"""
    agents = await service.list_agents(organization)
    return {"success": True, "data": {"agents": [a.to_response() for a in agents]}}


@router.get("/{agent_id}")
async def get_agent(
    agent_id: str,
    organization: OrganizationDB = Depends(get_current_organization),
    service: AgentService = Depends(get_agent_service)
):
    agent = await service.get_agent(organization, agent_id)
    return {"success": True, "data": {"agent": agent.to_response()}}


@router.put("/{agent_id}")
async def update_agent(
    agent_id: str,
    request: AgentUpdateRequest,
    organization: OrganizationDB = Depends(get_current_organization),
    service: AgentService = Depends(get_agent_service)
):
    """Partially update an agent; Bolna is updated on a best-effort basis"""
    agent = await service.update_agent(organization, agent_id, request)
    return {"success": True, "data": {"agent": agent.to_response()}}


@router.delete("/{agent_id}")
async def delete_agent(
    agent_id: str,
    organization: OrganizationDB = Depends(get_current_organization),
    service: AgentService = Depends(get_agent_service)
):
    """Delete an agent and all of its calls"""
    await service.delete_agent(organization, agent_id)
    logger.info(f"Agent {agent_id} deleted by organization {organization.id}")
    return {"success": True, "message": "Agent deleted successfully"}
