"""
Voice Agent Service
Keeps local agent records and their Bolna counterparts in step
"""

import uuid
from typing import List

from booking_voice.core.exceptions import (
    AgentNotFoundError,
    BolnaAPIError,
    BolnaConnectionError,
    ProviderRejectedError,
    ServiceError,
    ValidationError,
)
from booking_voice.core.logging import get_logger
from booking_voice.db.base import VoiceRepositoryInterface
from booking_voice.db.models import OrganizationDB, VoiceAgentDB
from booking_voice.models.agent import AgentCreateRequest, AgentUpdateRequest
from booking_voice.services.credentials import CredentialService

logger = get_logger(__name__)

DEFAULT_LANGUAGE = "en"


class AgentService:
    """CRUD for voice agents, scoped to one organization per call"""

    def __init__(self, repository: VoiceRepositoryInterface, credentials: CredentialService):
        self.repository = repository
        self.credentials = credentials

    async def create_agent(
        self, organization: OrganizationDB, request: AgentCreateRequest
    ) -> VoiceAgentDB:
        """
        Create the agent on Bolna, then record it locally

        Raises:
            ValidationError: Name, welcome message or instructions missing
            ProviderNotConfiguredError: Organization has no usable key
            ProviderRejectedError: Bolna refused the agent
        """
        if not request.name or not request.welcome_message or not request.instructions:
            raise ValidationError("Name, welcome message, and instructions are required")

        client = self.credentials.client_for(organization)
        language = request.language or DEFAULT_LANGUAGE

        try:
            bolna_agent_id = await client.create_agent(
                name=request.name,
                welcome_message=request.welcome_message,
                instructions=request.instructions,
                language=language,
                voice_id=request.voice_id
            )
        except BolnaAPIError as e:
            raise ProviderRejectedError(e.message, provider_status=e.provider_status) from e
        except BolnaConnectionError as e:
            raise ProviderRejectedError(e.message) from e

        agent = VoiceAgentDB(
            id=str(uuid.uuid4()),
            organization_id=organization.id,
            bolna_agent_id=bolna_agent_id,
            name=request.name,
            welcome_message=request.welcome_message,
            instructions=request.instructions,
            language=language,
            voice_id=request.voice_id,
            call_count=0
        )
        await self.repository.create_agent(agent)
        logger.info(f"Voice agent {agent.id} created (bolna id {bolna_agent_id})")
        return agent

    async def list_agents(self, organization: OrganizationDB) -> List[VoiceAgentDB]:
        return await self.repository.list_agents(organization.id)

    async def get_agent(self, organization: OrganizationDB, agent_id: str) -> VoiceAgentDB:
        agent = await self.repository.get_agent(organization.id, agent_id)
        if not agent:
            raise AgentNotFoundError(agent_id)
        return agent

    async def update_agent(
        self, organization: OrganizationDB, agent_id: str, request: AgentUpdateRequest
    ) -> VoiceAgentDB:
        """
        Apply a partial update

        The Bolna update is best effort; the local record is the source of
        truth and is written even when Bolna fails.
        """
        client = self.credentials.client_for(organization)
        existing = await self.get_agent(organization, agent_id)

        updates = {}
        for field in ("name", "welcome_message", "instructions", "language"):
            value = getattr(request, field)
            if value:
                updates[field] = value
        if "voice_id" in request.model_fields_set:
            updates["voice_id"] = request.voice_id
        if request.is_active is not None:
            updates["is_active"] = request.is_active

        try:
            await client.update_agent(
                existing.bolna_agent_id,
                name=updates.get("name"),
                welcome_message=updates.get("welcome_message"),
                instructions=updates.get("instructions")
            )
        except ServiceError as e:
            logger.warning(f"Bolna update failed for agent {agent_id}, keeping local update: {e.message}")

        agent = await self.repository.update_agent(organization.id, agent_id, updates)
        if not agent:
            raise AgentNotFoundError(agent_id)
        return agent

    async def delete_agent(self, organization: OrganizationDB, agent_id: str) -> None:
        """Delete the agent and its calls; removal on Bolna is best effort"""
        agent = await self.get_agent(organization, agent_id)

        client = self.credentials.optional_client_for(organization)
        if client is not None:
            try:
                await client.delete_agent(agent.bolna_agent_id)
            except ServiceError as e:
                logger.warning(f"Bolna delete failed for agent {agent_id}, deleting locally: {e.message}")

        if not await self.repository.delete_agent(organization.id, agent_id):
            raise AgentNotFoundError(agent_id)
