"""
Call Lifecycle Reconciler
Keeps local call rows in step with Bolna: outbound placement, on-read
status pulls, webhook pushes and the periodic refresh sweep
"""

import math
import re
import uuid
from collections import defaultdict
from typing import Optional, Dict, Any, List, Mapping

from booking_voice.core.config import Settings
from booking_voice.core.exceptions import (
    AgentNotFoundError,
    BolnaResponseError,
    CallNotFoundError,
    InvalidPhoneNumberError,
    ServiceError,
    ValidationError,
)
from booking_voice.core.logging import get_logger
from booking_voice.db.base import VoiceRepositoryInterface
from booking_voice.db.models import OrganizationDB, VoiceCallDB, utcnow
from booking_voice.models.call import (
    CallListFilters,
    CallRequest,
    CallStatus,
    WebhookPayload,
)
from booking_voice.services.bolna.client import BolnaClient
from booking_voice.services.credentials import CredentialService

logger = get_logger(__name__)

E164_PATTERN = re.compile(r"\+[1-9]\d{6,14}")

# Statuses Bolna reports when we ask for a call
PULL_STATUS_MAP: Dict[str, CallStatus] = {
    "initiated": CallStatus.INITIATED,
    "ringing": CallStatus.RINGING,
    "in_progress": CallStatus.IN_PROGRESS,
    "completed": CallStatus.COMPLETED,
    "failed": CallStatus.FAILED,
    "no_answer": CallStatus.NO_ANSWER,
    "busy": CallStatus.BUSY,
}

# Webhooks also announce cancellations and may use hyphens
WEBHOOK_STATUS_MAP: Dict[str, CallStatus] = {
    **PULL_STATUS_MAP,
    "cancelled": CallStatus.CANCELLED,
}


def is_valid_e164(phone: str) -> bool:
    return bool(E164_PATTERN.fullmatch(phone))


def map_pull_status(raw: Optional[str], current: CallStatus) -> CallStatus:
    """Internal status for a polled Bolna status; unknown values keep ``current``"""
    if not raw:
        return current
    return PULL_STATUS_MAP.get(raw.lower(), current)


def map_webhook_status(raw: Optional[str], current: CallStatus) -> CallStatus:
    """Internal status for a pushed Bolna status; unknown values keep ``current``"""
    if not raw:
        return current
    return WEBHOOK_STATUS_MAP.get(raw.lower().replace("-", "_"), current)


def guard_transition(current: CallStatus, candidate: CallStatus, call_id: str = "") -> CallStatus:
    """
    Status to store when ``candidate`` arrives for a call in ``current``

    Terminal statuses are final and statuses never move backwards; such
    transitions are logged and the current status is kept.
    """
    if candidate == current:
        return current

    if current.is_terminal or candidate.rank < current.rank:
        logger.warning(
            f"Ignoring out-of-order status for call {call_id}: "
            f"{current.value} -> {candidate.value}"
        )
        return current

    return candidate


class CallReconciler:
    """Owns every write to a call's status and its terminal fields"""

    def __init__(
        self,
        repository: VoiceRepositoryInterface,
        credentials: CredentialService,
        settings: Settings
    ):
        self.repository = repository
        self.credentials = credentials
        self.from_phone_number = settings.bolna_from_phone_number

    # ==================== Placement ====================

    async def place_call(self, organization: OrganizationDB, request: CallRequest) -> VoiceCallDB:
        """
        Place an outbound call through one of the organization's agents

        The call row is written as INITIATED before Bolna is contacted. If
        Bolna fails, the row is marked FAILED with the error and the error is
        re-raised.

        Raises:
            ValidationError: Missing fields or a non-E.164 phone number
            ProviderNotConfiguredError: Organization has no usable key
            AgentNotFoundError: Agent not in the organization
            ServiceError: Bolna failed to place the call
        """
        if not request.agent_id or not request.recipient_phone:
            raise ValidationError("Agent ID and recipient phone are required")

        if not is_valid_e164(request.recipient_phone):
            raise InvalidPhoneNumberError(request.recipient_phone)

        client = self.credentials.client_for(organization)

        agent = await self.repository.get_agent(organization.id, request.agent_id)
        if not agent:
            raise AgentNotFoundError(request.agent_id)

        call = await self.repository.create_call(VoiceCallDB(
            id=str(uuid.uuid4()),
            organization_id=organization.id,
            agent_id=agent.id,
            recipient_phone=request.recipient_phone,
            status=CallStatus.INITIATED
        ))

        try:
            handle = await client.make_call(
                agent.bolna_agent_id,
                request.recipient_phone,
                self.from_phone_number
            )
            if not handle.call_id:
                raise BolnaResponseError("Bolna did not return a call id", body=handle.raw)
        except ServiceError as e:
            logger.error(f"Call {call.id} placement failed: {e.message}")
            await self.repository.update_call(call.id, {
                "status": CallStatus.FAILED,
                "error_message": e.message,
            })
            raise

        logger.info(f"Call {call.id} placed (bolna id {handle.call_id})")
        return await self.repository.update_call(call.id, {
            "bolna_call_id": handle.call_id,
            "status": CallStatus.RINGING,
        })

    # ==================== Reads ====================

    async def get_call(self, organization: OrganizationDB, call_id: str) -> VoiceCallDB:
        """Fetch a call, refreshing it from Bolna while it is still live"""
        call = await self.repository.get_call(organization.id, call_id)
        if not call:
            raise CallNotFoundError(call_id)
        return await self.refresh_call(organization, call)

    async def list_calls(
        self,
        organization: OrganizationDB,
        filters: CallListFilters,
        page: int = 1,
        limit: int = 20
    ) -> Dict[str, Any]:
        """
        One page of call history plus statistics

        ``totalCalls`` follows the filters like ``pagination.total``; the
        completed, failed and average-duration figures cover the whole
        organization.
        """
        offset = (page - 1) * limit
        calls = await self.repository.list_calls(organization.id, filters, limit, offset)
        total = await self.repository.count_calls(organization.id, filters)
        stats = await self.repository.get_call_statistics(organization.id)
        stats["totalCalls"] = total

        return {
            "calls": [call.to_response() for call in calls],
            "pagination": {
                "page": page,
                "limit": limit,
                "total": total,
                "totalPages": math.ceil(total / limit) if limit else 0,
            },
            "stats": stats,
        }

    # ==================== Status pull ====================

    async def refresh_call(
        self,
        organization: OrganizationDB,
        call: VoiceCallDB,
        client: Optional[BolnaClient] = None
    ) -> VoiceCallDB:
        """
        Pull Bolna's view of a live call and store any status change

        Bolna failures are logged and the stored row is returned unchanged.
        """
        if call.status.is_terminal or not call.bolna_call_id:
            return call

        client = client or self.credentials.optional_client_for(organization)
        if client is None:
            return call

        try:
            remote = await client.get_call_status(call.bolna_call_id)
        except ServiceError as e:
            logger.warning(f"Status pull failed for call {call.id}: {e.message}")
            return call

        candidate = map_pull_status(remote.status, call.status)
        new_status = guard_transition(call.status, candidate, call.id)
        if new_status == call.status:
            return call

        updated = await self.repository.update_call(call.id, {
            "status": new_status,
            "duration": remote.duration if remote.duration is not None else call.duration,
            "recording_url": remote.recording_url or call.recording_url,
            "transcript": remote.transcript or call.transcript,
            "completed_at": utcnow() if new_status == CallStatus.COMPLETED else call.completed_at,
        })
        logger.info(f"Call {call.id} status {call.status.value} -> {new_status.value} (pull)")
        return updated or call

    # ==================== Webhook ====================

    async def handle_webhook(self, body: Mapping[str, Any]) -> Optional[VoiceCallDB]:
        """
        Apply a Bolna call update

        Returns:
            The stored call, or None when no call carries the Bolna id

        Raises:
            ValidationError: ``call_id`` missing
        """
        payload = WebhookPayload.from_body(dict(body))
        logger.info(f"Bolna webhook received: event={payload.event} call_id={payload.call_id} status={payload.status}")

        if not payload.call_id:
            raise ValidationError("Missing call_id", field="call_id")

        call = await self.repository.get_call_by_bolna_id(payload.call_id)
        if not call:
            logger.info(f"Call not found for webhook: {payload.call_id}")
            return None

        candidate = map_webhook_status(payload.status, call.status)
        new_status = guard_transition(call.status, candidate, call.id)

        target = {
            "status": new_status,
            "duration": payload.duration if payload.duration is not None else call.duration,
            "recording_url": payload.recording_url or call.recording_url,
            "transcript": payload.transcript or call.transcript,
            "completed_at": call.completed_at,
        }
        if new_status.is_terminal and call.completed_at is None:
            target["completed_at"] = utcnow()

        updates = {k: v for k, v in target.items() if getattr(call, k) != v}
        if not updates:
            return call

        updated = await self.repository.update_call(call.id, updates)
        if new_status != call.status:
            logger.info(f"Call {call.id} status {call.status.value} -> {new_status.value} (webhook)")
        return updated or call

    # ==================== Refresh sweep ====================

    async def refresh_pending_calls(self, limit: int = 100) -> Dict[str, int]:
        """
        Pull status for live calls across all organizations

        Calls are grouped per organization so each stored key is decrypted
        once per run.
        """
        calls = await self.repository.list_refreshable_calls(limit)

        by_organization: Dict[str, List[VoiceCallDB]] = defaultdict(list)
        for call in calls:
            by_organization[call.organization_id].append(call)

        result = {"checked": 0, "updated": 0, "skipped": 0}

        for organization_id, org_calls in by_organization.items():
            organization = await self.repository.get_organization(organization_id)
            client = self.credentials.optional_client_for(organization) if organization else None
            if client is None:
                result["skipped"] += len(org_calls)
                continue

            for call in org_calls:
                result["checked"] += 1
                refreshed = await self.refresh_call(organization, call, client)
                if refreshed.status != call.status:
                    result["updated"] += 1

        logger.info(
            f"Call refresh sweep: {result['checked']} checked, "
            f"{result['updated']} updated, {result['skipped']} skipped"
        )
        return result
