"""
Call management API routes
"""

from datetime import datetime
from typing import Optional
from fastapi import APIRouter, Depends, Query

from booking_voice.api.dependencies import get_call_reconciler
from booking_voice.api.middleware.auth import get_current_organization
from booking_voice.core.exceptions import ValidationError
from booking_voice.core.logging import get_logger
from booking_voice.db.models import OrganizationDB
from booking_voice.models.call import CallListFilters, CallRequest, CallStatus
from booking_voice.services.call_reconciler import CallReconciler

logger = get_logger(__name__)

router = APIRouter(prefix="/bolna/calls", tags=["bolna"])


def _parse_status(value: Optional[str]) -> Optional[CallStatus]:
    if not value:
        return None
    try:
        return CallStatus(value.upper())
    except ValueError:
        raise ValidationError(f"Unknown call status: {value}", field="status")


@router.post("")
async def make_call(
    request: CallRequest,
    organization: OrganizationDB = Depends(get_current_organization),
    reconciler: CallReconciler = Depends(get_call_reconciler)
):
    """
    Place an outbound call

    - **agentId**: Voice agent placing the call
    - **recipientPhone**: Phone number to call (E.164 format, e.g., +919876543210)
    """
    logger.info(f"Received call request for agent {request.agent_id}")
    call = await reconciler.place_call(organization, request)
    return {"success": True, "data": {"call": call.to_response()}}


@router.get("")
async def list_calls(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    agent_id: Optional[str] = Query(None, alias="agentId"),
    status: Optional[str] = Query(None, description="Filter by call status"),
    start_date: Optional[datetime] = Query(None, alias="startDate"),
    end_date: Optional[datetime] = Query(None, alias="endDate"),
    organization: OrganizationDB = Depends(get_current_organization),
    reconciler: CallReconciler = Depends(get_call_reconciler)
):
    """
    Call history with pagination and organization-wide statistics
    """
    filters = CallListFilters(
        agent_id=agent_id,
        status=_parse_status(status),
        start_date=start_date,
        end_date=end_date
    )
    data = await reconciler.list_calls(organization, filters, page=page, limit=limit)
    return {"success": True, "data": data}


@router.get("/{call_id}")
async def get_call(
    call_id: str,
    organization: OrganizationDB = Depends(get_current_organization),
    reconciler: CallReconciler = Depends(get_call_reconciler)
):
    """Get a call, refreshing its status from Bolna while it is live"""
    call = await reconciler.get_call(organization, call_id)
    return {"success": True, "data": {"call": call.to_response()}}
