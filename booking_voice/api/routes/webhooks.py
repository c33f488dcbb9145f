"""
Webhook routes for Bolna callbacks
"""

from fastapi import APIRouter, Depends, Request

from booking_voice.api.dependencies import get_call_reconciler
from booking_voice.core.exceptions import ValidationError
from booking_voice.core.logging import get_logger
from booking_voice.services.call_reconciler import CallReconciler

logger = get_logger(__name__)

router = APIRouter(prefix="/bolna", tags=["webhooks"])


@router.post("/webhook")
async def handle_bolna_webhook(
    request: Request,
    reconciler: CallReconciler = Depends(get_call_reconciler)
):
    """
    Receive call updates from Bolna

    Unauthenticated; calls are matched by Bolna's call id. Unknown calls
    are acknowledged so Bolna does not retry them.
    """
    try:
        body = await request.json()
    except ValueError:
        raise ValidationError("Invalid JSON payload")

    if not isinstance(body, dict):
        raise ValidationError("Webhook payload must be a JSON object")

    call = await reconciler.handle_webhook(body)
    if call is None:
        return {"success": True, "message": "Call not found"}

    return {"success": True}
