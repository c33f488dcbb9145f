"""
Data models for call management
"""

import json
from datetime import datetime
from enum import Enum
from typing import Optional, Dict, Any
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CallStatus(str, Enum):
    """Status of a call"""
    INITIATED = "INITIATED"
    RINGING = "RINGING"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"
    NO_ANSWER = "NO_ANSWER"
    BUSY = "BUSY"
    CANCELLED = "CANCELLED"

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_STATUSES

    @property
    def rank(self) -> int:
        """Position in the lifecycle; all terminal statuses share the top rank"""
        return STATUS_RANK[self]


TERMINAL_STATUSES = frozenset({
    CallStatus.COMPLETED,
    CallStatus.FAILED,
    CallStatus.NO_ANSWER,
    CallStatus.BUSY,
    CallStatus.CANCELLED,
})

STATUS_RANK: Dict[CallStatus, int] = {
    CallStatus.INITIATED: 0,
    CallStatus.RINGING: 1,
    CallStatus.IN_PROGRESS: 2,
    **{status: 3 for status in TERMINAL_STATUSES},
}


class CallRequest(BaseModel):
    """Request model for placing an outbound call"""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "agentId": "6f1c4c1e-2b7e-4a37-9d55-0b7f1d2c9a10",
                "recipientPhone": "+919876543210"
            }
        }
    )

    agent_id: Optional[str] = Field(default=None, description="Local voice agent id")
    recipient_phone: Optional[str] = Field(
        default=None,
        description="Phone number to call (E.164 format)"
    )


def coerce_duration(value: Any) -> Optional[int]:
    """Whole seconds from whatever numeric shape the provider sent"""
    if value is None or value == "" or isinstance(value, bool):
        return None
    try:
        return int(round(float(value)))
    except (TypeError, ValueError, OverflowError):
        return None


def _coerce_text(value: Any) -> Optional[str]:
    if value is None or value == "":
        return None
    if isinstance(value, (dict, list)):
        return json.dumps(value)
    return value if isinstance(value, str) else str(value)


class WebhookPayload(BaseModel):
    """Call update pushed by Bolna"""

    event: Optional[str] = None
    call_id: Optional[str] = None
    status: Optional[str] = None
    duration: Optional[int] = None
    recording_url: Optional[str] = None
    transcript: Optional[str] = None

    @classmethod
    def from_body(cls, body: Dict[str, Any]) -> "WebhookPayload":
        """Build from a raw webhook body without rejecting odd field types"""
        return cls(
            event=_coerce_text(body.get("event")),
            call_id=_coerce_text(body.get("call_id")),
            status=_coerce_text(body.get("status")),
            duration=coerce_duration(body.get("duration")),
            recording_url=_coerce_text(body.get("recording_url")),
            transcript=_coerce_text(body.get("transcript"))
        )


class ProviderCallHandle(BaseModel):
    """Bolna's answer to a call placement"""
    call_id: Optional[str] = None
    raw: Dict[str, Any] = Field(default_factory=dict)


class ProviderCallStatus(BaseModel):
    """Bolna's view of a single call"""
    status: Optional[str] = None
    duration: Optional[int] = None
    recording_url: Optional[str] = None
    transcript: Optional[str] = None
    raw: Dict[str, Any] = Field(default_factory=dict)


class CallListFilters(BaseModel):
    """Filters for the call history listing"""
    agent_id: Optional[str] = None
    status: Optional[CallStatus] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
