"""
Voice agent request models
"""

from typing import Optional
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class AgentCreateRequest(BaseModel):
    """Request model for creating a voice agent"""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "name": "Reminder Bot",
                "welcomeMessage": "Hi!",
                "instructions": "Confirm appointment",
                "language": "en"
            }
        }
    )

    name: Optional[str] = None
    welcome_message: Optional[str] = None
    instructions: Optional[str] = Field(default=None, description="System prompt for the agent")
    language: Optional[str] = None
    voice_id: Optional[str] = None


class AgentUpdateRequest(BaseModel):
    """
    Partial update of a voice agent

    Only fields present in the request body are applied; ``voiceId`` may be
    sent as null to clear it.
    """
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    name: Optional[str] = None
    welcome_message: Optional[str] = None
    instructions: Optional[str] = None
    language: Optional[str] = None
    voice_id: Optional[str] = None
    is_active: Optional[bool] = None
