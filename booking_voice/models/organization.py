"""
Organization credential models
"""

from typing import Optional
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class ApiKeyRequest(BaseModel):
    """Request model for storing the organization's Bolna API key"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    api_key: Optional[str] = None


class ApiKeyStatus(BaseModel):
    """Whether a key is stored and whether Bolna still accepts it"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    is_configured: bool
    is_valid: bool
