"""Data models for the voice integration service"""

from .call import (
    CallStatus,
    TERMINAL_STATUSES,
    CallRequest,
    WebhookPayload,
    ProviderCallHandle,
    ProviderCallStatus,
    CallListFilters
)

from .agent import (
    AgentCreateRequest,
    AgentUpdateRequest
)

from .organization import (
    ApiKeyRequest,
    ApiKeyStatus
)

__all__ = [
    # Call models
    "CallStatus",
    "TERMINAL_STATUSES",
    "CallRequest",
    "WebhookPayload",
    "ProviderCallHandle",
    "ProviderCallStatus",
    "CallListFilters",
    # Agent models
    "AgentCreateRequest",
    "AgentUpdateRequest",
    # Organization models
    "ApiKeyRequest",
    "ApiKeyStatus"
]
