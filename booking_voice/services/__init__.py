"""Services for the voice integration"""

from .bolna import BolnaClient, BolnaClientFactory
from .credentials import CredentialService
from .agent_service import AgentService
from .call_reconciler import CallReconciler

__all__ = [
    "BolnaClient",
    "BolnaClientFactory",
    "CredentialService",
    "AgentService",
    "CallReconciler",
]
