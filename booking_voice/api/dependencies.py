"""
Request-scoped service wiring

Services are cheap to build; they are assembled per request from the
shared objects the application stores on ``app.state`` at startup.
"""

from fastapi import Depends, Request

from booking_voice.core.config import Settings
from booking_voice.db.base import VoiceRepositoryInterface
from booking_voice.services.agent_service import AgentService
from booking_voice.services.call_reconciler import CallReconciler
from booking_voice.services.credentials import CredentialService


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_repository(request: Request) -> VoiceRepositoryInterface:
    return request.app.state.repository


def get_credential_service(
    request: Request,
    repository: VoiceRepositoryInterface = Depends(get_repository),
    settings: Settings = Depends(get_app_settings)
) -> CredentialService:
    return CredentialService(
        repository=repository,
        vault=request.app.state.vault,
        client_factory=request.app.state.bolna_client_factory,
        settings=settings
    )


def get_agent_service(
    repository: VoiceRepositoryInterface = Depends(get_repository),
    credentials: CredentialService = Depends(get_credential_service)
) -> AgentService:
    return AgentService(repository, credentials)


def get_call_reconciler(
    repository: VoiceRepositoryInterface = Depends(get_repository),
    credentials: CredentialService = Depends(get_credential_service),
    settings: Settings = Depends(get_app_settings)
) -> CallReconciler:
    return CallReconciler(repository, credentials, settings)
