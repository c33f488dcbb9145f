"""
Pytest configuration and fixtures
"""

import os
import asyncio
import uuid
import pytest
import pytest_asyncio
from unittest.mock import AsyncMock, MagicMock

# Set test environment variables before importing app modules
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("DEBUG", "false")
os.environ.setdefault("DATABASE_TYPE", "sqlite")
os.environ.setdefault("SQLITE_PATH", ":memory:")
os.environ.setdefault("BOLNA_ENCRYPTION_KEY", "test-encryption-secret")
os.environ.setdefault("BOLNA_API_BASE_URL", "https://api.bolna.test")
os.environ.setdefault("REDIS_URL", "memory://")

from fastapi.testclient import TestClient

from booking_voice.api.middleware.auth import hash_token
from booking_voice.core.config import Settings
from booking_voice.core.encryption import CredentialVault
from booking_voice.db.adapters.sqlite import SQLiteAdapter
from booking_voice.db.models import OrganizationDB, VoiceAgentDB, VoiceCallDB
from booking_voice.db.repository import VoiceRepository
from booking_voice.models.call import CallStatus, ProviderCallHandle, ProviderCallStatus
from booking_voice.services.agent_service import AgentService
from booking_voice.services.bolna.client import BolnaClient
from booking_voice.services.call_reconciler import CallReconciler
from booking_voice.services.credentials import CredentialService

ORG_TOKEN = "org-token-123"
OTHER_ORG_TOKEN = "org-token-456"
BOLNA_KEY = "bn-test-key-1234567890"


def make_agent(organization_id: str, **overrides) -> VoiceAgentDB:
    data = {
        "id": str(uuid.uuid4()),
        "organization_id": organization_id,
        "bolna_agent_id": f"bolna-agent-{uuid.uuid4().hex[:8]}",
        "name": "Reminder Bot",
        "welcome_message": "Hi!",
        "instructions": "Confirm appointment",
    }
    data.update(overrides)
    return VoiceAgentDB(**data)


def make_call(organization_id: str, agent_id: str, **overrides) -> VoiceCallDB:
    data = {
        "id": str(uuid.uuid4()),
        "organization_id": organization_id,
        "agent_id": agent_id,
        "recipient_phone": "+919876543210",
        "status": CallStatus.RINGING,
    }
    data.update(overrides)
    return VoiceCallDB(**data)


def make_organization(vault: CredentialVault, token: str, with_key: bool = True, **overrides) -> OrganizationDB:
    data = {
        "id": str(uuid.uuid4()),
        "name": "Acme Clinic",
        "api_token_hash": hash_token(token),
        "bolna_api_key": vault.encrypt(BOLNA_KEY) if with_key else None,
    }
    data.update(overrides)
    return OrganizationDB(**data)


@pytest.fixture
def test_settings():
    """Settings isolated from any local .env file"""
    return Settings(
        _env_file=None,
        environment="test",
        database_type="sqlite",
        sqlite_path=":memory:",
        bolna_api_base_url="https://api.bolna.test",
        bolna_encryption_key="test-encryption-secret",
        bolna_webhook_url="https://voice.example.com/api/v1/bolna/webhook",
    )


@pytest.fixture
def vault(test_settings):
    return CredentialVault.from_settings(test_settings)


@pytest.fixture
def mock_bolna_client():
    """Fixture for mocked Bolna client"""
    client = MagicMock(spec=BolnaClient)
    client.validate_key = AsyncMock(return_value=True)
    client.create_agent = AsyncMock(return_value="bolna-agent-1")
    client.update_agent = AsyncMock(return_value={})
    client.delete_agent = AsyncMock(return_value=None)
    client.make_call = AsyncMock(return_value=ProviderCallHandle(call_id="bolna-call-1"))
    client.get_call_status = AsyncMock(return_value=ProviderCallStatus(status="ringing"))
    return client


@pytest.fixture
def client_factory(mock_bolna_client):
    return MagicMock(return_value=mock_bolna_client)


@pytest_asyncio.fixture
async def repository():
    """In-memory SQLite repository"""
    repo = VoiceRepository(SQLiteAdapter(":memory:"))
    assert await repo.initialize()
    yield repo
    await repo.close()


@pytest_asyncio.fixture
async def organization(repository, vault):
    return await repository.create_organization(make_organization(vault, ORG_TOKEN))


@pytest_asyncio.fixture
async def agent(repository, organization):
    return await repository.create_agent(make_agent(organization.id))


@pytest.fixture
def credentials(repository, vault, client_factory, test_settings):
    return CredentialService(repository, vault, client_factory, test_settings)


@pytest.fixture
def agent_service(repository, credentials):
    return AgentService(repository, credentials)


@pytest.fixture
def reconciler(repository, credentials, test_settings):
    return CallReconciler(repository, credentials, test_settings)


# ==================== API fixtures ====================

@pytest.fixture
def api_repository(vault):
    """Repository shared between the test and the app under TestClient"""
    repo = VoiceRepository(SQLiteAdapter(":memory:"))
    asyncio.run(repo.initialize())
    yield repo
    asyncio.run(repo.close())


@pytest.fixture
def api_organization(api_repository, vault):
    return asyncio.run(api_repository.create_organization(make_organization(vault, ORG_TOKEN)))


@pytest.fixture
def test_client(test_settings, client_factory, api_repository):
    """Fixture for test client"""
    from booking_voice.main import create_app

    app = create_app(
        settings=test_settings,
        bolna_client_factory=client_factory,
        repository=api_repository
    )
    with TestClient(app) as client:
        yield client


@pytest.fixture
def auth_headers():
    return {"Authorization": f"Bearer {ORG_TOKEN}"}


@pytest.fixture
def run():
    """Run a repository coroutine from a synchronous test"""
    return asyncio.run
