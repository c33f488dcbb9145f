"""
Credential Service
Stores, checks and removes an organization's Bolna API key and hands out
clients bound to it
"""

from datetime import datetime, timezone
from typing import Any, Callable, Dict, Optional

from booking_voice.core.config import Settings
from booking_voice.core.encryption import CredentialVault
from booking_voice.core.exceptions import ProviderNotConfiguredError, ValidationError
from booking_voice.core.logging import get_logger
from booking_voice.db.base import VoiceRepositoryInterface
from booking_voice.db.models import OrganizationDB
from booking_voice.models.organization import ApiKeyStatus
from booking_voice.services.bolna.client import BolnaClient

logger = get_logger(__name__)

ClientFactory = Callable[[str], BolnaClient]


class CredentialService:
    """Manages the encrypted provider key stored on an organization"""

    def __init__(
        self,
        repository: VoiceRepositoryInterface,
        vault: CredentialVault,
        client_factory: ClientFactory,
        settings: Settings
    ):
        self.repository = repository
        self.vault = vault
        self.client_factory = client_factory
        self.min_key_length = settings.bolna_min_api_key_length

    async def save_api_key(self, organization: OrganizationDB, api_key: Any) -> Dict[str, Any]:
        """
        Validate a key with Bolna and store it encrypted

        Raises:
            ValidationError: Key missing, too short, or rejected by Bolna
        """
        if not api_key or not isinstance(api_key, str) or not api_key.strip():
            raise ValidationError("API key is required", field="apiKey")

        api_key = api_key.strip()
        if len(api_key) < self.min_key_length:
            raise ValidationError("API key appears to be invalid (too short)", field="apiKey")

        client = self.client_factory(api_key)
        if not await client.validate_key():
            raise ValidationError(
                "Invalid Bolna API key. Please check your key and try again.",
                field="apiKey"
            )

        await self.repository.set_bolna_api_key(organization.id, self.vault.encrypt(api_key))
        logger.info(f"Bolna API key saved for organization {organization.id}")

        return {
            "isConnected": True,
            "validatedAt": datetime.now(timezone.utc).isoformat()
        }

    async def get_status(self, organization: OrganizationDB) -> ApiKeyStatus:
        """Report whether a key is stored and whether Bolna accepts it"""
        is_configured = bool(organization.bolna_api_key)
        is_valid = False

        if is_configured:
            client = self.optional_client_for(organization)
            if client is not None:
                is_valid = await client.validate_key()

        return ApiKeyStatus(is_configured=is_configured, is_valid=is_valid)

    async def delete_api_key(self, organization: OrganizationDB) -> None:
        await self.repository.set_bolna_api_key(organization.id, None)
        logger.info(f"Bolna API key removed for organization {organization.id}")

    def optional_client_for(self, organization: OrganizationDB) -> Optional[BolnaClient]:
        """Client for the organization's key, or None when no usable key is stored"""
        if not organization.bolna_api_key:
            return None

        api_key = self.vault.decrypt(organization.bolna_api_key)
        if not api_key:
            logger.warning(f"Stored Bolna API key for organization {organization.id} could not be decrypted")
            return None

        return self.client_factory(api_key)

    def client_for(self, organization: OrganizationDB) -> BolnaClient:
        """
        Client for the organization's key

        Raises:
            ProviderNotConfiguredError: No key stored, or it cannot be decrypted
        """
        client = self.optional_client_for(organization)
        if client is None:
            raise ProviderNotConfiguredError()
        return client
