"""
Bolna API key management routes
"""

from fastapi import APIRouter, Depends

from booking_voice.api.dependencies import get_credential_service
from booking_voice.api.middleware.auth import get_current_organization
from booking_voice.db.models import OrganizationDB
from booking_voice.models.organization import ApiKeyRequest
from booking_voice.services.credentials import CredentialService

router = APIRouter(prefix="/bolna/api-key", tags=["bolna"])


@router.post("")
async def save_api_key(
    request: ApiKeyRequest,
    organization: OrganizationDB = Depends(get_current_organization),
    credentials: CredentialService = Depends(get_credential_service)
):
    """
    Validate and store the organization's Bolna API key

    - **apiKey**: Bolna API key (stored encrypted)
    """
    data = await credentials.save_api_key(organization, request.api_key)
    return {
        "success": True,
        "message": "API key saved successfully",
        "data": data
    }


@router.get("/status")
async def get_api_key_status(
    organization: OrganizationDB = Depends(get_current_organization),
    credentials: CredentialService = Depends(get_credential_service)
):
    """Whether a key is stored and whether Bolna still accepts it"""
    status = await credentials.get_status(organization)
    return {"success": True, "data": status.model_dump(by_alias=True)}


@router.delete("")
async def delete_api_key(
    organization: OrganizationDB = Depends(get_current_organization),
    credentials: CredentialService = Depends(get_credential_service)
):
    await credentials.delete_api_key(organization)
    return {"success": True, "message": "API key removed successfully"}
