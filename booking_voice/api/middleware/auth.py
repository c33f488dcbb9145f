"""
Authentication Middleware
Handles organization token authentication
"""

import hashlib
from typing import Optional
from fastapi import Request

from booking_voice.core.logging import get_logger
from booking_voice.core.exceptions import InvalidAPIKeyError
from booking_voice.db.models import OrganizationDB

logger = get_logger(__name__)


def hash_token(token: str) -> str:
    """Tokens are stored only as their SHA-256 hex digest"""
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


async def get_api_key(request: Request) -> Optional[str]:
    """Extract the organization token from request"""
    # Try header first
    api_key = request.headers.get("X-API-Key")
    if api_key:
        return api_key

    # Try query parameter
    api_key = request.query_params.get("api_key")
    if api_key:
        return api_key

    # Try Authorization header (Bearer token)
    auth_header = request.headers.get("Authorization")
    if auth_header and auth_header.startswith("Bearer "):
        return auth_header[7:]

    return None


async def authenticate_request(request: Request) -> OrganizationDB:
    """
    Authenticate a request and return its organization

    Raises:
        InvalidAPIKeyError: If the token is missing or unknown
    """
    api_key = await get_api_key(request)

    if not api_key:
        raise InvalidAPIKeyError("API key is required")

    repository = request.app.state.repository
    organization = await repository.get_organization_by_token_hash(hash_token(api_key.strip()))
    if not organization:
        logger.warning("Rejected request with unknown organization token")
        raise InvalidAPIKeyError()

    # Store organization in request state for later use
    request.state.organization = organization
    return organization


async def get_current_organization(request: Request) -> OrganizationDB:
    """
    Dependency to get the organization of an authenticated request

    Usage:
        @router.get("/endpoint")
        async def endpoint(organization: OrganizationDB = Depends(get_current_organization)):
            ...
    """
    if hasattr(request.state, "organization"):
        return request.state.organization

    return await authenticate_request(request)
