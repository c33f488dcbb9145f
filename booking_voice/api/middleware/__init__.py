"""API Middleware"""

from .auth import (
    hash_token,
    get_api_key,
    authenticate_request,
    get_current_organization
)

__all__ = [
    "hash_token",
    "get_api_key",
    "authenticate_request",
    "get_current_organization"
]
