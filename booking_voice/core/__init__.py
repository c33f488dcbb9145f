"""Core module for configuration, settings, and shared utilities"""

from .config import get_settings, Settings
from .logging import setup_logging, get_logger
from .encryption import CredentialVault
from .exceptions import (
    VoiceServiceException,
    AuthenticationError,
    InvalidAPIKeyError,
    AuthorizationError,
    ProviderNotConfiguredError,
    AgentNotFoundError,
    CallNotFoundError,
    ValidationError,
    InvalidPhoneNumberError,
    ProviderRejectedError,
    ServiceError,
    BolnaAPIError,
    BolnaConnectionError,
    BolnaResponseError,
    EncryptionError
)

__all__ = [
    # Config
    "get_settings",
    "Settings",
    # Logging
    "setup_logging",
    "get_logger",
    # Credentials
    "CredentialVault",
    # Exceptions
    "VoiceServiceException",
    "AuthenticationError",
    "InvalidAPIKeyError",
    "AuthorizationError",
    "ProviderNotConfiguredError",
    "AgentNotFoundError",
    "CallNotFoundError",
    "ValidationError",
    "InvalidPhoneNumberError",
    "ProviderRejectedError",
    "ServiceError",
    "BolnaAPIError",
    "BolnaConnectionError",
    "BolnaResponseError",
    "EncryptionError"
]
