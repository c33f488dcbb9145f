"""
Custom Exceptions for the voice integration service
Provides structured error handling across the application
"""

from typing import Optional, Dict, Any


class VoiceServiceException(Exception):
    """Base exception for all voice integration errors"""

    def __init__(
        self,
        message: str,
        error_code: str = "UNKNOWN_ERROR",
        details: Optional[Dict[str, Any]] = None,
        status_code: int = 500
    ):
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        self.status_code = status_code
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to the response envelope"""
        return {
            "success": False,
            "message": self.message,
            "error": self.error_code
        }


# Authentication & Authorization Exceptions
class AuthenticationError(VoiceServiceException):
    """Raised when authentication fails"""

    def __init__(self, message: str = "Authentication failed", details: Optional[Dict] = None):
        super().__init__(
            message=message,
            error_code="AUTH_FAILED",
            details=details,
            status_code=401
        )


class InvalidAPIKeyError(AuthenticationError):
    """Raised when an organization access token is missing or unknown"""

    def __init__(self, message: str = "Invalid or expired API key"):
        super().__init__(message=message, details={"hint": "Check your API key"})


class AuthorizationError(VoiceServiceException):
    """Raised when authorization fails"""

    def __init__(self, message: str = "Access denied", details: Optional[Dict] = None):
        super().__init__(
            message=message,
            error_code="ACCESS_DENIED",
            details=details,
            status_code=403
        )


class ProviderNotConfiguredError(AuthorizationError):
    """Raised when the organization has no usable Bolna API key"""

    def __init__(self, message: str = "Bolna API key not configured"):
        super().__init__(message=message)
        self.error_code = "PROVIDER_NOT_CONFIGURED"


# Resource Exceptions
class AgentNotFoundError(VoiceServiceException):
    """Raised when a voice agent is not found in the organization"""

    def __init__(self, agent_id: str):
        super().__init__(
            message="Agent not found",
            error_code="AGENT_NOT_FOUND",
            details={"agent_id": agent_id},
            status_code=404
        )


class CallNotFoundError(VoiceServiceException):
    """Raised when a call is not found in the organization"""

    def __init__(self, call_id: str):
        super().__init__(
            message="Call not found",
            error_code="CALL_NOT_FOUND",
            details={"call_id": call_id},
            status_code=404
        )


# Validation Exceptions
class ValidationError(VoiceServiceException):
    """Raised when input validation fails"""

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(
            message=message,
            error_code="VALIDATION_ERROR",
            details={"field": field} if field else {},
            status_code=400
        )


class InvalidPhoneNumberError(ValidationError):
    """Raised when phone number is not in E.164 format"""

    def __init__(self, phone_number: str):
        super().__init__(
            message="Invalid phone number format. Use E.164 format (e.g., +919876543210)",
            field="recipientPhone"
        )
        self.error_code = "INVALID_PHONE_NUMBER"
        self.details["phone_number"] = phone_number


class ProviderRejectedError(VoiceServiceException):
    """Raised when the provider refuses a request the caller can fix"""

    def __init__(self, message: str, provider_status: Optional[int] = None):
        super().__init__(
            message=message,
            error_code="PROVIDER_REJECTED",
            details={"provider_status": provider_status} if provider_status else {},
            status_code=400
        )


# Service Exceptions
class ServiceError(VoiceServiceException):
    """Base exception for external service errors"""
    pass


class BolnaAPIError(ServiceError):
    """
    Raised when Bolna answers with a non-2xx status

    Carries the extracted human-readable message, the provider's HTTP
    status and the parsed response body.
    """

    def __init__(
        self,
        message: str,
        provider_status: int,
        body: Any = None
    ):
        super().__init__(
            message=message,
            error_code="BOLNA_API_ERROR",
            details={"provider_status": provider_status},
            status_code=502
        )
        self.provider_status = provider_status
        self.body = body if body is not None else {}


class BolnaConnectionError(ServiceError):
    """Raised when Bolna could not be reached at all"""

    def __init__(self, message: str = "Bolna API is unreachable"):
        super().__init__(
            message=message,
            error_code="BOLNA_UNREACHABLE",
            status_code=502
        )


class BolnaResponseError(ServiceError):
    """Raised when a successful Bolna response lacks a required field"""

    def __init__(self, message: str, body: Any = None):
        super().__init__(
            message=message,
            error_code="BOLNA_BAD_RESPONSE",
            status_code=502
        )
        self.body = body if body is not None else {}


class EncryptionError(VoiceServiceException):
    """Raised when a credential cannot be encrypted"""

    def __init__(self, message: str = "Failed to encrypt data"):
        super().__init__(
            message=message,
            error_code="ENCRYPTION_FAILED",
            status_code=500
        )
