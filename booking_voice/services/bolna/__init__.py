"""
Bolna voice agent provider integration
"""

from booking_voice.services.bolna.client import (
    BolnaClient,
    BolnaClientFactory,
    extract_error_message,
)

__all__ = ["BolnaClient", "BolnaClientFactory", "extract_error_message"]
