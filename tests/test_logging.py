"""
Tests for log redaction
"""

import logging

from booking_voice.core.logging import SecretRedactingFilter, get_logger


def make_record(msg, *args):
    return logging.LogRecord("booking_voice.test", logging.INFO, __file__, 1, msg, args, None)


class TestSecretRedactingFilter:

    def test_masks_bearer_token(self):
        record = make_record("Calling Bolna with Authorization: Bearer %s", "bn-secret-key-1234567890")

        assert SecretRedactingFilter().filter(record) is True
        assert record.getMessage() == "Calling Bolna with Authorization: Bearer ***"

    def test_masks_api_key_values(self):
        record = make_record("GET /api/v1/bolna/agents?api_key=org-token-123&page=2")
        SecretRedactingFilter().filter(record)
        assert record.getMessage() == "GET /api/v1/bolna/agents?api_key=***&page=2"

        record = make_record("body={'apiKey': 'bn-secret-key-1234567890'}")
        SecretRedactingFilter().filter(record)
        assert "bn-secret-key" not in record.getMessage()

    def test_leaves_other_messages_alone(self):
        record = make_record("Call %s status %s -> %s", "c-1", "RINGING", "COMPLETED")
        SecretRedactingFilter().filter(record)

        assert record.args == ("c-1", "RINGING", "COMPLETED")
        assert record.getMessage() == "Call c-1 status RINGING -> COMPLETED"


def test_get_logger_namespace():
    assert get_logger("services.bolna").name == "booking_voice.services.bolna"
    assert get_logger("booking_voice.main").name == "booking_voice.main"
