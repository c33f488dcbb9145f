"""
Logging setup for Booking Voice

Module loggers live under the ``booking_voice`` namespace. Every record that
reaches the console handler passes through ``SecretRedactingFilter`` so bearer
tokens and ``api_key`` query values never end up in the output.
"""

import logging
import re
import sys
from typing import Optional

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Chatty third-party loggers kept at WARNING unless DEBUG is requested
QUIET_LOGGERS = ("httpx", "httpcore", "asyncpg")

_SECRET_PATTERNS = (
    re.compile(r"(Bearer\s+)[A-Za-z0-9._~+/=-]+", re.IGNORECASE),
    re.compile(r"((?:api_key|apiKey|X-API-Key)[\"']?\s*[:=]\s*[\"']?)[^\s\"'&,}]+", re.IGNORECASE),
)


class SecretRedactingFilter(logging.Filter):
    """Masks credentials in the rendered log message"""

    def filter(self, record: logging.LogRecord) -> bool:
        message = record.getMessage()
        redacted = message
        for pattern in _SECRET_PATTERNS:
            redacted = pattern.sub(r"\1***", redacted)
        if redacted != message:
            record.msg = redacted
            record.args = None
        return True


def setup_logging(level: Optional[str] = None) -> logging.Logger:
    """
    Configure the root handler and the ``booking_voice`` logger

    Args:
        level: Log level name; defaults to ``LOG_LEVEL`` from settings
    """
    if level is None:
        from .config import get_settings
        level = get_settings().log_level

    log_level = getattr(logging, level.upper(), logging.INFO)

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT))
    handler.addFilter(SecretRedactingFilter())

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    for existing in root_logger.handlers[:]:
        root_logger.removeHandler(existing)
    root_logger.addHandler(handler)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(log_level if log_level <= logging.DEBUG else logging.WARNING)

    logger = logging.getLogger("booking_voice")
    logger.setLevel(log_level)
    return logger


def get_logger(name: str) -> logging.Logger:
    """Logger for a module, namespaced under ``booking_voice``"""
    if name.startswith("booking_voice"):
        return logging.getLogger(name)
    return logging.getLogger(f"booking_voice.{name}")
