"""
Database Abstraction Layer

Persistence for organizations, voice agents and calls behind a single
repository, so the backend (SQLite, PostgreSQL) can change without touching
the services.

Usage:
    from booking_voice.db import DatabaseRepository

    repo = DatabaseRepository.create_repository(settings)
    await repo.initialize()
    call = await repo.get_call(organization_id, call_id)
"""

from booking_voice.db.repository import DatabaseRepository, VoiceRepository
from booking_voice.db.base import DatabaseAdapter, VoiceRepositoryInterface
from booking_voice.db.models import (
    OrganizationDB,
    VoiceAgentDB,
    VoiceCallDB,
    AgentSummary,
)

__all__ = [
    "DatabaseRepository",
    "VoiceRepository",
    "DatabaseAdapter",
    "VoiceRepositoryInterface",
    "OrganizationDB",
    "VoiceAgentDB",
    "VoiceCallDB",
    "AgentSummary",
]
