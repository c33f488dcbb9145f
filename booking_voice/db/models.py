"""
Database Models

These models represent the database schema and are used by all
database adapters (SQLite, PostgreSQL). They serialize with camelCase
keys for API responses.
"""

from datetime import datetime, timezone
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from booking_voice.models.call import CallStatus


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class RecordModel(BaseModel):
    """Shared config for persisted records"""
    model_config = ConfigDict(
        from_attributes=True,
        alias_generator=to_camel,
        populate_by_name=True
    )

    def to_response(self) -> dict:
        """Serialize for the API envelope"""
        return self.model_dump(mode="json", by_alias=True)


class OrganizationDB(RecordModel):
    """Database model for organizations"""
    id: str
    name: str
    bolna_api_key: Optional[str] = None  # encrypted record, never plaintext
    api_token_hash: str
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)


class AgentSummary(RecordModel):
    """Agent fields embedded in call responses"""
    id: str
    name: str


class VoiceAgentDB(RecordModel):
    """Database model for voice agents"""
    id: str
    organization_id: str
    bolna_agent_id: str
    name: str
    welcome_message: str
    instructions: str
    language: str = "en"
    voice_id: Optional[str] = None
    is_active: bool = True
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)
    call_count: Optional[int] = None


class VoiceCallDB(RecordModel):
    """Database model for calls"""
    id: str
    organization_id: str
    agent_id: str
    bolna_call_id: Optional[str] = None
    recipient_phone: str
    status: CallStatus = CallStatus.INITIATED
    duration: Optional[int] = None  # seconds
    recording_url: Optional[str] = None
    transcript: Optional[str] = None
    error_message: Optional[str] = None
    created_at: datetime = Field(default_factory=utcnow)
    completed_at: Optional[datetime] = None
    agent: Optional[AgentSummary] = None


# SQL Schema definitions for different databases
SQLITE_SCHEMA = """
CREATE TABLE IF NOT EXISTS organizations (
    id TEXT PRIMARY KEY,
    name TEXT NOT NULL,
    bolna_api_key TEXT,
    api_token_hash TEXT UNIQUE NOT NULL,
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS voice_agents (
    id TEXT PRIMARY KEY,
    organization_id TEXT NOT NULL REFERENCES organizations(id) ON DELETE CASCADE,
    bolna_agent_id TEXT NOT NULL,
    name TEXT NOT NULL,
    welcome_message TEXT NOT NULL,
    instructions TEXT NOT NULL,
    language TEXT NOT NULL DEFAULT 'en',
    voice_id TEXT,
    is_active INTEGER NOT NULL DEFAULT 1,
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS voice_calls (
    id TEXT PRIMARY KEY,
    organization_id TEXT NOT NULL REFERENCES organizations(id) ON DELETE CASCADE,
    agent_id TEXT NOT NULL REFERENCES voice_agents(id) ON DELETE CASCADE,
    bolna_call_id TEXT UNIQUE,
    recipient_phone TEXT NOT NULL,
    status TEXT NOT NULL DEFAULT 'INITIATED',
    duration INTEGER,
    recording_url TEXT,
    transcript TEXT,
    error_message TEXT,
    created_at TEXT NOT NULL,
    completed_at TEXT
);

CREATE INDEX IF NOT EXISTS idx_voice_agents_org ON voice_agents(organization_id);
CREATE INDEX IF NOT EXISTS idx_voice_calls_org ON voice_calls(organization_id);
CREATE INDEX IF NOT EXISTS idx_voice_calls_agent ON voice_calls(agent_id);
CREATE INDEX IF NOT EXISTS idx_voice_calls_status ON voice_calls(status);
CREATE INDEX IF NOT EXISTS idx_voice_calls_created_at ON voice_calls(created_at);
"""

POSTGRES_SCHEMA = """
CREATE TABLE IF NOT EXISTS organizations (
    id VARCHAR(64) PRIMARY KEY,
    name VARCHAR(255) NOT NULL,
    bolna_api_key TEXT,
    api_token_hash VARCHAR(64) UNIQUE NOT NULL,
    created_at TIMESTAMPTZ NOT NULL DEFAULT CURRENT_TIMESTAMP,
    updated_at TIMESTAMPTZ NOT NULL DEFAULT CURRENT_TIMESTAMP
);

CREATE TABLE IF NOT EXISTS voice_agents (
    id VARCHAR(64) PRIMARY KEY,
    organization_id VARCHAR(64) NOT NULL REFERENCES organizations(id) ON DELETE CASCADE,
    bolna_agent_id VARCHAR(255) NOT NULL,
    name VARCHAR(255) NOT NULL,
    welcome_message TEXT NOT NULL,
    instructions TEXT NOT NULL,
    language VARCHAR(16) NOT NULL DEFAULT 'en',
    voice_id VARCHAR(255),
    is_active BOOLEAN NOT NULL DEFAULT TRUE,
    created_at TIMESTAMPTZ NOT NULL DEFAULT CURRENT_TIMESTAMP,
    updated_at TIMESTAMPTZ NOT NULL DEFAULT CURRENT_TIMESTAMP
);

CREATE TABLE IF NOT EXISTS voice_calls (
    id VARCHAR(64) PRIMARY KEY,
    organization_id VARCHAR(64) NOT NULL REFERENCES organizations(id) ON DELETE CASCADE,
    agent_id VARCHAR(64) NOT NULL REFERENCES voice_agents(id) ON DELETE CASCADE,
    bolna_call_id VARCHAR(255) UNIQUE,
    recipient_phone VARCHAR(32) NOT NULL,
    status VARCHAR(20) NOT NULL DEFAULT 'INITIATED',
    duration INTEGER,
    recording_url TEXT,
    transcript TEXT,
    error_message TEXT,
    created_at TIMESTAMPTZ NOT NULL DEFAULT CURRENT_TIMESTAMP,
    completed_at TIMESTAMPTZ
);

CREATE INDEX IF NOT EXISTS idx_voice_agents_org ON voice_agents(organization_id);
CREATE INDEX IF NOT EXISTS idx_voice_calls_org ON voice_calls(organization_id);
CREATE INDEX IF NOT EXISTS idx_voice_calls_agent ON voice_calls(agent_id);
CREATE INDEX IF NOT EXISTS idx_voice_calls_status ON voice_calls(status);
CREATE INDEX IF NOT EXISTS idx_voice_calls_created_at ON voice_calls(created_at);
"""
