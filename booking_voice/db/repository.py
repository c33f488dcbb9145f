"""
Voice Repository Implementation

This module provides a concrete implementation of the VoiceRepositoryInterface
that works with any DatabaseAdapter (SQLite, PostgreSQL).
"""

import logging
from datetime import datetime, timezone
from typing import Optional, List, Dict, Any, Tuple

from booking_voice.core.config import Settings
from booking_voice.db.base import DatabaseAdapter, VoiceRepositoryInterface
from booking_voice.db.models import (
    OrganizationDB,
    VoiceAgentDB,
    VoiceCallDB,
    AgentSummary,
    utcnow,
)
from booking_voice.models.call import CallListFilters, CallStatus, TERMINAL_STATUSES

logger = logging.getLogger(__name__)

# Columns callers may change through update_agent / update_call
AGENT_UPDATABLE_COLUMNS = frozenset({
    "bolna_agent_id", "name", "welcome_message", "instructions",
    "language", "voice_id", "is_active",
})

CALL_UPDATABLE_COLUMNS = frozenset({
    "bolna_call_id", "status", "duration", "recording_url",
    "transcript", "error_message", "completed_at",
})

CALL_SELECT = """
    SELECT c.*, a.name AS agent_name
    FROM voice_calls c
    LEFT JOIN voice_agents a ON a.id = c.agent_id
"""


class VoiceRepository(VoiceRepositoryInterface):
    """
    Repository for organizations, voice agents and calls.

    This class implements all data operations using the provided
    database adapter.
    """

    def __init__(self, adapter: DatabaseAdapter):
        """
        Initialize the repository with a database adapter.

        Args:
            adapter: A DatabaseAdapter implementation (SQLite, PostgreSQL)
        """
        self.adapter = adapter

    async def initialize(self) -> bool:
        """
        Initialize the repository (connect and setup schema).

        Returns:
            True if initialization successful, False otherwise.
        """
        connected = await self.adapter.connect()
        if not connected:
            return False

        return await self.adapter.initialize_schema()

    async def close(self) -> None:
        """Close the database connection."""
        await self.adapter.disconnect()

    def is_connected(self) -> bool:
        return self.adapter.is_connected()

    # ==================== Organizations ====================

    async def create_organization(self, organization: OrganizationDB) -> OrganizationDB:
        """Create a new organization."""
        query = """
            INSERT INTO organizations (id, name, bolna_api_key, api_token_hash, created_at, updated_at)
            VALUES (?, ?, ?, ?, ?, ?)
        """
        await self.adapter.execute(query, (
            organization.id,
            organization.name,
            organization.bolna_api_key,
            organization.api_token_hash,
            organization.created_at,
            organization.updated_at,
        ))
        logger.info(f"Created organization: {organization.id}")
        return organization

    async def get_organization(self, organization_id: str) -> Optional[OrganizationDB]:
        row = await self.adapter.fetch_one(
            "SELECT * FROM organizations WHERE id = ?", (organization_id,)
        )
        return self._row_to_organization(row) if row else None

    async def get_organization_by_token_hash(self, token_hash: str) -> Optional[OrganizationDB]:
        row = await self.adapter.fetch_one(
            "SELECT * FROM organizations WHERE api_token_hash = ?", (token_hash,)
        )
        return self._row_to_organization(row) if row else None

    async def set_bolna_api_key(
        self, organization_id: str, encrypted_key: Optional[str]
    ) -> Optional[OrganizationDB]:
        """Store or clear (None) the encrypted provider key."""
        await self.adapter.execute(
            "UPDATE organizations SET bolna_api_key = ?, updated_at = ? WHERE id = ?",
            (encrypted_key, utcnow(), organization_id),
        )
        return await self.get_organization(organization_id)

    # ==================== Voice Agents ====================

    async def create_agent(self, agent: VoiceAgentDB) -> VoiceAgentDB:
        """Create a new voice agent record."""
        query = """
            INSERT INTO voice_agents (
                id, organization_id, bolna_agent_id, name, welcome_message,
                instructions, language, voice_id, is_active, created_at, updated_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
        """
        await self.adapter.execute(query, (
            agent.id,
            agent.organization_id,
            agent.bolna_agent_id,
            agent.name,
            agent.welcome_message,
            agent.instructions,
            agent.language,
            agent.voice_id,
            agent.is_active,
            agent.created_at,
            agent.updated_at,
        ))
        logger.info(f"Created voice agent: {agent.id}")
        return agent

    async def get_agent(self, organization_id: str, agent_id: str) -> Optional[VoiceAgentDB]:
        query = """
            SELECT a.*, (SELECT COUNT(*) FROM voice_calls c WHERE c.agent_id = a.id) AS call_count
            FROM voice_agents a
            WHERE a.id = ? AND a.organization_id = ?
        """
        row = await self.adapter.fetch_one(query, (agent_id, organization_id))
        return self._row_to_agent(row) if row else None

    async def list_agents(self, organization_id: str) -> List[VoiceAgentDB]:
        query = """
            SELECT a.*, (SELECT COUNT(*) FROM voice_calls c WHERE c.agent_id = a.id) AS call_count
            FROM voice_agents a
            WHERE a.organization_id = ?
            ORDER BY a.created_at DESC
        """
        rows = await self.adapter.fetch_all(query, (organization_id,))
        return [self._row_to_agent(row) for row in rows]

    async def update_agent(
        self, organization_id: str, agent_id: str, updates: Dict[str, Any]
    ) -> Optional[VoiceAgentDB]:
        """Update an agent's fields, scoped to its organization."""
        columns = {k: v for k, v in updates.items() if k in AGENT_UPDATABLE_COLUMNS}
        if columns:
            columns["updated_at"] = utcnow()
            set_clause, params = self._build_set_clause(columns)
            await self.adapter.execute(
                f"UPDATE voice_agents SET {set_clause} WHERE id = ? AND organization_id = ?",
                params + (agent_id, organization_id),
            )
        return await self.get_agent(organization_id, agent_id)

    async def delete_agent(self, organization_id: str, agent_id: str) -> bool:
        """Delete an agent and every call placed through it."""
        await self.adapter.execute(
            "DELETE FROM voice_calls WHERE agent_id = ? AND organization_id = ?",
            (agent_id, organization_id),
        )
        deleted = await self.adapter.execute(
            "DELETE FROM voice_agents WHERE id = ? AND organization_id = ?",
            (agent_id, organization_id),
        )
        if deleted:
            logger.info(f"Deleted voice agent: {agent_id}")
        return bool(deleted)

    async def count_calls_for_agent(self, agent_id: str) -> int:
        row = await self.adapter.fetch_one(
            "SELECT COUNT(*) AS count FROM voice_calls WHERE agent_id = ?", (agent_id,)
        )
        return int(row["count"]) if row else 0

    # ==================== Calls ====================

    async def create_call(self, call: VoiceCallDB) -> VoiceCallDB:
        """Create a new call record."""
        query = """
            INSERT INTO voice_calls (
                id, organization_id, agent_id, bolna_call_id, recipient_phone,
                status, duration, recording_url, transcript, error_message,
                created_at, completed_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
        """
        await self.adapter.execute(query, (
            call.id,
            call.organization_id,
            call.agent_id,
            call.bolna_call_id,
            call.recipient_phone,
            call.status,
            call.duration,
            call.recording_url,
            call.transcript,
            call.error_message,
            call.created_at,
            call.completed_at,
        ))
        logger.info(f"Created call record: {call.id}")
        return call

    async def get_call(self, organization_id: str, call_id: str) -> Optional[VoiceCallDB]:
        row = await self.adapter.fetch_one(
            f"{CALL_SELECT} WHERE c.id = ? AND c.organization_id = ?",
            (call_id, organization_id),
        )
        return self._row_to_call(row) if row else None

    async def get_call_by_id(self, call_id: str) -> Optional[VoiceCallDB]:
        row = await self.adapter.fetch_one(f"{CALL_SELECT} WHERE c.id = ?", (call_id,))
        return self._row_to_call(row) if row else None

    async def get_call_by_bolna_id(self, bolna_call_id: str) -> Optional[VoiceCallDB]:
        """Global lookup by the provider's call id (webhook correlation key)."""
        row = await self.adapter.fetch_one(
            f"{CALL_SELECT} WHERE c.bolna_call_id = ?", (bolna_call_id,)
        )
        return self._row_to_call(row) if row else None

    async def update_call(self, call_id: str, updates: Dict[str, Any]) -> Optional[VoiceCallDB]:
        """Update call fields and return the stored row."""
        columns = {k: v for k, v in updates.items() if k in CALL_UPDATABLE_COLUMNS}
        if not columns:
            return await self.get_call_by_id(call_id)

        set_clause, params = self._build_set_clause(columns)
        await self.adapter.execute(
            f"UPDATE voice_calls SET {set_clause} WHERE id = ?",
            params + (call_id,),
        )
        return await self.get_call_by_id(call_id)

    async def list_calls(
        self,
        organization_id: str,
        filters: Optional[CallListFilters] = None,
        limit: int = 20,
        offset: int = 0,
    ) -> List[VoiceCallDB]:
        """List calls newest first, with optional filters and pagination."""
        where, params = self._build_call_filters(organization_id, filters)
        query = f"{CALL_SELECT} WHERE {where} ORDER BY c.created_at DESC LIMIT ? OFFSET ?"
        rows = await self.adapter.fetch_all(query, params + (limit, offset))
        return [self._row_to_call(row) for row in rows]

    async def count_calls(
        self, organization_id: str, filters: Optional[CallListFilters] = None
    ) -> int:
        where, params = self._build_call_filters(organization_id, filters)
        row = await self.adapter.fetch_one(
            f"SELECT COUNT(*) AS count FROM voice_calls c WHERE {where}", params
        )
        return int(row["count"]) if row else 0

    # ==================== Analytics ====================

    async def get_call_statistics(self, organization_id: str) -> Dict[str, Any]:
        """Get aggregated call statistics for an organization."""
        stats_query = """
            SELECT
                COUNT(*) AS total_calls,
                SUM(CASE WHEN status = 'COMPLETED' THEN 1 ELSE 0 END) AS completed_calls,
                SUM(CASE WHEN status = 'FAILED' THEN 1 ELSE 0 END) AS failed_calls,
                AVG(duration) AS avg_duration
            FROM voice_calls
            WHERE organization_id = ?
        """

        row = await self.adapter.fetch_one(stats_query, (organization_id,)) or {}

        return {
            "totalCalls": int(row.get("total_calls") or 0),
            "completedCalls": int(row.get("completed_calls") or 0),
            "failedCalls": int(row.get("failed_calls") or 0),
            "avgDuration": int(round(float(row.get("avg_duration") or 0))),
        }

    async def list_refreshable_calls(self, limit: int = 100) -> List[VoiceCallDB]:
        """Non-terminal calls that carry a provider call id."""
        placeholders = ", ".join("?" for _ in TERMINAL_STATUSES)
        query = f"""
            {CALL_SELECT}
            WHERE c.bolna_call_id IS NOT NULL AND c.status NOT IN ({placeholders})
            ORDER BY c.created_at ASC
            LIMIT ?
        """
        params = tuple(sorted(s.value for s in TERMINAL_STATUSES)) + (limit,)
        rows = await self.adapter.fetch_all(query, params)
        return [self._row_to_call(row) for row in rows]

    # ==================== Helper Methods ====================

    @staticmethod
    def _build_set_clause(columns: Dict[str, Any]) -> Tuple[str, tuple]:
        set_clause = ", ".join(f"{column} = ?" for column in columns)
        return set_clause, tuple(columns.values())

    def _build_call_filters(
        self, organization_id: str, filters: Optional[CallListFilters]
    ) -> Tuple[str, tuple]:
        conditions = ["c.organization_id = ?"]
        params: List[Any] = [organization_id]

        if filters:
            if filters.agent_id:
                conditions.append("c.agent_id = ?")
                params.append(filters.agent_id)
            if filters.status:
                conditions.append("c.status = ?")
                params.append(filters.status)
            if filters.start_date:
                conditions.append("c.created_at >= ?")
                params.append(self._as_utc(filters.start_date))
            if filters.end_date:
                conditions.append("c.created_at <= ?")
                params.append(self._as_utc(filters.end_date))

        return " AND ".join(conditions), tuple(params)

    @staticmethod
    def _as_utc(value: datetime) -> datetime:
        """Stored timestamps are UTC; naive filter values are taken as UTC too."""
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)

    def _row_to_organization(self, row: Dict[str, Any]) -> OrganizationDB:
        return OrganizationDB(
            id=row["id"],
            name=row["name"],
            bolna_api_key=row.get("bolna_api_key"),
            api_token_hash=row["api_token_hash"],
            created_at=self._parse_datetime(row.get("created_at")) or utcnow(),
            updated_at=self._parse_datetime(row.get("updated_at")) or utcnow(),
        )

    def _row_to_agent(self, row: Dict[str, Any]) -> VoiceAgentDB:
        """Convert a database row to VoiceAgentDB."""
        call_count = row.get("call_count")
        return VoiceAgentDB(
            id=row["id"],
            organization_id=row["organization_id"],
            bolna_agent_id=row["bolna_agent_id"],
            name=row["name"],
            welcome_message=row["welcome_message"],
            instructions=row["instructions"],
            language=row.get("language") or "en",
            voice_id=row.get("voice_id"),
            is_active=bool(row.get("is_active", True)),
            created_at=self._parse_datetime(row.get("created_at")) or utcnow(),
            updated_at=self._parse_datetime(row.get("updated_at")) or utcnow(),
            call_count=int(call_count) if call_count is not None else None,
        )

    def _row_to_call(self, row: Dict[str, Any]) -> VoiceCallDB:
        """Convert a database row to VoiceCallDB."""
        agent = None
        if row.get("agent_name") is not None:
            agent = AgentSummary(id=row["agent_id"], name=row["agent_name"])

        return VoiceCallDB(
            id=row["id"],
            organization_id=row["organization_id"],
            agent_id=row["agent_id"],
            bolna_call_id=row.get("bolna_call_id"),
            recipient_phone=row["recipient_phone"],
            status=CallStatus(row["status"]),
            duration=row.get("duration"),
            recording_url=row.get("recording_url"),
            transcript=row.get("transcript"),
            error_message=row.get("error_message"),
            created_at=self._parse_datetime(row.get("created_at")) or utcnow(),
            completed_at=self._parse_datetime(row.get("completed_at")),
            agent=agent,
        )

    def _parse_datetime(self, value: Any) -> Optional[datetime]:
        """Parse datetime from string or return as-is if already datetime."""
        if value is None:
            return None
        if isinstance(value, datetime):
            return value
        try:
            return datetime.fromisoformat(value.replace("Z", "+00:00"))
        except (ValueError, AttributeError):
            return None


class DatabaseRepository:
    """
    Factory class for creating repository instances.
    """

    @staticmethod
    def create_repository(settings: Settings) -> VoiceRepository:
        """
        Create a repository for the configured database type.

        Args:
            settings: Application settings (DATABASE_TYPE, SQLITE_PATH, POSTGRES_URL)

        Returns:
            VoiceRepository instance with the appropriate adapter.
        """
        db_type = settings.database_type.lower()

        if db_type == "postgres" and not settings.postgres_url:
            logger.warning("PostgreSQL selected but POSTGRES_URL not set, falling back to SQLite")
            db_type = "sqlite"

        if db_type == "postgres":
            from booking_voice.db.adapters.postgres import PostgresAdapter
            adapter = PostgresAdapter(settings.postgres_url)
        else:
            from booking_voice.db.adapters.sqlite import SQLiteAdapter
            adapter = SQLiteAdapter(settings.sqlite_path)

        logger.info(f"Created {db_type} repository instance")
        return VoiceRepository(adapter)
