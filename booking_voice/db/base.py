"""
Database Adapter Base Classes

This module defines the abstract interfaces that all database adapters
must implement, and the operations the reconciliation core relies on.
"""

from abc import ABC, abstractmethod
from typing import Optional, List, Dict, Any
from booking_voice.db.models import OrganizationDB, VoiceAgentDB, VoiceCallDB
from booking_voice.models.call import CallListFilters


class DatabaseAdapter(ABC):
    """
    Abstract base class for database adapters.

    All database implementations (SQLite, PostgreSQL) must implement
    this interface. Queries use ``?`` placeholders.
    """

    @abstractmethod
    async def connect(self) -> bool:
        """
        Establish connection to the database.
        Returns True if successful, False otherwise.
        """
        pass

    @abstractmethod
    async def disconnect(self) -> None:
        """Close the database connection."""
        pass

    @abstractmethod
    async def initialize_schema(self) -> bool:
        """
        Create necessary tables if they don't exist.
        Returns True if successful, False otherwise.
        """
        pass

    @abstractmethod
    async def execute(self, query: str, params: tuple = ()) -> Any:
        """Execute a raw SQL query."""
        pass

    @abstractmethod
    async def fetch_one(self, query: str, params: tuple = ()) -> Optional[Dict[str, Any]]:
        """Execute query and return single row as dict."""
        pass

    @abstractmethod
    async def fetch_all(self, query: str, params: tuple = ()) -> List[Dict[str, Any]]:
        """Execute query and return all rows as list of dicts."""
        pass

    @abstractmethod
    def is_connected(self) -> bool:
        """Check if database connection is active."""
        pass


class VoiceRepositoryInterface(ABC):
    """
    Abstract interface for organization, agent and call data.

    Agent reads and writes are always scoped by organization. Calls are
    scoped by organization, except the lookup by provider call id used
    by webhooks.
    """

    # ==================== Organizations ====================

    @abstractmethod
    async def create_organization(self, organization: OrganizationDB) -> OrganizationDB:
        pass

    @abstractmethod
    async def get_organization(self, organization_id: str) -> Optional[OrganizationDB]:
        pass

    @abstractmethod
    async def get_organization_by_token_hash(self, token_hash: str) -> Optional[OrganizationDB]:
        pass

    @abstractmethod
    async def set_bolna_api_key(
        self, organization_id: str, encrypted_key: Optional[str]
    ) -> Optional[OrganizationDB]:
        """Store or clear (None) the encrypted provider key."""
        pass

    # ==================== Voice Agents ====================

    @abstractmethod
    async def create_agent(self, agent: VoiceAgentDB) -> VoiceAgentDB:
        pass

    @abstractmethod
    async def get_agent(self, organization_id: str, agent_id: str) -> Optional[VoiceAgentDB]:
        pass

    @abstractmethod
    async def list_agents(self, organization_id: str) -> List[VoiceAgentDB]:
        pass

    @abstractmethod
    async def update_agent(
        self, organization_id: str, agent_id: str, updates: Dict[str, Any]
    ) -> Optional[VoiceAgentDB]:
        pass

    @abstractmethod
    async def delete_agent(self, organization_id: str, agent_id: str) -> bool:
        """Delete an agent and every call placed through it."""
        pass

    @abstractmethod
    async def count_calls_for_agent(self, agent_id: str) -> int:
        pass

    # ==================== Calls ====================

    @abstractmethod
    async def create_call(self, call: VoiceCallDB) -> VoiceCallDB:
        pass

    @abstractmethod
    async def get_call(self, organization_id: str, call_id: str) -> Optional[VoiceCallDB]:
        pass

    @abstractmethod
    async def get_call_by_id(self, call_id: str) -> Optional[VoiceCallDB]:
        pass

    @abstractmethod
    async def get_call_by_bolna_id(self, bolna_call_id: str) -> Optional[VoiceCallDB]:
        """Global lookup by the provider's call id (webhook correlation key)."""
        pass

    @abstractmethod
    async def update_call(self, call_id: str, updates: Dict[str, Any]) -> Optional[VoiceCallDB]:
        pass

    @abstractmethod
    async def list_calls(
        self,
        organization_id: str,
        filters: Optional[CallListFilters] = None,
        limit: int = 20,
        offset: int = 0,
    ) -> List[VoiceCallDB]:
        pass

    @abstractmethod
    async def count_calls(
        self, organization_id: str, filters: Optional[CallListFilters] = None
    ) -> int:
        pass

    @abstractmethod
    async def get_call_statistics(self, organization_id: str) -> Dict[str, Any]:
        pass

    @abstractmethod
    async def list_refreshable_calls(self, limit: int = 100) -> List[VoiceCallDB]:
        """Non-terminal calls that carry a provider call id."""
        pass
