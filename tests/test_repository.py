"""
Tests for the voice repository on in-memory SQLite
"""

from datetime import datetime, timedelta, timezone

import pytest

from booking_voice.api.middleware.auth import hash_token
from booking_voice.db.adapters.postgres import PostgresAdapter
from booking_voice.db.repository import DatabaseRepository
from booking_voice.db.adapters.sqlite import SQLiteAdapter
from booking_voice.models.call import CallListFilters, CallStatus

from tests.conftest import OTHER_ORG_TOKEN, ORG_TOKEN, make_agent, make_call, make_organization


class TestOrganizations:

    @pytest.mark.asyncio
    async def test_lookup_by_token_hash(self, repository, organization):
        found = await repository.get_organization_by_token_hash(hash_token(ORG_TOKEN))
        assert found.id == organization.id
        assert await repository.get_organization_by_token_hash(hash_token("nope")) is None

    @pytest.mark.asyncio
    async def test_set_and_clear_api_key(self, repository, organization):
        updated = await repository.set_bolna_api_key(organization.id, "aa:bb:cc")
        assert updated.bolna_api_key == "aa:bb:cc"

        cleared = await repository.set_bolna_api_key(organization.id, None)
        assert cleared.bolna_api_key is None


class TestAgents:

    @pytest.mark.asyncio
    async def test_create_and_get_scoped(self, repository, organization, vault):
        other = await repository.create_organization(make_organization(vault, OTHER_ORG_TOKEN))
        agent = await repository.create_agent(make_agent(organization.id))

        found = await repository.get_agent(organization.id, agent.id)
        assert found.name == "Reminder Bot"
        assert found.language == "en"
        assert found.is_active is True
        assert found.call_count == 0

        assert await repository.get_agent(other.id, agent.id) is None

    @pytest.mark.asyncio
    async def test_list_agents_with_call_counts(self, repository, organization, agent):
        await repository.create_call(make_call(organization.id, agent.id))
        await repository.create_call(make_call(organization.id, agent.id))

        agents = await repository.list_agents(organization.id)
        assert len(agents) == 1
        assert agents[0].call_count == 2
        assert await repository.count_calls_for_agent(agent.id) == 2

    @pytest.mark.asyncio
    async def test_update_agent(self, repository, organization, agent):
        updated = await repository.update_agent(
            organization.id, agent.id, {"name": "Renamed", "is_active": False, "id": "ignored"}
        )

        assert updated.id == agent.id
        assert updated.name == "Renamed"
        assert updated.is_active is False
        assert updated.updated_at >= agent.updated_at

    @pytest.mark.asyncio
    async def test_delete_agent_removes_calls(self, repository, organization, agent):
        call = await repository.create_call(make_call(organization.id, agent.id, bolna_call_id="abc"))

        assert await repository.delete_agent(organization.id, agent.id) is True
        assert await repository.get_agent(organization.id, agent.id) is None
        assert await repository.get_call_by_id(call.id) is None
        assert await repository.delete_agent(organization.id, agent.id) is False


class TestCalls:

    @pytest.mark.asyncio
    async def test_call_round_trip_with_agent_summary(self, repository, organization, agent):
        completed_at = datetime(2026, 3, 1, 10, 30, 15, 123456, tzinfo=timezone.utc)
        call = await repository.create_call(make_call(
            organization.id, agent.id,
            bolna_call_id="abc",
            status=CallStatus.COMPLETED,
            duration=42,
            completed_at=completed_at
        ))

        stored = await repository.get_call(organization.id, call.id)
        assert stored.status == CallStatus.COMPLETED
        assert stored.duration == 42
        assert stored.completed_at == completed_at
        assert stored.agent.id == agent.id
        assert stored.agent.name == "Reminder Bot"

        response = stored.to_response()
        assert response["bolnaCallId"] == "abc"
        assert response["recipientPhone"] == "+919876543210"
        assert response["agent"] == {"id": agent.id, "name": "Reminder Bot"}

    @pytest.mark.asyncio
    async def test_get_call_is_scoped_but_bolna_lookup_is_global(self, repository, organization, agent, vault):
        other = await repository.create_organization(make_organization(vault, OTHER_ORG_TOKEN))
        call = await repository.create_call(make_call(organization.id, agent.id, bolna_call_id="abc"))

        assert await repository.get_call(other.id, call.id) is None
        assert (await repository.get_call_by_bolna_id("abc")).id == call.id

    @pytest.mark.asyncio
    async def test_update_call(self, repository, organization, agent):
        call = await repository.create_call(make_call(organization.id, agent.id, status=CallStatus.INITIATED))

        updated = await repository.update_call(call.id, {
            "status": CallStatus.FAILED,
            "error_message": "Invalid phone number",
            "organization_id": "not-updatable",
        })

        assert updated.status == CallStatus.FAILED
        assert updated.error_message == "Invalid phone number"
        assert updated.organization_id == organization.id

    @pytest.mark.asyncio
    async def test_list_calls_filters_and_pagination(self, repository, organization, agent):
        other_agent = await repository.create_agent(make_agent(organization.id, name="Survey Bot"))
        base = datetime(2026, 1, 10, tzinfo=timezone.utc)

        for day in range(5):
            await repository.create_call(make_call(
                organization.id, agent.id,
                created_at=base + timedelta(days=day),
                status=CallStatus.COMPLETED if day % 2 == 0 else CallStatus.FAILED
            ))
        await repository.create_call(make_call(organization.id, other_agent.id, created_at=base))

        page = await repository.list_calls(organization.id, CallListFilters(agent_id=agent.id), limit=2, offset=0)
        assert [c.created_at for c in page] == [base + timedelta(days=4), base + timedelta(days=3)]

        completed = CallListFilters(status=CallStatus.COMPLETED)
        assert await repository.count_calls(organization.id, completed) == 3

        window = CallListFilters(start_date=base + timedelta(days=1), end_date=base + timedelta(days=3))
        assert await repository.count_calls(organization.id, window) == 3

        naive = CallListFilters(start_date=datetime(2026, 1, 14))
        assert await repository.count_calls(organization.id, naive) == 1

        assert await repository.count_calls(organization.id) == 6

    @pytest.mark.asyncio
    async def test_statistics_are_organization_wide(self, repository, organization, agent, vault):
        await repository.create_call(make_call(organization.id, agent.id, status=CallStatus.COMPLETED, duration=10))
        await repository.create_call(make_call(organization.id, agent.id, status=CallStatus.COMPLETED, duration=21))
        await repository.create_call(make_call(organization.id, agent.id, status=CallStatus.FAILED))
        await repository.create_call(make_call(organization.id, agent.id, status=CallStatus.RINGING))

        other = await repository.create_organization(make_organization(vault, OTHER_ORG_TOKEN))
        other_agent = await repository.create_agent(make_agent(other.id))
        await repository.create_call(make_call(other.id, other_agent.id, status=CallStatus.COMPLETED, duration=500))

        stats = await repository.get_call_statistics(organization.id)
        assert stats == {
            "totalCalls": 4,
            "completedCalls": 2,
            "failedCalls": 1,
            "avgDuration": 16,
        }

    @pytest.mark.asyncio
    async def test_statistics_empty(self, repository, organization):
        stats = await repository.get_call_statistics(organization.id)
        assert stats == {"totalCalls": 0, "completedCalls": 0, "failedCalls": 0, "avgDuration": 0}

    @pytest.mark.asyncio
    async def test_list_refreshable_calls(self, repository, organization, agent):
        live = await repository.create_call(make_call(organization.id, agent.id, bolna_call_id="live-1"))
        await repository.create_call(make_call(organization.id, agent.id, bolna_call_id=None, status=CallStatus.INITIATED))
        await repository.create_call(make_call(
            organization.id, agent.id, bolna_call_id="done-1", status=CallStatus.NO_ANSWER
        ))

        calls = await repository.list_refreshable_calls()
        assert [c.id for c in calls] == [live.id]


class TestRepositoryFactory:

    def test_sqlite_by_default(self, test_settings):
        repo = DatabaseRepository.create_repository(test_settings)
        assert isinstance(repo.adapter, SQLiteAdapter)

    def test_postgres_without_url_falls_back(self, test_settings):
        settings = test_settings.model_copy(update={"database_type": "postgres", "postgres_url": None})
        repo = DatabaseRepository.create_repository(settings)
        assert isinstance(repo.adapter, SQLiteAdapter)

    def test_postgres_with_url(self, test_settings):
        settings = test_settings.model_copy(
            update={"database_type": "postgres", "postgres_url": "postgresql://u:p@localhost/voice"}
        )
        repo = DatabaseRepository.create_repository(settings)
        assert isinstance(repo.adapter, PostgresAdapter)

    def test_postgres_placeholders(self):
        assert PostgresAdapter._convert_placeholders(
            "SELECT * FROM voice_calls WHERE id = ? AND organization_id = ?"
        ) == "SELECT * FROM voice_calls WHERE id = $1 AND organization_id = $2"
