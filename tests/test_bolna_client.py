"""
Tests for the Bolna client
"""

import json

import httpx
import pytest

from booking_voice.core.exceptions import (
    BolnaAPIError,
    BolnaConnectionError,
    BolnaResponseError,
)
from booking_voice.services.bolna.client import (
    BolnaClient,
    BolnaClientFactory,
    extract_error_message,
)

API_KEY = "bn-test-key-1234567890"


def build_client(handler, **kwargs) -> BolnaClient:
    return BolnaClient(
        api_key=kwargs.pop("api_key", API_KEY),
        base_url="https://api.bolna.test",
        webhook_url=kwargs.pop("webhook_url", "https://hooks.example.com/bolna"),
        transport=httpx.MockTransport(handler),
        **kwargs
    )


class TestValidateKey:
    """Tests for key validation probes"""

    @pytest.mark.asyncio
    async def test_short_key_rejected_without_request(self):
        seen = []

        def handler(request):
            seen.append(request.url.path)
            return httpx.Response(200, json={})

        assert await build_client(handler, api_key="short").validate_key() is False
        assert await build_client(handler, api_key="   ").validate_key() is False
        assert seen == []

    @pytest.mark.asyncio
    async def test_200_accepts_on_first_endpoint(self):
        seen = []

        def handler(request):
            seen.append(request.url.path)
            assert request.headers["Authorization"] == f"Bearer {API_KEY}"
            return httpx.Response(200, json=[])

        assert await build_client(handler).validate_key() is True
        assert seen == ["/agent"]

    @pytest.mark.asyncio
    async def test_404_counts_as_authenticated(self):
        assert await build_client(lambda r: httpx.Response(404)).validate_key() is True

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status", [401, 403])
    async def test_auth_failure_rejects(self, status):
        assert await build_client(lambda r: httpx.Response(status)).validate_key() is False

    @pytest.mark.asyncio
    async def test_other_statuses_move_to_next_endpoint(self):
        seen = []

        def handler(request):
            seen.append(request.url.path)
            if request.url.path == "/v1/agent":
                return httpx.Response(401)
            return httpx.Response(500)

        assert await build_client(handler).validate_key() is False
        assert seen == ["/agent", "/agents", "/v1/agent"]

    @pytest.mark.asyncio
    async def test_unreachable_accepts_provisionally(self):
        seen = []

        def handler(request):
            seen.append(request.url.path)
            raise httpx.ConnectError("connection refused", request=request)

        assert await build_client(handler).validate_key() is True
        assert seen == ["/agent", "/agents", "/v1/agent", "/v1/agents"]


class TestAgents:
    """Tests for agent provisioning"""

    @pytest.mark.asyncio
    async def test_create_agent_payload(self):
        captured = {}

        def handler(request):
            captured["method"] = request.method
            captured["path"] = request.url.path
            captured["body"] = json.loads(request.content)
            return httpx.Response(200, json={"agent_id": "ag-1", "state": "created"})

        agent_id = await build_client(handler).create_agent(
            name="Reminder Bot",
            welcome_message="Hi!",
            instructions="Confirm appointment",
            language="hi"
        )

        assert agent_id == "ag-1"
        assert captured["method"] == "POST"
        assert captured["path"] == "/agent"

        body = captured["body"]
        assert body["agent_name"] == "Reminder Bot"
        assert body["agent_welcome_message"] == "Hi!"
        assert body["agent_type"] == "other"
        assert body["webhook_url"] == "https://hooks.example.com/bolna"
        assert body["agent_prompts"]["task_1"]["system_prompt"] == "Confirm appointment"

        task = body["tasks"][0]
        assert task["task_type"] == "conversation"
        assert task["toolchain"]["pipelines"] == [["transcriber", "llm", "synthesizer"]]
        tools = task["tools_config"]
        assert tools["llm_agent"]["model"] == "gpt-4o-mini"
        assert tools["synthesizer"]["provider_config"]["voice"] == "rachel"
        assert tools["transcriber"]["language"] == "hi"
        assert tools["input"] == {"provider": "twilio", "format": "wav"}

    @pytest.mark.asyncio
    @pytest.mark.parametrize("body,expected", [
        ({"id": "ag-2"}, "ag-2"),
        ({"agent": {"id": "ag-3"}}, "ag-3"),
    ])
    async def test_create_agent_id_fallbacks(self, body, expected):
        client = build_client(lambda r: httpx.Response(200, json=body))
        assert await client.create_agent("n", "w", "i") == expected

    @pytest.mark.asyncio
    async def test_create_agent_without_id(self):
        client = build_client(lambda r: httpx.Response(200, json={"state": "created"}))
        with pytest.raises(BolnaResponseError):
            await client.create_agent("n", "w", "i")

    @pytest.mark.asyncio
    async def test_update_agent_sends_only_given_fields(self):
        captured = {}

        def handler(request):
            captured["method"] = request.method
            captured["path"] = request.url.path
            captured["body"] = json.loads(request.content)
            return httpx.Response(200, json={})

        await build_client(handler).update_agent("ag-1", instructions="Be brief")

        assert captured["method"] == "PUT"
        assert captured["path"] == "/agent/ag-1"
        assert captured["body"] == {"agent_prompts": {"task_1": {"system_prompt": "Be brief"}}}

    @pytest.mark.asyncio
    async def test_update_agent_with_nothing_to_send(self):
        def handler(request):
            raise AssertionError("no request expected")

        assert await build_client(handler).update_agent("ag-1") is None

    @pytest.mark.asyncio
    async def test_delete_agent(self):
        seen = []

        def handler(request):
            seen.append((request.method, request.url.path))
            return httpx.Response(200, json={"state": "deleted"})

        await build_client(handler).delete_agent("ag-1")
        assert seen == [("DELETE", "/agent/ag-1")]


class TestCalls:
    """Tests for call placement and status lookups"""

    @pytest.mark.asyncio
    async def test_make_call(self):
        captured = {}

        def handler(request):
            captured["body"] = json.loads(request.content)
            return httpx.Response(200, json={"execution_id": "ex-9", "status": "queued"})

        handle = await build_client(handler).make_call("ag-1", "+919876543210", "+15550001111")

        assert handle.call_id == "ex-9"
        assert captured["body"] == {
            "agent_id": "ag-1",
            "recipient_phone_number": "+919876543210",
            "from_phone_number": "+15550001111"
        }

    @pytest.mark.asyncio
    async def test_make_call_without_id(self):
        handle = await build_client(lambda r: httpx.Response(200, json={})).make_call("ag-1", "+919876543210")
        assert handle.call_id is None

    @pytest.mark.asyncio
    async def test_get_call_status_top_level(self):
        body = {
            "status": "completed",
            "duration": 42.4,
            "recording_url": "https://rec.example.com/1.wav",
            "transcript": "hello"
        }
        status = await build_client(lambda r: httpx.Response(200, json=body)).get_call_status("c-1")

        assert status.status == "completed"
        assert status.duration == 42
        assert status.recording_url == "https://rec.example.com/1.wav"
        assert status.transcript == "hello"

    @pytest.mark.asyncio
    async def test_get_call_status_telephony_fallback(self):
        body = {
            "status": "in_progress",
            "telephony_data": {"duration": "17", "recording_url": "https://rec.example.com/2.wav"}
        }
        status = await build_client(lambda r: httpx.Response(200, json=body)).get_call_status("c-2")

        assert status.duration == 17
        assert status.recording_url == "https://rec.example.com/2.wav"

    @pytest.mark.asyncio
    async def test_get_call_status_conversation_duration(self):
        body = {"status": "completed", "conversation_duration": 8}
        status = await build_client(lambda r: httpx.Response(200, json=body)).get_call_status("c-3")
        assert status.duration == 8


class TestErrors:
    """Tests for error translation"""

    @pytest.mark.asyncio
    async def test_non_2xx_raises_api_error(self):
        client = build_client(lambda r: httpx.Response(422, json={"detail": "Invalid phone number"}))

        with pytest.raises(BolnaAPIError) as exc_info:
            await client.make_call("ag-1", "+919876543210")

        assert exc_info.value.message == "Invalid phone number"
        assert exc_info.value.provider_status == 422
        assert exc_info.value.body == {"detail": "Invalid phone number"}

    @pytest.mark.asyncio
    async def test_unparseable_error_body(self):
        client = build_client(lambda r: httpx.Response(500, text="<html>oops</html>"))

        with pytest.raises(BolnaAPIError) as exc_info:
            await client.get_call_status("c-1")

        assert exc_info.value.message == "Bolna API error: 500"
        assert exc_info.value.body == {}

    @pytest.mark.asyncio
    async def test_plain_string_error_body(self):
        client = build_client(lambda r: httpx.Response(400, json="Agent limit reached"))

        with pytest.raises(BolnaAPIError) as exc_info:
            await client.create_agent("n", "w", "i")

        assert exc_info.value.message == "Agent limit reached"
        assert exc_info.value.provider_status == 400

    @pytest.mark.asyncio
    async def test_network_error_raises_connection_error(self):
        def handler(request):
            raise httpx.ConnectTimeout("timed out", request=request)

        with pytest.raises(BolnaConnectionError):
            await build_client(handler).get_call_status("c-1")

    def test_extract_error_message_precedence(self):
        assert extract_error_message({"detail": "d", "message": "m", "error": "e"}, 400) == "d"
        assert extract_error_message({"message": "m", "error": "e"}, 400) == "m"
        assert extract_error_message({"error": "e"}, 400) == "e"
        assert extract_error_message({"detail": [{"loc": ["x"]}]}, 400) == '[{"loc": ["x"]}]'
        assert extract_error_message({}, 503) == "Bolna API error: 503"
        assert extract_error_message("Agent limit reached", 400) == "Agent limit reached"
        assert extract_error_message("   ", 502) == "Bolna API error: 502"


class TestClientFactory:

    def test_factory_uses_settings(self, test_settings):
        client = BolnaClientFactory(test_settings)("bn-key-from-vault")

        assert isinstance(client, BolnaClient)
        assert client.api_key == "bn-key-from-vault"
        assert client.base_url == "https://api.bolna.test"
        assert client.timeout == test_settings.bolna_http_timeout
        assert client.validation_timeout == test_settings.bolna_validation_timeout
        assert client.webhook_url == test_settings.bolna_webhook_url
