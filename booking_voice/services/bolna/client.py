"""
Bolna Voice AI Client
Thin async wrapper around the Bolna REST API: key validation, agent
provisioning, outbound calls and call status lookups
"""

import json
from typing import Optional, Dict, Any, List, Sequence

import httpx

from booking_voice.core.config import Settings
from booking_voice.core.logging import get_logger
from booking_voice.core.exceptions import (
    BolnaAPIError,
    BolnaConnectionError,
    BolnaResponseError,
)
from booking_voice.models.call import (
    ProviderCallHandle,
    ProviderCallStatus,
    coerce_duration,
)

logger = get_logger(__name__)

DEFAULT_VALIDATION_ENDPOINTS = ("/agent", "/agents", "/v1/agent", "/v1/agents")
DEFAULT_VOICE = "rachel"


def _first_present(data: Dict[str, Any], *keys: str) -> Any:
    for key in keys:
        value = data.get(key)
        if value not in (None, ""):
            return value
    return None


def _as_text(value: Any) -> Optional[str]:
    if value is None or value == "":
        return None
    if isinstance(value, (dict, list)):
        return json.dumps(value)
    return str(value)


def extract_error_message(body: Any, status_code: int) -> str:
    """Human-readable message from a Bolna error body"""
    if isinstance(body, dict):
        for key in ("detail", "message", "error"):
            value = body.get(key)
            if value in (None, ""):
                continue
            return value if isinstance(value, str) else json.dumps(value)
    elif isinstance(body, str) and body.strip():
        return body
    return f"Bolna API error: {status_code}"


class BolnaClient:
    """Client bound to a single organization's Bolna API key"""

    def __init__(
        self,
        api_key: str,
        base_url: str = "https://api.bolna.dev",
        timeout: float = 30.0,
        validation_timeout: float = 5.0,
        validation_endpoints: Optional[Sequence[str]] = None,
        webhook_url: Optional[str] = None,
        min_key_length: int = 10,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.validation_timeout = validation_timeout
        self.validation_endpoints: List[str] = list(
            validation_endpoints or DEFAULT_VALIDATION_ENDPOINTS
        )
        self.webhook_url = webhook_url
        self.min_key_length = min_key_length
        self._transport = transport

        self.headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json"
        }

    def _client(self, timeout: float) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.base_url,
            headers=self.headers,
            timeout=timeout,
            transport=self._transport
        )

    @staticmethod
    def _parse_body(response: httpx.Response) -> Any:
        try:
            return response.json()
        except ValueError:
            return {}

    async def _request(
        self,
        method: str,
        path: str,
        payload: Optional[Dict[str, Any]] = None
    ) -> Dict[str, Any]:
        """
        Send one request to Bolna

        Returns:
            Parsed JSON body ({} when the body is not a JSON object)

        Raises:
            BolnaAPIError: Bolna answered with a non-2xx status
            BolnaConnectionError: No response was received
        """
        try:
            async with self._client(self.timeout) as client:
                response = await client.request(method, path, json=payload)
        except httpx.RequestError as e:
            logger.error(f"Bolna {method} {path} failed: {type(e).__name__}")
            raise BolnaConnectionError() from e

        body = self._parse_body(response)

        if not response.is_success:
            message = extract_error_message(body, response.status_code)
            logger.warning(f"Bolna {method} {path} returned {response.status_code}: {message}")
            raise BolnaAPIError(
                message=message,
                provider_status=response.status_code,
                body=body
            )

        return body if isinstance(body, dict) else {}

    async def validate_key(self) -> bool:
        """
        Check whether Bolna accepts the API key

        Probes the candidate endpoints in order. 200 or 404 means the key was
        accepted, 401 or 403 means it was rejected. Other answers and network
        errors move on to the next endpoint; if none gives a verdict the key
        is accepted provisionally.
        """
        key = (self.api_key or "").strip()
        if len(key) < self.min_key_length:
            return False

        async with self._client(self.validation_timeout) as client:
            for endpoint in self.validation_endpoints:
                try:
                    response = await client.get(endpoint)
                except httpx.RequestError as e:
                    logger.debug(f"Key validation probe {endpoint} failed: {type(e).__name__}")
                    continue

                if response.status_code in (200, 404):
                    return True
                if response.status_code in (401, 403):
                    logger.info(f"Bolna rejected API key on {endpoint}")
                    return False
                logger.debug(f"Key validation probe {endpoint} returned {response.status_code}")

        logger.warning("Could not verify Bolna API key on any endpoint, accepting provisionally")
        return True

    def _agent_payload(
        self,
        name: str,
        welcome_message: str,
        instructions: str,
        language: str,
        voice_id: Optional[str]
    ) -> Dict[str, Any]:
        return {
            "agent_name": name,
            "agent_welcome_message": welcome_message,
            "agent_type": "other",
            "webhook_url": self.webhook_url,
            "tasks": [
                {
                    "task_type": "conversation",
                    "toolchain": {
                        "execution": "parallel",
                        "pipelines": [["transcriber", "llm", "synthesizer"]]
                    },
                    "tools_config": {
                        "llm_agent": {
                            "agent_flow_type": "streaming",
                            "provider": "openai",
                            "family": "openai",
                            "model": "gpt-4o-mini",
                            "max_tokens": 150,
                            "temperature": 0.7,
                            "request_json": True
                        },
                        "synthesizer": {
                            "provider": "elevenlabs",
                            "provider_config": {
                                "voice": voice_id or DEFAULT_VOICE,
                                "model": "eleven_multilingual_v2"
                            },
                            "stream": True
                        },
                        "transcriber": {
                            "provider": "deepgram",
                            "model": "nova-2",
                            "language": language,
                            "stream": True
                        },
                        "input": {"provider": "twilio", "format": "wav"},
                        "output": {"provider": "twilio", "format": "wav"}
                    }
                }
            ],
            "agent_prompts": {
                "task_1": {"system_prompt": instructions}
            }
        }

    async def create_agent(
        self,
        name: str,
        welcome_message: str,
        instructions: str,
        language: str = "en",
        voice_id: Optional[str] = None
    ) -> str:
        """
        Provision an agent on Bolna

        Returns:
            Bolna's id for the new agent
        """
        logger.info(f"Creating Bolna agent: {name}")
        body = await self._request(
            "POST",
            "/agent",
            self._agent_payload(name, welcome_message, instructions, language, voice_id)
        )

        nested = body.get("agent") if isinstance(body.get("agent"), dict) else {}
        agent_id = _first_present(body, "agent_id", "id") or nested.get("id")
        if not agent_id:
            raise BolnaResponseError("Bolna did not return an agent id", body=body)

        logger.info(f"Bolna agent created: {agent_id}")
        return str(agent_id)

    async def update_agent(
        self,
        external_id: str,
        name: Optional[str] = None,
        welcome_message: Optional[str] = None,
        instructions: Optional[str] = None
    ) -> Optional[Dict[str, Any]]:
        """Push changed agent fields to Bolna; no request when nothing changed"""
        payload: Dict[str, Any] = {}
        if name is not None:
            payload["agent_name"] = name
        if welcome_message is not None:
            payload["agent_welcome_message"] = welcome_message
        if instructions is not None:
            payload["agent_prompts"] = {"task_1": {"system_prompt": instructions}}

        if not payload:
            return None

        return await self._request("PUT", f"/agent/{external_id}", payload)

    async def delete_agent(self, external_id: str) -> None:
        await self._request("DELETE", f"/agent/{external_id}")
        logger.info(f"Bolna agent deleted: {external_id}")

    async def make_call(
        self,
        external_agent_id: str,
        recipient_phone: str,
        from_phone: Optional[str] = None
    ) -> ProviderCallHandle:
        """
        Ask Bolna to place an outbound call

        Returns:
            Handle carrying Bolna's call id, which may be None when the
            response did not include one
        """
        payload: Dict[str, Any] = {
            "agent_id": external_agent_id,
            "recipient_phone_number": recipient_phone
        }
        if from_phone:
            payload["from_phone_number"] = from_phone

        body = await self._request("POST", "/call", payload)
        call_id = _first_present(body, "call_id", "id", "execution_id")

        return ProviderCallHandle(
            call_id=str(call_id) if call_id is not None else None,
            raw=body
        )

    async def get_call_status(self, external_call_id: str) -> ProviderCallStatus:
        """Bolna's current view of a call"""
        body = await self._request("GET", f"/call/{external_call_id}")
        telephony = body.get("telephony_data") if isinstance(body.get("telephony_data"), dict) else {}

        duration = body.get("duration")
        if duration in (None, ""):
            duration = telephony.get("duration")
        if duration in (None, ""):
            duration = body.get("conversation_duration")

        return ProviderCallStatus(
            status=_as_text(body.get("status")),
            duration=coerce_duration(duration),
            recording_url=_as_text(body.get("recording_url") or telephony.get("recording_url")),
            transcript=_as_text(body.get("transcript")),
            raw=body
        )


class BolnaClientFactory:
    """Builds BolnaClient instances from application settings"""

    def __init__(self, settings: Settings, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.settings = settings
        self.transport = transport

    def __call__(self, api_key: str) -> BolnaClient:
        return BolnaClient(
            api_key=api_key,
            base_url=self.settings.bolna_api_base_url,
            timeout=self.settings.bolna_http_timeout,
            validation_timeout=self.settings.bolna_validation_timeout,
            validation_endpoints=self.settings.bolna_validation_endpoints,
            webhook_url=self.settings.bolna_webhook_url,
            min_key_length=self.settings.bolna_min_api_key_length,
            transport=self.transport
        )
