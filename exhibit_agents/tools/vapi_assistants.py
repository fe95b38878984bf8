"""Vapi assistants: tier-aware assistant payloads and create/update/delete calls."""

import json
import logging

import httpx

from ..config import VAPI_API_BASE, Settings
from ..errors import ConfigurationError, VendorSyncError
from ..models.schemas import (
    Agent,
    Capabilities,
    SyncResult,
    VapiAssistantPayload,
    VapiMessage,
    VapiMetadata,
    VapiModelConfig,
    VapiVoice,
)
from ..prompts.vapi_assistant import build_vapi_prompt
from .capabilities import resolve_tools
from .vendor_http import client_scope, response_body

logger = logging.getLogger(__name__)

VENDOR = "vapi"
MODEL_PROVIDER = "google"
MODEL_TEMPERATURE = 1.0  # Gemini 3 is tuned for 1.0
SILENCE_TIMEOUT_SECONDS = 8
MAX_DURATION_SECONDS = 15 * 60


def _voice(agent: Agent) -> VapiVoice:
    if agent.tier == 1:
        return VapiVoice(provider="vapi", voice_id=agent.voice, pace="normal", languages=["en", "es"])
    # Realtime tiers speak through the model's own audio output
    return VapiVoice(provider="google")


def build_vapi_assistant(
    agent: Agent,
    capabilities: Capabilities | None = None,
    settings: Settings | None = None,
) -> VapiAssistantPayload:
    """Assemble the Vapi assistant body. Pure; never fails."""
    settings = settings or Settings()

    model = VapiModelConfig(
        provider=MODEL_PROVIDER,
        model=settings.gemini_model,
        temperature=MODEL_TEMPERATURE,
        messages=[VapiMessage(role="system", content=build_vapi_prompt(agent))],
        modalities=["text", "audio"] if agent.tier >= 2 else None,
        tools=resolve_tools(
            agent.tier,
            capabilities,
            base_url=settings.app_url,
            secret=settings.tool_secret,
        ),
    )

    assistant = VapiAssistantPayload(
        name=agent.name,
        model=model,
        voice=_voice(agent),
        first_message=agent.first_message or f"Hello! I'm {agent.name}. {agent.bio or ''}".rstrip(),
        silence_timeout_seconds=SILENCE_TIMEOUT_SECONDS,
        max_duration_seconds=MAX_DURATION_SECONDS,
        metadata=VapiMetadata(
            organization_id=agent.organization_id,
            venue_id=agent.venue_id,
            agent_id=agent.id,
            tier=agent.tier,
        ),
    )

    # Webhooks only make sense once the app has a public URL
    if settings.app_url:
        assistant.server_url = f"{settings.app_url}/api/vapi/webhook"
        assistant.server_url_secret = settings.vapi_server_secret

    return assistant


class VapiAssistantSync:
    """Create-or-update dispatcher for Vapi assistants.

    One HTTP request per call; the store is never touched here.
    """

    def __init__(self, settings: Settings, client: httpx.AsyncClient | None = None):
        self.settings = settings
        self.client = client

    def _headers(self) -> dict[str, str]:
        if not self.settings.vapi_api_key:
            raise ConfigurationError("Vapi API key not configured")
        return {"Authorization": f"Bearer {self.settings.vapi_api_key}", "Content-Type": "application/json"}

    def _check_tool_callbacks(self, agent: Agent, capabilities: Capabilities | None) -> None:
        # Capability tools call back into the app and must carry an absolute URL and the shared secret
        tools = resolve_tools(agent.tier, capabilities)
        if len(tools) > 1 and not (self.settings.app_url and self.settings.tool_secret):
            raise ConfigurationError("App URL and tool secret must be configured for capability tools")

    async def sync(self, agent: Agent, capabilities: Capabilities | None = None) -> SyncResult:
        headers = self._headers()
        self._check_tool_callbacks(agent, capabilities)
        payload = build_vapi_assistant(agent, capabilities, self.settings).to_request()

        if agent.vapi_assistant_id:
            url = f"{VAPI_API_BASE}/assistant/{agent.vapi_assistant_id}"
            method = "PATCH"
        else:
            url = f"{VAPI_API_BASE}/assistant"
            method = "POST"

        tool_names = [t["function"]["name"] for t in payload["model"].get("tools", [])]
        logger.info("Vapi %s %s (tier %s, tools %s)", method, url, agent.tier, tool_names)
        logger.debug("Vapi payload: %s", json.dumps(payload, indent=2))

        try:
            async with client_scope(self.client) as http:
                resp = await http.request(method, url, headers=headers, json=payload)
        except httpx.TransportError as e:
            raise VendorSyncError(VENDOR, f"Could not reach Vapi: {e}") from e

        if not resp.is_success:
            body = response_body(resp)
            logger.error("Vapi %s failed: %s %s", method, resp.status_code, body)
            raise VendorSyncError(
                VENDOR,
                "Failed to sync with Vapi",
                status_code=resp.status_code,
                details=body,
            )

        if agent.vapi_assistant_id:
            return SyncResult(resource_id=agent.vapi_assistant_id, created=False)

        data = response_body(resp)
        assistant_id = data.get("id") if isinstance(data, dict) else None
        if not assistant_id:
            raise VendorSyncError(VENDOR, "No assistant ID returned from Vapi", details=data)
        logger.info("Vapi assistant created: %s", assistant_id)
        return SyncResult(resource_id=assistant_id, created=True)

    async def delete(self, vapi_assistant_id: str) -> bool:
        """Best-effort delete. Returns False instead of raising on vendor failure."""
        headers = self._headers()
        url = f"{VAPI_API_BASE}/assistant/{vapi_assistant_id}"
        try:
            async with client_scope(self.client) as http:
                resp = await http.delete(url, headers=headers)
        except httpx.HTTPError:
            logger.warning("Error deleting Vapi assistant %s", vapi_assistant_id, exc_info=True)
            return False
        if not resp.is_success:
            logger.warning("Failed to delete Vapi assistant %s: %s", vapi_assistant_id, resp.text)
            return False
        logger.info("Vapi assistant %s deleted", vapi_assistant_id)
        return True
