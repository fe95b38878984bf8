"""ElevenLabs Conversational AI: agent payloads and create/update/delete calls.

Only the built-in `end_call` system tool is attached here; tier-3 business
tools are a Vapi-only feature.
"""

import json
import logging

import httpx

from ..config import ELEVENLABS_API_BASE, Settings
from ..errors import ConfigurationError, VendorSyncError
from ..models.schemas import (
    Agent,
    AllowlistEntry,
    ElevenLabsAgentConfig,
    ElevenLabsAgentPayload,
    ElevenLabsAuth,
    ElevenLabsConversationConfig,
    ElevenLabsPlatformSettings,
    ElevenLabsPrompt,
    ElevenLabsSystemTool,
    ElevenLabsTTS,
    SyncResult,
)
from ..prompts.elevenlabs_agent import build_prompt
from .vendor_http import client_scope, response_body

logger = logging.getLogger(__name__)

VENDOR = "elevenlabs"
DEFAULT_VOICE_ID = "21m00Tcm4TlvDq8ikWAM"  # Rachel
TTS_MODEL_ID = "eleven_multilingual_v2"
LANGUAGE = "en"

END_CALL_TOOL = ElevenLabsSystemTool(
    name="end_call",
    description=(
        "End the call when the user says goodbye, thanks you, or indicates they are done "
        "with the conversation. Also end when they say words like: bye, ciao, adios, see you, "
        "talk later, gotta go, have to go."
    ),
)

# Widget preview/testing from a local dev server
PREVIEW_ALLOWLIST = ["localhost:3000", "localhost", "127.0.0.1:3000", "127.0.0.1"]


def default_first_message(agent: Agent) -> str:
    return f"Hello! I'm {agent.name}. How can I help you today?"


def build_elevenlabs_payload(agent: Agent) -> ElevenLabsAgentPayload:
    """Assemble the create/update body for an agent. Pure; never fails."""
    return ElevenLabsAgentPayload(
        name=agent.name,
        conversation_config=ElevenLabsConversationConfig(
            agent=ElevenLabsAgentConfig(
                prompt=ElevenLabsPrompt(
                    prompt=build_prompt(agent),
                    tools=[END_CALL_TOOL.model_copy()],
                ),
                first_message=agent.welcome_message or default_first_message(agent),
                language=LANGUAGE,
            ),
            tts=ElevenLabsTTS(
                voice_id=agent.voice or DEFAULT_VOICE_ID,
                model_id=TTS_MODEL_ID,
                stability=agent.voice_settings.stability,
                similarity_boost=agent.voice_settings.similarity_boost,
            ),
        ),
        platform_settings=ElevenLabsPlatformSettings(
            auth=ElevenLabsAuth(
                enable_auth=False,
                allowlist=[AllowlistEntry(hostname=h) for h in PREVIEW_ALLOWLIST],
            ),
        ),
    )


class ElevenLabsAgentSync:
    """Create-or-update dispatcher for ElevenLabs agents.

    Issues exactly one HTTP request per call and never touches the store;
    persisting the returned ID is the caller's job.
    """

    def __init__(self, settings: Settings, client: httpx.AsyncClient | None = None):
        self.settings = settings
        self.client = client

    def _headers(self) -> dict[str, str]:
        if not self.settings.elevenlabs_api_key:
            raise ConfigurationError("ElevenLabs API key not configured")
        return {"xi-api-key": self.settings.elevenlabs_api_key, "Content-Type": "application/json"}

    async def sync(self, agent: Agent) -> SyncResult:
        headers = self._headers()
        payload = build_elevenlabs_payload(agent).to_request()
        prompt_len = len(payload["conversation_config"]["agent"]["prompt"]["prompt"])

        if agent.elevenlabs_agent_id:
            url = f"{ELEVENLABS_API_BASE}/convai/agents/{agent.elevenlabs_agent_id}"
            method = "PATCH"
        else:
            url = f"{ELEVENLABS_API_BASE}/convai/agents/create"
            method = "POST"

        logger.info("ElevenLabs %s %s (prompt length %d)", method, url, prompt_len)
        logger.debug("ElevenLabs payload: %s", json.dumps(payload, indent=2))

        try:
            async with client_scope(self.client) as http:
                resp = await http.request(method, url, headers=headers, json=payload)
        except httpx.TransportError as e:
            raise VendorSyncError(VENDOR, f"Could not reach ElevenLabs: {e}") from e

        if not resp.is_success:
            body = response_body(resp)
            logger.error("ElevenLabs %s failed: %s %s", method, resp.status_code, body)
            action = "update" if agent.elevenlabs_agent_id else "create"
            raise VendorSyncError(
                VENDOR,
                f"Failed to {action} ElevenLabs agent",
                status_code=resp.status_code,
                details=body,
            )

        if agent.elevenlabs_agent_id:
            return SyncResult(resource_id=agent.elevenlabs_agent_id, created=False)

        data = response_body(resp)
        agent_id = data.get("agent_id") if isinstance(data, dict) else None
        if not agent_id:
            raise VendorSyncError(VENDOR, "No agent_id in ElevenLabs response", details=resp.text)
        logger.info("ElevenLabs agent created: %s", agent_id)
        return SyncResult(resource_id=agent_id, created=True)

    async def delete(self, elevenlabs_agent_id: str) -> bool:
        """Best-effort delete. Returns False instead of raising on vendor failure."""
        headers = self._headers()
        url = f"{ELEVENLABS_API_BASE}/convai/agents/{elevenlabs_agent_id}"
        try:
            async with client_scope(self.client) as http:
                resp = await http.delete(url, headers=headers)
        except httpx.HTTPError:
            logger.warning("Error deleting ElevenLabs agent %s, continuing anyway", elevenlabs_agent_id, exc_info=True)
            return False
        if not resp.is_success:
            logger.warning(
                "Failed to delete ElevenLabs agent %s, continuing anyway: %s",
                elevenlabs_agent_id,
                resp.text,
            )
            return False
        logger.info("ElevenLabs agent %s deleted", elevenlabs_agent_id)
        return True

    async def recreate(self, agent: Agent) -> SyncResult:
        """Delete the existing vendor agent (if any) and create a fresh one."""
        if agent.elevenlabs_agent_id:
            await self.delete(agent.elevenlabs_agent_id)
        return await self.sync(agent.model_copy(update={"elevenlabs_agent_id": None}))
