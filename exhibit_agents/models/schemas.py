"""Pydantic models for exhibit agents and the vendor payloads built from them."""

import json
from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

Tier = Literal[1, 2, 3]
VoicePlatform = Literal["elevenlabs", "vapi"]
AgentStatus = Literal["draft", "published"]


# --- Agent record (one row of the `agents` table) ---


class VoiceSettings(BaseModel):
    stability: float = 0.5
    similarity_boost: float = 0.75
    style: float = 0.0
    use_speaker_boost: bool = True


class Agent(BaseModel):
    """
    Configuration unit for one conversational exhibit.
    Unknown columns coming back from Supabase are ignored.
    """

    id: str | None = None
    name: str = ""
    slug: str | None = None
    tier: Tier = 1
    bio: str | None = None
    persona: str | None = None
    do_nots: str | None = None
    important_facts: list[str] = Field(default_factory=list)
    end_script: str | None = None
    welcome_message: str | None = None

    # Vapi overrides; the ElevenLabs template never reads these
    system_prompt: str | None = None
    first_message: str | None = None

    voice: str | None = None
    voice_label: str | None = None
    voice_settings: VoiceSettings = Field(default_factory=VoiceSettings)
    voice_platform: VoicePlatform = "elevenlabs"

    status: AgentStatus = "draft"
    first_published_at: datetime | None = None

    elevenlabs_agent_id: str | None = None
    vapi_assistant_id: str | None = None

    landing_spec: dict[str, Any] | None = None
    organization_id: str | None = None
    venue_id: str | None = None
    venue: str | None = None  # display name, joined from `venues`

    created_at: datetime | None = None
    updated_at: datetime | None = None

    @field_validator("name", mode="before")
    @classmethod
    def _name_or_empty(cls, v: Any) -> Any:
        return "" if v is None else v

    @field_validator("tier", mode="before")
    @classmethod
    def _tier_or_default(cls, v: Any) -> Any:
        return 1 if v is None else v

    @field_validator("important_facts", mode="before")
    @classmethod
    def _facts_or_empty(cls, v: Any) -> Any:
        return [] if v is None else v

    @field_validator("voice_settings", mode="before")
    @classmethod
    def _settings_or_default(cls, v: Any) -> Any:
        return {} if v is None else v

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "Agent":
        """Build from a Supabase row, flattening the `venues(display_name)` join."""
        data = dict(row)
        venues = data.pop("venues", None)
        if isinstance(venues, dict) and venues.get("display_name") and not data.get("venue"):
            data["venue"] = venues["display_name"]
        return cls.model_validate(data)


class Capabilities(BaseModel):
    """Tier-3 business capabilities (row of `agent_capabilities`)."""

    can_send_email: bool = False
    can_send_sms: bool = False
    can_take_orders: bool = False
    can_post_social: bool = False
    function_manifest: dict[str, Any] | None = None

    @field_validator("function_manifest", mode="before")
    @classmethod
    def _parse_manifest(cls, v: Any) -> Any:
        if isinstance(v, str):
            if not v.strip():
                return None
            try:
                return json.loads(v)
            except json.JSONDecodeError as e:
                raise ValueError(f"function_manifest is not valid JSON: {e.msg}") from e
        return v


# --- Function tools (Vapi function-call shape) ---


class ToolServer(BaseModel):
    url: str
    secret: str | None = None


class FunctionDefinition(BaseModel):
    name: str
    description: str
    parameters: dict[str, Any]


class FunctionTool(BaseModel):
    type: Literal["function"] = "function"
    function: FunctionDefinition
    server: ToolServer | None = None

    @property
    def name(self) -> str:
        return self.function.name


# --- ElevenLabs Conversational AI agent payload ---


class ElevenLabsSystemTool(BaseModel):
    type: Literal["system"] = "system"
    name: str
    description: str


class ElevenLabsPrompt(BaseModel):
    prompt: str
    tools: list[ElevenLabsSystemTool] = Field(default_factory=list)


class ElevenLabsAgentConfig(BaseModel):
    prompt: ElevenLabsPrompt
    # Agent level is where the ConvAI API documents it, not under prompt
    first_message: str | None = None
    language: str = "en"


class ElevenLabsTTS(BaseModel):
    voice_id: str
    model_id: str
    stability: float | None = None
    similarity_boost: float | None = None


class ElevenLabsConversationConfig(BaseModel):
    agent: ElevenLabsAgentConfig
    tts: ElevenLabsTTS


class AllowlistEntry(BaseModel):
    hostname: str


class ElevenLabsAuth(BaseModel):
    enable_auth: bool = False
    allowlist: list[AllowlistEntry] = Field(default_factory=list)


class ElevenLabsPlatformSettings(BaseModel):
    auth: ElevenLabsAuth


class ElevenLabsAgentPayload(BaseModel):
    name: str
    conversation_config: ElevenLabsConversationConfig
    platform_settings: ElevenLabsPlatformSettings

    def to_request(self) -> dict[str, Any]:
        return self.model_dump(exclude_none=True)


# --- Vapi assistant payload (camelCase on the wire) ---


class _VapiModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class VapiMessage(_VapiModel):
    role: str
    content: str


class VapiVoice(_VapiModel):
    provider: str
    voice_id: str | None = None
    pace: str | None = None
    languages: list[str] | None = None


class VapiModelConfig(_VapiModel):
    provider: str
    model: str
    temperature: float
    messages: list[VapiMessage]
    modalities: list[str] | None = None
    tools: list[FunctionTool] | None = None


class VapiMetadata(_VapiModel):
    organization_id: str | None = None
    venue_id: str | None = None
    agent_id: str | None = None
    tier: int


class VapiAssistantPayload(_VapiModel):
    name: str
    model: VapiModelConfig
    voice: VapiVoice
    first_message: str
    end_call_function_enabled: bool = True
    silence_timeout_seconds: int
    max_duration_seconds: int
    background_sound: str = "off"
    backchanneling_enabled: bool = True
    metadata: VapiMetadata
    server_url: str | None = None
    server_url_secret: str | None = None

    def to_request(self) -> dict[str, Any]:
        body = self.model_dump(by_alias=True, exclude_none=True)
        # Webhooks key on agentId, so it is sent even when null
        body["metadata"]["agentId"] = self.metadata.agent_id
        return body


# --- Sync outcome ---


class SyncResult(BaseModel):
    resource_id: str
    created: bool
