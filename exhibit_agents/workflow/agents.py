"""Agent lifecycle: save, vendor sync, publish/unpublish, recreate, delete.

Vendor dispatchers never touch the store; this module reads the agent,
calls the dispatcher, and writes the returned vendor ID back.

Failure policy:
- explicit sync, publish and recreate: a vendor failure aborts the whole
  operation and nothing is written, so a previously stored ID survives.
- save: the follow-up Vapi sync is best effort. The record is saved and
  the failure is only logged.
"""

import logging
from datetime import UTC, datetime
from typing import Any

import httpx

from .. import db
from ..config import Settings
from ..errors import ConfigurationError, NotFoundError, ValidationError, VendorSyncError
from ..models.schemas import Agent, Capabilities, VoicePlatform
from ..prompts import render_prompt
from ..tools.elevenlabs_agents import ElevenLabsAgentSync
from ..tools.vapi_assistants import VapiAssistantSync

logger = logging.getLogger(__name__)

# Only the lifecycle operations below may write these columns
PROTECTED_FIELDS = ("elevenlabs_agent_id", "vapi_assistant_id", "first_published_at", "status")


def load_agent(agent_id: str | None, *, with_venue: bool = True) -> Agent:
    if not agent_id:
        raise ValidationError("Agent ID is required")
    row = db.get_agent(agent_id, with_venue=with_venue)
    if not row:
        raise NotFoundError("Agent not found")
    return Agent.from_row(row)


def load_capabilities(agent: Agent) -> Capabilities | None:
    """Stored capabilities for tier-3 agents; all flags off when none are stored."""
    if agent.tier != 3:
        return None
    row = db.get_capabilities(agent.id)
    return Capabilities.model_validate(row) if row else Capabilities()


def _persist_vendor_id(agent: Agent, field: str, resource_id: str) -> Agent:
    if resource_id != getattr(agent, field):
        db.update_agent(agent.id, {field: resource_id})
    return agent.model_copy(update={field: resource_id})


# ---------------------------------------------------------------------------
# Explicit sync
# ---------------------------------------------------------------------------

async def sync_elevenlabs(agent_id: str | None, settings: Settings, client: httpx.AsyncClient | None = None) -> Agent:
    agent = load_agent(agent_id)
    result = await ElevenLabsAgentSync(settings, client).sync(agent)
    return _persist_vendor_id(agent, "elevenlabs_agent_id", result.resource_id)


async def sync_vapi(agent_id: str | None, settings: Settings, client: httpx.AsyncClient | None = None) -> Agent:
    agent = load_agent(agent_id)
    result = await VapiAssistantSync(settings, client).sync(agent, load_capabilities(agent))
    return _persist_vendor_id(agent, "vapi_assistant_id", result.resource_id)


async def recreate_elevenlabs(
    agent_id: str | None, settings: Settings, client: httpx.AsyncClient | None = None
) -> Agent:
    """Delete-then-create on ElevenLabs; always ends with a fresh agent ID."""
    agent = load_agent(agent_id)
    result = await ElevenLabsAgentSync(settings, client).recreate(agent)
    return _persist_vendor_id(agent, "elevenlabs_agent_id", result.resource_id)


# ---------------------------------------------------------------------------
# Publish / unpublish
# ---------------------------------------------------------------------------

async def publish_agent(
    agent_id: str | None,
    settings: Settings,
    client: httpx.AsyncClient | None = None,
    *,
    now: datetime | None = None,
) -> tuple[Agent, bool]:
    """Sync to the agent's voice platform, then mark it published.

    Returns the published agent and whether this was its first publish
    (first publishes are routed to billing by the UI).
    """
    agent = load_agent(agent_id)

    if agent.voice_platform == "vapi":
        field = "vapi_assistant_id"
        result = await VapiAssistantSync(settings, client).sync(agent, load_capabilities(agent))
    else:
        field = "elevenlabs_agent_id"
        result = await ElevenLabsAgentSync(settings, client).sync(agent)

    changes: dict[str, Any] = {"status": "published"}
    if result.resource_id != getattr(agent, field):
        changes[field] = result.resource_id

    first_publish = agent.first_published_at is None
    if first_publish:
        changes["first_published_at"] = now or datetime.now(UTC)

    db.update_agent(
        agent.id,
        {k: v.isoformat() if isinstance(v, datetime) else v for k, v in changes.items()},
    )
    logger.info("Agent %s published on %s (first publish: %s)", agent.id, agent.voice_platform, first_publish)
    return agent.model_copy(update=changes), first_publish


def unpublish_agent(agent_id: str | None) -> Agent:
    """Back to draft. Vendor resources and first_published_at are left alone."""
    agent = load_agent(agent_id)
    db.update_agent(agent.id, {"status": "draft"})
    return agent.model_copy(update={"status": "draft"})


# ---------------------------------------------------------------------------
# Save
# ---------------------------------------------------------------------------

async def save_agent(
    agent_id: str | None,
    agent_data: dict[str, Any],
    capabilities: Capabilities | None,
    settings: Settings,
    client: httpx.AsyncClient | None = None,
) -> Agent:
    """Insert or update an agent, store tier-3 capabilities, then best-effort Vapi sync."""
    data = {k: v for k, v in agent_data.items() if k not in PROTECTED_FIELDS}
    dropped = sorted(set(agent_data) - set(data))
    if dropped:
        logger.debug("Ignoring protected fields on save: %s", dropped)

    if agent_id:
        existing = db.get_agent(agent_id)
        if not existing:
            raise NotFoundError("Agent not found")
        if existing.get("slug") and "slug" in data and data["slug"] != existing["slug"]:
            raise ValidationError("Slug cannot be changed once set")
        row = db.update_agent(agent_id, data)
    else:
        row = db.insert_agent(data)

    agent = Agent.from_row(row)

    if agent.tier == 3 and capabilities is not None:
        db.upsert_capabilities(agent.id, capabilities.model_dump())

    if not settings.vapi_api_key:
        logger.info("Vapi API key not configured - skipping assistant sync")
        return agent

    if agent.tier == 3 and capabilities is None:
        capabilities = load_capabilities(agent)

    try:
        result = await VapiAssistantSync(settings, client).sync(agent, capabilities)
    except (ConfigurationError, VendorSyncError):
        logger.exception("Vapi sync failed for agent %s; saved without it", agent.id)
        return agent
    return _persist_vendor_id(agent, "vapi_assistant_id", result.resource_id)


# ---------------------------------------------------------------------------
# Delete / preview
# ---------------------------------------------------------------------------

async def delete_agent(agent_id: str | None, settings: Settings, client: httpx.AsyncClient | None = None) -> None:
    """Delete the record, then remove vendor-side resources best effort."""
    agent = load_agent(agent_id, with_venue=False)
    db.delete_agent(agent.id)
    logger.info("Agent %s deleted", agent.id)

    if agent.elevenlabs_agent_id:
        if settings.elevenlabs_api_key:
            await ElevenLabsAgentSync(settings, client).delete(agent.elevenlabs_agent_id)
        else:
            logger.warning("ElevenLabs key missing; leaving agent %s on the vendor", agent.elevenlabs_agent_id)
    if agent.vapi_assistant_id:
        if settings.vapi_api_key:
            await VapiAssistantSync(settings, client).delete(agent.vapi_assistant_id)
        else:
            logger.warning("Vapi key missing; leaving assistant %s on the vendor", agent.vapi_assistant_id)


def preview_prompt(agent_id: str | None, vendor: VoicePlatform) -> str:
    return render_prompt(load_agent(agent_id), vendor)
