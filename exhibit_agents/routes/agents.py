"""Agent configuration endpoints: save, vendor sync, publish, recreate, delete."""

import logging
from typing import Any

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from ..config import Settings, get_settings
from ..models.schemas import Capabilities, VoicePlatform
from ..workflow import agents as workflow

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/agents", tags=["agents"])


class AgentIdRequest(BaseModel):
    agentId: str | None = None


class SaveAgentRequest(BaseModel):
    agentId: str | None = None
    agentData: dict[str, Any] = Field(default_factory=dict)
    capabilitiesData: Capabilities | None = None


@router.post("/save")
async def save(req: SaveAgentRequest, settings: Settings = Depends(get_settings)) -> dict:
    agent = await workflow.save_agent(req.agentId, req.agentData, req.capabilitiesData, settings)
    return {"success": True, "agent": agent.model_dump(mode="json")}


@router.post("/sync/elevenlabs")
async def sync_elevenlabs(req: AgentIdRequest, settings: Settings = Depends(get_settings)) -> dict:
    agent = await workflow.sync_elevenlabs(req.agentId, settings)
    return {
        "success": True,
        "elevenLabsAgentId": agent.elevenlabs_agent_id,
        "agent": agent.model_dump(mode="json"),
    }


@router.post("/sync/vapi")
async def sync_vapi(req: AgentIdRequest, settings: Settings = Depends(get_settings)) -> dict:
    agent = await workflow.sync_vapi(req.agentId, settings)
    return {
        "success": True,
        "vapiAssistantId": agent.vapi_assistant_id,
        "agent": agent.model_dump(mode="json"),
    }


@router.post("/publish")
async def publish(req: AgentIdRequest, settings: Settings = Depends(get_settings)) -> dict:
    agent, first_publish = await workflow.publish_agent(req.agentId, settings)
    return {"success": True, "requiresBilling": first_publish, "agent": agent.model_dump(mode="json")}


@router.post("/unpublish")
async def unpublish(req: AgentIdRequest) -> dict:
    agent = workflow.unpublish_agent(req.agentId)
    return {"success": True, "agent": agent.model_dump(mode="json")}


@router.post("/recreate-elevenlabs")
async def recreate_elevenlabs(req: AgentIdRequest, settings: Settings = Depends(get_settings)) -> dict:
    agent = await workflow.recreate_elevenlabs(req.agentId, settings)
    return {
        "success": True,
        "elevenLabsAgentId": agent.elevenlabs_agent_id,
        "message": "Agent recreated successfully with new system prompt",
    }


@router.get("/{agent_id}/prompt")
async def prompt_preview(agent_id: str, vendor: VoicePlatform = "elevenlabs") -> dict:
    """Render the system prompt a vendor would receive, without calling it."""
    return {"vendor": vendor, "prompt": workflow.preview_prompt(agent_id, vendor)}


@router.delete("/{agent_id}")
async def delete(agent_id: str, settings: Settings = Depends(get_settings)) -> dict:
    await workflow.delete_agent(agent_id, settings)
    return {"success": True}
