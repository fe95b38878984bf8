"""Public visitor endpoint: resolve a QR-code slug to a published agent."""

import logging

from fastapi import APIRouter

from .. import db
from ..errors import NotFoundError, NotPublishedError, ValidationError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/visitor", tags=["visitor"])

BASE_LANGUAGES = ["English"]
REALTIME_LANGUAGES = ["English", "Spanish", "French", "German", "Italian", "Portuguese"]


def supported_languages(tier: int) -> list[str]:
    return list(REALTIME_LANGUAGES if tier >= 2 else BASE_LANGUAGES)


@router.get("/agent")
async def visitor_agent(publicId: str | None = None) -> dict:
    if not publicId:
        raise ValidationError("Agent public ID is required")

    agent = db.get_agent_by_slug(publicId)
    if not agent:
        logger.error("Agent not found with slug: %s", publicId)
        raise NotFoundError(f"Agent not found with slug: {publicId}")

    status = agent.get("status")
    if status != "published":
        logger.error("Agent %s found but not published. Status: %s", publicId, status)
        raise NotPublishedError(f"This agent is not published yet. Current status: {status}")

    tier = agent.get("tier") or 1
    return {
        "success": True,
        "agent": {
            "id": agent["id"],
            "name": agent.get("name"),
            "slug": agent.get("slug"),
            "bio": agent.get("bio"),
            "tier": tier,
            "venue": agent.get("venues"),
            "organization": agent.get("organizations"),
            "supportedLanguages": supported_languages(tier),
            "voice": agent.get("voice"),
            "voicePlatform": agent.get("voice_platform") or "elevenlabs",
            "elevenLabsAgentId": agent.get("elevenlabs_agent_id"),
            "vapiAssistantId": agent.get("vapi_assistant_id"),
            "firstMessage": agent.get("first_message") or agent.get("welcome_message"),
            "landing_spec": agent.get("landing_spec"),
        },
    }
