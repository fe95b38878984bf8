"""Text chat with Gemini (exhibit test page)."""

from typing import Any

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from ..config import Settings, get_settings
from ..tools.llm import DEFAULT_TEMPERATURE, call_gemini

router = APIRouter(prefix="/chat", tags=["chat"])


class ChatRequest(BaseModel):
    messages: list[dict[str, Any]]
    model: str | None = None
    temperature: float = DEFAULT_TEMPERATURE


@router.post("/gemini")
async def gemini(req: ChatRequest, settings: Settings = Depends(get_settings)) -> dict:
    message = await call_gemini(req.messages, settings, model=req.model, temperature=req.temperature)
    return {"success": True, "message": message}
