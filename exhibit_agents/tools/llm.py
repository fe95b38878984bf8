"""Gemini chat client: reached through Google's OpenAI-compatible endpoint."""

import json
import logging
from typing import Any

from openai import APIConnectionError, APIStatusError, AsyncOpenAI

from ..config import GEMINI_OPENAI_BASE, Settings
from ..errors import ConfigurationError, VendorSyncError

logger = logging.getLogger(__name__)

DEFAULT_TEMPERATURE = 1.0

_clients: dict[str, AsyncOpenAI] = {}


def get_gemini_client(api_key: str) -> AsyncOpenAI:
    if api_key not in _clients:
        _clients[api_key] = AsyncOpenAI(base_url=GEMINI_OPENAI_BASE, api_key=api_key, timeout=120.0)
    return _clients[api_key]


def to_chat_messages(messages: list[dict[str, Any]]) -> list[dict[str, str]]:
    """Normalise UI chat history: assistant stays assistant, everything else is the user."""
    normalised = []
    for m in messages:
        role = "assistant" if m.get("role") == "assistant" else "user"
        content = m.get("content")
        text = content if isinstance(content, str) else json.dumps(content)
        normalised.append({"role": role, "content": text})
    return normalised


async def call_gemini(
    messages: list[dict[str, Any]],
    settings: Settings,
    *,
    model: str | None = None,
    temperature: float = DEFAULT_TEMPERATURE,
    client: AsyncOpenAI | None = None,
) -> str:
    """Call Gemini with a chat history. Returns the text content."""
    if not settings.gemini_api_key and client is None:
        raise ConfigurationError("Gemini API key not configured")

    client = client or get_gemini_client(settings.gemini_api_key)
    try:
        resp = await client.chat.completions.create(
            model=model or settings.gemini_model,
            messages=to_chat_messages(messages),
            temperature=temperature,
        )
    except APIStatusError as e:
        logger.error("Gemini API error: %s %s", e.status_code, e.message)
        raise VendorSyncError("gemini", "Failed to get AI response", status_code=e.status_code, details=e.message) from e
    except APIConnectionError as e:
        logger.error("Gemini unreachable: %s", e)
        raise VendorSyncError("gemini", "Could not reach Gemini") from e
    return resp.choices[0].message.content or ""
