"""Per-vendor system prompt templates.

Usage:
    from ..prompts import render_prompt
    text = render_prompt(agent, "vapi")
"""

from collections.abc import Callable

from ..models.schemas import Agent, VoicePlatform
from .elevenlabs_agent import build_prompt
from .vapi_assistant import build_vapi_prompt

PROMPT_BUILDERS: dict[str, Callable[[Agent], str]] = {
    "elevenlabs": build_prompt,
    "vapi": build_vapi_prompt,
}


def render_prompt(agent: Agent, vendor: VoicePlatform) -> str:
    try:
        builder = PROMPT_BUILDERS[vendor]
    except KeyError:
        raise ValueError(f"Unknown vendor: {vendor}") from None
    return builder(agent)


__all__ = ["PROMPT_BUILDERS", "build_prompt", "build_vapi_prompt", "render_prompt"]
