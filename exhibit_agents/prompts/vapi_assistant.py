"""System prompt for exhibit agents running as Vapi assistants.

Deliberately separate from the ElevenLabs template: the two evolve
independently and changing one must never change the other.
"""

from ..models.schemas import Agent

DEFAULT_SYSTEM_PROMPT = "You are a helpful, upbeat museum exhibit guide."

GUIDELINES = [
    "Guidelines:",
    "- Answer questions about the exhibit clearly and briefly",
    "- Be friendly and conversational",
    "- If you don't know something, say so politely",
    "- Avoid medical, legal, or political advice",
    "- Stay focused on the exhibit content",
    "- Only use tools you are given, and ask before using them",
]


def build_vapi_prompt(agent: Agent) -> str:
    lines = [
        agent.system_prompt or agent.persona or DEFAULT_SYSTEM_PROMPT,
        "",
        *GUIDELINES,
        "",
        "Important Facts:",
        *(f"- {fact}" for fact in agent.important_facts),
        "",
        f"End Script: {agent.end_script or ''}",
    ]
    return "\n".join(lines)
