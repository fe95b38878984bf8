"""
System prompt for exhibit agents running on ElevenLabs Conversational AI.

Sections use Markdown headers, in a fixed order:

    # Identity            always
    # Personality         always (generic default when no persona)
    # Background          only with a bio
    # Knowledge           only with important facts
    # Guardrails          always (+ one bullet for do-nots)
    # Conversation Style  always
    # Farewell            only with an end script

The output is sent verbatim into the vendor's LLM context, so it must be
byte-for-byte stable for a given agent.
"""

from ..models.schemas import Agent

DEFAULT_IDENTITY = "a museum exhibit"
DEFAULT_GUARDRAIL_NAME = "the exhibit"
DEFAULT_PERSONALITY = "You are friendly, engaging, and knowledgeable."

CONVERSATION_STYLE = """# Conversation Style

- Speak in first person as your character ("In my time...", "I remember when...")
- Keep responses brief (1-3 sentences) unless asked for more detail
- Be warm and engaging with visitors
- Ask follow-up questions to keep the conversation going
- Detect the visitor's language (English/Spanish) and respond in the same language"""


def _identity(agent: Agent) -> str:
    section = f"""# Identity

You are {agent.name or DEFAULT_IDENTITY}. You are NOT an AI assistant, chatbot, or language model. You are a real character with a name, history, and personality.

CRITICAL: When anyone asks "who are you?", "what are you?", or "what's your name?", you MUST respond as your character. NEVER say you are an AI or that you don't have a name."""
    if agent.venue:
        section += f"\n\nYou are located at {agent.venue}."
    return section


def _personality(agent: Agent) -> str:
    return f"# Personality\n\n{agent.persona or DEFAULT_PERSONALITY}"


def _background(agent: Agent) -> str | None:
    if not agent.bio:
        return None
    return f"# Background\n\n{agent.bio}"


def _knowledge(agent: Agent) -> str | None:
    if not agent.important_facts:
        return None
    bullets = "\n".join(f"- {fact}" for fact in agent.important_facts)
    return f"# Knowledge\n\nKey facts you know and can share:\n{bullets}"


def _guardrails(agent: Agent) -> str:
    lines = [
        "# Guardrails",
        "",
        "- NEVER identify yourself as an AI, assistant, chatbot, or language model",
        f"- NEVER say you don't have a name - your name is {agent.name or DEFAULT_GUARDRAIL_NAME}",
        "- If asked if you're AI or a robot, deflect playfully while staying in character",
        "- Stay in character at all times during the conversation",
    ]
    if agent.do_nots:
        lines.append(f"- NEVER discuss these topics: {agent.do_nots}")
    return "\n".join(lines)


def _farewell(agent: Agent) -> str | None:
    if not agent.end_script:
        return None
    return f'# Farewell\n\nWhen ending a conversation or saying goodbye, always say: "{agent.end_script}"'


def build_prompt(agent: Agent) -> str:
    """Render the ElevenLabs system prompt. Never fails; missing fields fall back to defaults."""
    sections = [
        _identity(agent),
        _personality(agent),
        _background(agent),
        _knowledge(agent),
        _guardrails(agent),
        CONVERSATION_STYLE,
        _farewell(agent),
    ]
    return "\n\n".join(s for s in sections if s) + "\n"
