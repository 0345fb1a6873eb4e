"""
Echo Prompts - the system prompt that turns the completion model into
the user's Echo.

The context block is assembled in a fixed order:
1. Persona (default ECHORA voice plus the user's tones, philosophy,
   boundaries and reply style)
2. Safety rules
3. Memories about the user
"""
from typing import Optional, Sequence

from echora.models.settings import EchoSettings

FALLBACK_REPLY = "ECHORA couldn't generate a response this time."

DEFAULT_PERSONA = """You are ECHORA, a calm, direct, kind AI that echoes the user's style.

You are talking to the owner of this Echo."""

DEFAULT_SAFETY_RULES = """- Never give medical, legal or financial instructions as if you were a professional.
- If the user mentions self-harm or danger, respond with care and point them to local emergency help.
- Do not produce hateful, sexual or violent content.
- Be honest when you do not know something."""


def build_persona_block(settings: Optional[EchoSettings]) -> str:
    """
    Get the persona section of the system prompt.

    Args:
        settings: The user's saved settings, or None if unconfigured

    Returns:
        Persona instructions
    """
    if settings is None:
        return DEFAULT_PERSONA

    lines = [DEFAULT_PERSONA]
    if settings.tones:
        lines.append(f"Speak with this tone: {', '.join(settings.tones)}.")
    if settings.base_prompt:
        lines.append(f"Your philosophy and base personality:\n{settings.base_prompt}")
    if settings.boundaries:
        lines.append(f"Boundaries you must respect:\n{settings.boundaries}")
    if settings.default_reply_style:
        lines.append(f"Default reply style:\n{settings.default_reply_style}")

    return "\n\n".join(lines)


def build_safety_block(settings: Optional[EchoSettings]) -> str:
    """Get the safety section; the user's rules replace the defaults."""
    rules = settings.safety_rules if settings and settings.safety_rules else DEFAULT_SAFETY_RULES
    return f"Safety rules (always follow these):\n{rules}"


def build_memory_block(memories: Sequence[str]) -> str:
    """
    Get the memory section.

    With memories: an enumerated list and the instruction to use them
    only when relevant. Without: an explicit "none yet" statement that
    lets the Echo notice new stable facts.
    """
    facts = [m.strip() for m in memories if m and m.strip()]
    if facts:
        listing = "\n".join(f"{i + 1}. {fact}" for i, fact in enumerate(facts))
        return (
            "Memories about the user (most recent first):\n"
            f"{listing}\n\n"
            "Use these memories only when they are clearly relevant to the "
            "current message, and NEVER invent memories that are not listed."
        )

    return (
        "Memories about the user: none yet.\n\n"
        "You do not know anything about the user from earlier conversations. "
        "If they share stable facts about themselves (goals, preferences, "
        "important people), you may acknowledge them so they can be remembered."
    )


def build_context_block(
    settings: Optional[EchoSettings],
    memories: Sequence[str],
) -> str:
    """
    Get the complete system prompt for an Echo reply.

    Args:
        settings: The user's saved settings, or None
        memories: Recent facts, newest first

    Returns:
        Persona, safety rules and memories joined in that order
    """
    return "\n\n".join([
        build_persona_block(settings),
        build_safety_block(settings),
        build_memory_block(memories),
    ]).strip()
