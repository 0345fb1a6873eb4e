"""
Prompts module - LLM prompt templates.

Prompts are stored as separate Python files so changes to the Echo's
voice or to the extraction contract are reviewed on their own.
"""
from echora.llm.prompts.echo_prompts import (
    DEFAULT_PERSONA,
    DEFAULT_SAFETY_RULES,
    FALLBACK_REPLY,
    build_context_block,
    build_memory_block,
    build_persona_block,
    build_safety_block,
)
from echora.llm.prompts.extraction_prompts import (
    MAX_MEMORY_LENGTH,
    MEMORY_EXTRACTION_SYSTEM_PROMPT,
)

__all__ = [
    "DEFAULT_PERSONA",
    "DEFAULT_SAFETY_RULES",
    "FALLBACK_REPLY",
    "build_context_block",
    "build_memory_block",
    "build_persona_block",
    "build_safety_block",
    "MAX_MEMORY_LENGTH",
    "MEMORY_EXTRACTION_SYSTEM_PROMPT",
]
