"""
LLM module - Completion API integration.

This module handles all completion API interactions:
- Prompt construction
- API calls to Groq
- Response normalisation
- Error mapping for API failures
"""
from echora.llm.client import CompletionClient, extract_reply_text

__all__ = [
    "CompletionClient",
    "extract_reply_text",
]
