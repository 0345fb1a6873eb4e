"""
Services module - Business logic and orchestration.

Services contain the core application logic:
- No HTTP concerns (those belong in api/)
- No queries (those belong in database/ and memory/)
- Orchestrate between the completion API, settings and memory stores
"""
from echora.services.chat_service import ChatService, RememberOutcome

__all__ = [
    "ChatService",
    "RememberOutcome",
]
