"""
Memory Package - facts about the user that outlive a conversation.

- extractor.py : decides whether a message holds a durable fact
- store.py     : append-only fact log, read newest first

Example:
    >>> from echora.memory import MemoryStore
    >>> store = MemoryStore(db)
    >>> store.recent_memories("user-123", limit=8)
    []
"""
from echora.memory.extractor import MemoryExtractor, decode_extraction, parse_extraction
from echora.memory.store import DEFAULT_RECALL_LIMIT, MemoryStore

__all__ = [
    "MemoryExtractor",
    "decode_extraction",
    "parse_extraction",
    "DEFAULT_RECALL_LIMIT",
    "MemoryStore",
]
