"""
Memory Store - the append-only log of facts about each user.

Facts are only ever inserted. Reads return the newest facts first so
the most recent ones are the ones replayed into the next prompt.
"""
from datetime import datetime
from typing import List

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError

from echora.core.exceptions import StoreError, ValidationError
from echora.core.logging_config import LoggerMixin
from echora.database.connection import DatabaseConnection
from echora.database.models import MemoryFact
from echora.models.chat import MemoryItem

DEFAULT_RECALL_LIMIT = 8


class MemoryStore(LoggerMixin):
    """
    Memory fact log bound to one database handle.

    Example:
        >>> store = MemoryStore(db)
        >>> store.append_memory("user-1", "Enjoys hiking on weekends")
        >>> store.recent_memories("user-1")
        ['Enjoys hiking on weekends']
    """

    def __init__(self, db: DatabaseConnection):
        self.db = db

    def append_memory(self, user_id: str, text: str) -> MemoryItem:
        """
        Insert a new fact. Duplicates of existing facts are allowed.

        Raises:
            ValidationError: If the text is blank
            StoreError: If the database cannot be written
        """
        text = (text or "").strip()
        if not text:
            raise ValidationError("Memory text cannot be empty", field="memory")

        try:
            with self.db.get_session() as session:
                fact = MemoryFact(user_id=user_id, memory=text, created_at=datetime.utcnow())
                session.add(fact)
                session.flush()
                item = MemoryItem.model_validate(fact)
        except SQLAlchemyError as e:
            self.logger.error(f"Could not append memory for user={user_id[:8]}: {e}")
            raise StoreError("Could not save the memory.", details=str(e)) from e

        self.logger.info(f"Appended memory id={item.id} for user={user_id[:8]}")
        return item

    def recent_memories(self, user_id: str, limit: int = DEFAULT_RECALL_LIMIT) -> List[str]:
        """
        Return up to ``limit`` facts, newest first.

        No facts is an empty list, not an error. Facts written in the
        same instant are ordered by insertion, newest first.

        Raises:
            StoreError: If the database cannot be read
        """
        if limit <= 0:
            return []

        try:
            with self.db.get_session() as session:
                rows = session.execute(
                    select(MemoryFact.memory)
                    .where(MemoryFact.user_id == user_id)
                    .order_by(MemoryFact.created_at.desc(), MemoryFact.id.desc())
                    .limit(limit)
                ).scalars().all()
        except SQLAlchemyError as e:
            self.logger.error(f"Could not load memories for user={user_id[:8]}: {e}")
            raise StoreError("Could not load your memories.", details=str(e)) from e

        return list(rows)

    def count_memories(self, user_id: str) -> int:
        """Total number of facts stored for a user."""
        try:
            with self.db.get_session() as session:
                return session.execute(
                    select(func.count(MemoryFact.id)).where(MemoryFact.user_id == user_id)
                ).scalar_one()
        except SQLAlchemyError as e:
            self.logger.error(f"Could not count memories for user={user_id[:8]}: {e}")
            raise StoreError("Could not load your memories.", details=str(e)) from e
