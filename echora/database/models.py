"""
Database Models - SQLAlchemy ORM models for persistent storage.

Tables:
- users / auth_sessions : local identity and login sessions
- echo_settings         : one personality record per user
- profiles              : per-user account data (own completion API key)
- conversation_memory   : append-only log of remembered facts
"""
import uuid
from datetime import datetime
from typing import Any, Dict

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import declarative_base

Base = declarative_base()


def _new_id() -> str:
    return str(uuid.uuid4())


class User(Base):
    """A registered account."""
    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=_new_id)
    email = Column(String(320), unique=True, nullable=False)
    password_hash = Column(String(255), nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary (never includes the password hash)."""
        return {
            "id": self.id,
            "email": self.email,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }


class AuthSession(Base):
    """
    A login session.

    The token is the bearer credential; a row past expires_at is treated
    exactly like a missing row.
    """
    __tablename__ = "auth_sessions"

    token = Column(String(128), primary_key=True)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    expires_at = Column(DateTime, nullable=False)


class EchoSettingsRecord(Base):
    """
    The user's Echo personality.

    user_id is unique: the database, not application code, guarantees at
    most one record per user. Every content column is nullable.
    """
    __tablename__ = "echo_settings"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String(36), unique=True, nullable=False)
    tones = Column(JSON, nullable=True)  # list of tone descriptors
    boundaries = Column(Text, nullable=True)
    base_prompt = Column(Text, nullable=True)
    safety_rules = Column(Text, nullable=True)
    default_reply_style = Column(Text, nullable=True)
    auto_reply_enabled = Column(Boolean, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)


class Profile(Base):
    """Per-user account data."""
    __tablename__ = "profiles"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String(36), unique=True, nullable=False)
    openai_api_key = Column(Text, nullable=True)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)


class MemoryFact(Base):
    """One remembered fact. Never updated or deleted by the application."""
    __tablename__ = "conversation_memory"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String(36), nullable=False)
    memory = Column(Text, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    __table_args__ = (
        Index("ix_conversation_memory_user_created", "user_id", "created_at"),
    )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "id": self.id,
            "user_id": self.user_id,
            "memory": self.memory,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
