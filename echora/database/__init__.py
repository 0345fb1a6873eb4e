"""
Database module - relational store access layer.

This module handles:
- Database connection management
- ORM models
- Table creation
- The settings and profile stores
"""
from echora.database.connection import DatabaseConnection, get_database, reset_database
from echora.database.models import (
    AuthSession,
    Base,
    EchoSettingsRecord,
    MemoryFact,
    Profile,
    User,
)
from echora.database.init_db import init_tables, drop_tables
from echora.database.settings_store import SettingsStore
from echora.database.profile_store import ProfileStore

__all__ = [
    # Connection
    "DatabaseConnection",
    "get_database",
    "reset_database",
    # Models
    "AuthSession",
    "Base",
    "EchoSettingsRecord",
    "MemoryFact",
    "Profile",
    "User",
    # Init
    "init_tables",
    "drop_tables",
    # Stores
    "SettingsStore",
    "ProfileStore",
]
