"""
Dependency providers for the API layer.

Each provider builds one collaborator from the ones it depends on, so
routes receive explicit store and client handles instead of reaching
for module-level singletons. Tests replace ``get_db`` and
``get_completion_client`` through ``app.dependency_overrides``.
"""
from typing import Optional

from fastapi import Depends

from echora.auth.provider import AuthProvider
from echora.core.config import Settings, get_settings
from echora.database.connection import DatabaseConnection, get_database
from echora.database.profile_store import ProfileStore
from echora.database.settings_store import SettingsStore
from echora.llm.client import CompletionClient
from echora.memory.extractor import MemoryExtractor
from echora.memory.store import MemoryStore
from echora.services.chat_service import ChatService

_completion_client: Optional[CompletionClient] = None


def get_app_settings() -> Settings:
    return get_settings()


def get_db() -> DatabaseConnection:
    return get_database()


def get_completion_client() -> CompletionClient:
    """Get or create the process-wide completion client."""
    global _completion_client
    if _completion_client is None:
        _completion_client = CompletionClient()
    return _completion_client


def get_auth_provider(
    db: DatabaseConnection = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
) -> AuthProvider:
    return AuthProvider(db, session_ttl_minutes=settings.session_ttl_minutes)


def get_settings_store(db: DatabaseConnection = Depends(get_db)) -> SettingsStore:
    return SettingsStore(db)


def get_profile_store(db: DatabaseConnection = Depends(get_db)) -> ProfileStore:
    return ProfileStore(db)


def get_memory_store(db: DatabaseConnection = Depends(get_db)) -> MemoryStore:
    return MemoryStore(db)


def get_memory_extractor(
    client: CompletionClient = Depends(get_completion_client),
    settings: Settings = Depends(get_app_settings),
) -> MemoryExtractor:
    return MemoryExtractor(client, settings)


def get_chat_service(
    settings_store: SettingsStore = Depends(get_settings_store),
    memory_store: MemoryStore = Depends(get_memory_store),
    profile_store: ProfileStore = Depends(get_profile_store),
    client: CompletionClient = Depends(get_completion_client),
    extractor: MemoryExtractor = Depends(get_memory_extractor),
    settings: Settings = Depends(get_app_settings),
) -> ChatService:
    return ChatService(
        settings_store=settings_store,
        memory_store=memory_store,
        profile_store=profile_store,
        completion_client=client,
        extractor=extractor,
        recall_limit=settings.memory_recall_limit,
    )


def reset_completion_client() -> None:
    """Drop the cached completion client (for testing)."""
    global _completion_client
    _completion_client = None
