"""Shared fixtures: in-memory database, scripted completion API, API client."""

import os
import tempfile
from types import SimpleNamespace
from typing import Any, Dict, List, Optional

# Configure the environment before any echora module reads it
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["APP_ENV"] = "development"
os.environ["LOG_LEVEL"] = "WARNING"
os.environ["LOG_DIR"] = tempfile.mkdtemp(prefix="echora-test-logs-")
os.environ["GROQ_API_KEY"] = "gsk_server_test_key"
os.environ["ENABLE_AUDIT_LOGGING"] = "false"

import pytest
from fastapi.testclient import TestClient

from echora.core.config import Settings, get_settings
from echora.database import DatabaseConnection, init_tables
from echora.database.profile_store import ProfileStore
from echora.database.settings_store import SettingsStore
from echora.llm.client import CompletionClient
from echora.llm.prompts import MEMORY_EXTRACTION_SYSTEM_PROMPT
from echora.memory.extractor import MemoryExtractor
from echora.memory.store import MemoryStore
from echora.models.auth import AuthUser
from echora.services.chat_service import ChatService

NO_WRITE = '{"shouldWrite": false, "memory": null}'


def make_response(content: Optional[str]) -> Dict[str, Any]:
    """A chat-completions envelope carrying ``content``."""
    return {"choices": [{"index": 0, "message": {"role": "assistant", "content": content}}]}


class FakeCompletions:
    def __init__(self, owner: "FakeGroq"):
        self.owner = owner

    def create(self, **kwargs):
        self.owner.calls.append(kwargs)
        is_extraction = kwargs["messages"][0]["content"] == MEMORY_EXTRACTION_SYSTEM_PROMPT
        outcome = self.owner.extraction if is_extraction else self.owner.reply
        if isinstance(outcome, Exception):
            raise outcome
        if isinstance(outcome, dict):
            return outcome
        return make_response(outcome)


class FakeGroq:
    """
    Stand-in for the Groq SDK client.

    ``reply`` answers Echo prompts and ``extraction`` answers extraction
    prompts. Each may be a string, None (no content), a raw envelope
    dict, or an exception to raise.
    """

    def __init__(self):
        self.reply: Any = "Hello from your Echo."
        self.extraction: Any = NO_WRITE
        self.calls: List[Dict[str, Any]] = []
        self.api_keys: List[str] = []
        self.closed = 0
        self.chat = SimpleNamespace(completions=FakeCompletions(self))

    def factory(self, api_key: str, timeout: float, max_retries: int) -> "FakeGroq":
        self.api_keys.append(api_key)
        assert max_retries == 0
        return self

    def close(self) -> None:
        self.closed += 1

    @property
    def extraction_calls(self) -> List[Dict[str, Any]]:
        return [c for c in self.calls if c["messages"][0]["content"] == MEMORY_EXTRACTION_SYSTEM_PROMPT]

    @property
    def reply_calls(self) -> List[Dict[str, Any]]:
        return [c for c in self.calls if c["messages"][0]["content"] != MEMORY_EXTRACTION_SYSTEM_PROMPT]


@pytest.fixture
def settings() -> Settings:
    get_settings.cache_clear()
    return get_settings()


@pytest.fixture
def db() -> DatabaseConnection:
    """Fresh in-memory database with all tables."""
    database = DatabaseConnection("sqlite://")
    init_tables(database)
    yield database
    database.close()


@pytest.fixture
def fake_groq() -> FakeGroq:
    return FakeGroq()


@pytest.fixture
def completion_client(settings: Settings, fake_groq: FakeGroq) -> CompletionClient:
    return CompletionClient(settings, client_factory=fake_groq.factory)


@pytest.fixture
def settings_store(db: DatabaseConnection) -> SettingsStore:
    return SettingsStore(db)


@pytest.fixture
def memory_store(db: DatabaseConnection) -> MemoryStore:
    return MemoryStore(db)


@pytest.fixture
def profile_store(db: DatabaseConnection) -> ProfileStore:
    return ProfileStore(db)


@pytest.fixture
def extractor(completion_client: CompletionClient, settings: Settings) -> MemoryExtractor:
    return MemoryExtractor(completion_client, settings)


@pytest.fixture
def chat_service(
    settings_store: SettingsStore,
    memory_store: MemoryStore,
    profile_store: ProfileStore,
    completion_client: CompletionClient,
    extractor: MemoryExtractor,
) -> ChatService:
    return ChatService(
        settings_store=settings_store,
        memory_store=memory_store,
        profile_store=profile_store,
        completion_client=completion_client,
        extractor=extractor,
    )


@pytest.fixture
def user() -> AuthUser:
    return AuthUser(id="3f1c2a8e-0000-4000-8000-000000000001", email="owner@example.com")


@pytest.fixture
def client(db: DatabaseConnection, completion_client: CompletionClient) -> TestClient:
    """API client wired to the in-memory database and the fake completion API."""
    from echora.api.main import app
    from echora.dependencies import get_completion_client, get_db

    app.dependency_overrides[get_db] = lambda: db
    app.dependency_overrides[get_completion_client] = lambda: completion_client
    yield TestClient(app)
    app.dependency_overrides.clear()


def login(client: TestClient, email: str = "owner@example.com", password: str = "secret123") -> Dict[str, str]:
    """Sign up (if needed) and log in; returns bearer headers."""
    client.post("/auth/signup", json={"email": email, "password": password})
    response = client.post("/auth/login", json={"email": email, "password": password})
    assert response.status_code == 200, response.text
    return {"Authorization": f"Bearer {response.json()['token']}"}


@pytest.fixture
def auth_headers(client: TestClient) -> Dict[str, str]:
    return login(client)
