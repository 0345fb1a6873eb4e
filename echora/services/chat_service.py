"""
Chat Service - Business logic for a turn with the user's Echo.

This service orchestrates the turn:
1. Fetch the most recent memories about the user
2. Load the user's Echo settings and credentials
3. Call the completion API with persona + safety rules + memories
4. Return the reply
5. Ask the extractor whether the message holds a durable fact
6. Append the fact if it does

Every collaborator is passed in; the service holds no global state and
every call is scoped to the user it is given.
"""
from dataclasses import dataclass
from typing import List, Optional

from echora.core.exceptions import ConfigError, EchoraException, QuotaExceeded, TransportError
from echora.core.logging_config import get_logger
from echora.database.profile_store import ProfileStore
from echora.database.settings_store import SettingsStore
from echora.llm.client import CompletionClient
from echora.llm.prompts import build_context_block
from echora.memory.extractor import MemoryExtractor
from echora.memory.store import DEFAULT_RECALL_LIMIT, MemoryStore
from echora.models.auth import AuthUser
from echora.models.chat import ChatResponse, ExtractionResult
from echora.models.settings import DashboardResponse

logger = get_logger(__name__)


@dataclass
class RememberOutcome:
    """Result of the extraction step of a turn."""
    extraction: ExtractionResult
    written: bool = False


class ChatService:
    """
    Service for Echo replies and memory capture.

    Example:
        >>> service = ChatService(settings_store, memory_store, profile_store,
        ...                       completion_client, extractor)
        >>> result = service.process_turn(user, "I love hiking on weekends")
        >>> result.memory
        'Enjoys hiking on weekends'
    """

    def __init__(
        self,
        settings_store: SettingsStore,
        memory_store: MemoryStore,
        profile_store: ProfileStore,
        completion_client: CompletionClient,
        extractor: MemoryExtractor,
        recall_limit: int = DEFAULT_RECALL_LIMIT,
    ):
        self.settings_store = settings_store
        self.memory_store = memory_store
        self.profile_store = profile_store
        self.completion_client = completion_client
        self.extractor = extractor
        self.recall_limit = recall_limit

    def recent_memories(self, user: AuthUser, limit: Optional[int] = None) -> List[str]:
        """Newest facts for the user, at most ``limit`` (default recall limit)."""
        return self.memory_store.recent_memories(user.id, limit or self.recall_limit)

    def reply(
        self,
        user: AuthUser,
        message: str,
        memories: Optional[List[str]] = None,
    ) -> str:
        """
        Generate the Echo's reply to one message.

        Args:
            user: The authenticated user
            message: The sanitized user message
            memories: Facts already fetched by the client; fetched here
                when omitted

        Raises:
            ConfigError, QuotaExceeded, CompletionError, StoreError
        """
        if memories is None:
            memories = self.recent_memories(user)

        settings = self.settings_store.load_settings(user.id)
        api_key = self.profile_store.get_api_key(user.id)

        context_block = build_context_block(settings, memories[: self.recall_limit])

        logger.info(
            f"Generating reply: user={user.id[:8]}, "
            f"configured={settings is not None}, memories={len(memories)}, "
            f"own_key={bool(api_key)}"
        )

        return self.completion_client.generate_reply(message, context_block, api_key=api_key)

    def extract(self, user: AuthUser, message: str) -> ExtractionResult:
        """
        Run the extractor with the user's credentials.

        Raises:
            ConfigError, QuotaExceeded, CompletionError
        """
        api_key = self.profile_store.get_api_key(user.id)
        return self.extractor.extract(message, api_key=api_key)

    def remember(self, user: AuthUser, message: str) -> RememberOutcome:
        """
        Extract and store a fact from the message, if there is one.

        Never raises: a failed extraction or write means nothing is
        remembered this turn.
        """
        try:
            extraction = self.extract(user, message)
        except (TransportError, QuotaExceeded, ConfigError) as e:
            logger.warning(f"Memory extraction skipped for user={user.id[:8]}: {e.message}")
            return RememberOutcome(extraction=ExtractionResult.nothing())

        if not extraction.should_write or not extraction.memory:
            return RememberOutcome(extraction=extraction)

        try:
            self.memory_store.append_memory(user.id, extraction.memory)
        except EchoraException as e:
            logger.warning(f"Memory write failed for user={user.id[:8]}: {e.message}")
            return RememberOutcome(extraction=extraction, written=False)

        return RememberOutcome(extraction=extraction, written=True)

    def process_turn(self, user: AuthUser, message: str) -> ChatResponse:
        """
        Run a complete turn: memories, reply, extraction, conditional write.

        Errors before the reply propagate to the caller; errors after it
        only mean no fact was stored.
        """
        reply = self.reply(user, message)
        outcome = self.remember(user, message)

        logger.info(
            f"Turn processed: user={user.id[:8]}, reply_length={len(reply)}, "
            f"memory_written={outcome.written}"
        )

        return ChatResponse(
            reply=reply,
            memory_written=outcome.written,
            memory=outcome.extraction.memory if outcome.written else None,
        )

    def dashboard(self, user: AuthUser) -> DashboardResponse:
        """
        Summarize the user's Echo.

        A user without settings gets configured=False, not an error.
        """
        settings = self.settings_store.load_settings(user.id)
        has_api_key = self.profile_store.has_api_key(user.id)
        memory_count = self.memory_store.count_memories(user.id)

        if settings is None:
            return DashboardResponse(
                configured=False,
                has_api_key=has_api_key,
                memory_count=memory_count,
            )

        return DashboardResponse(
            configured=True,
            tones=settings.tones or [],
            auto_reply_enabled=bool(settings.auto_reply_enabled),
            has_api_key=has_api_key,
            memory_count=memory_count,
        )
