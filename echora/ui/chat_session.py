"""
Chat Session - the client-side state machine for one chat page.

A turn moves strictly through

    IDLE -> SENDING -> AWAITING_REPLY -> EXTRACTING_MEMORY -> IDLE

SENDING fetches recent memories, AWAITING_REPLY waits for the Echo's
reply, EXTRACTING_MEMORY asks the extractor about the user's message
and stores the fact if there is one. Only one turn may be in flight;
the transcript lives only in this object and is gone on reload.

A failure before the reply puts the transcript back exactly as it was
before the turn and sets an inline notice. A failure during extraction
keeps the reply and stores nothing.
"""
import asyncio
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Callable, List, Optional

from echora.core.logging_config import get_logger
from echora.llm.prompts import FALLBACK_REPLY
from echora.ui.api_client import ApiError, EchoraApiClient

logger = get_logger(__name__)

QUOTA_NOTICE = (
    "Your Echo has hit the completion API's rate or quota limit. "
    "Check your API key and billing on the Account page, then try again."
)
NETWORK_NOTICE = "Could not reach ECHORA. Check your connection and try again."
CONFIG_NOTICE = "The server has no completion API key. Add your own key on the Account page."
GENERIC_NOTICE = "Something went wrong talking to your Echo. Please try again."
LOGIN_NOTICE = "Your session has ended. Please log in again."


class TurnState(str, Enum):
    IDLE = "idle"
    SENDING = "sending"
    AWAITING_REPLY = "awaiting_reply"
    EXTRACTING_MEMORY = "extracting_memory"


class TurnInProgress(Exception):
    """Raised when a message is submitted while a turn is still running."""


@dataclass
class ChatMessage:
    role: str  # "user" or "assistant"
    text: str
    timestamp: datetime = field(default_factory=datetime.utcnow)


def notice_for(error: ApiError) -> str:
    """User-facing text for a failed turn."""
    if error.error_code == "quota_exceeded":
        return QUOTA_NOTICE
    if error.auth_required:
        return LOGIN_NOTICE
    if error.error_code == "config_error":
        return CONFIG_NOTICE
    if error.status_code == 0:
        return NETWORK_NOTICE
    return error.message or GENERIC_NOTICE


class ChatSession:
    """
    Drives chat turns against the backend.

    Example:
        >>> session = ChatSession(api)
        >>> await session.send("I love hiking on weekends")
        ChatMessage(role='assistant', text='...')
        >>> session.last_memory
        'Enjoys hiking on weekends'
    """

    def __init__(
        self,
        api: EchoraApiClient,
        memory_limit: int = 8,
        on_state_change: Optional[Callable[[TurnState], None]] = None,
    ):
        self.api = api
        self.memory_limit = memory_limit
        self.on_state_change = on_state_change

        self.state = TurnState.IDLE
        self.messages: List[ChatMessage] = []
        self.notice: Optional[str] = None
        self.needs_login = False
        self.failed_input: Optional[str] = None
        self.last_memory: Optional[str] = None
        self._in_flight = False

    @property
    def busy(self) -> bool:
        return self._in_flight

    @property
    def input_enabled(self) -> bool:
        """Input is accepted whenever no turn is in flight."""
        return not self._in_flight and not self.needs_login

    def _set_state(self, state: TurnState) -> None:
        self.state = state
        if self.on_state_change is not None:
            self.on_state_change(state)

    async def _call(self, fn, *args):
        # requests is blocking; keep the event loop free while it runs
        return await asyncio.to_thread(fn, *args)

    async def send(self, text: str) -> Optional[ChatMessage]:
        """
        Run one turn.

        Returns:
            The assistant message, or None if the input was blank or the
            turn failed before a reply (see ``notice``)

        Raises:
            TurnInProgress: A previous turn has not finished
        """
        text = (text or "").strip()
        if not text:
            return None
        if self._in_flight:
            raise TurnInProgress("Wait for your Echo to finish replying.")

        self._in_flight = True
        snapshot = list(self.messages)
        self.notice = None
        self.failed_input = None
        self.last_memory = None

        try:
            self.messages.append(ChatMessage(role="user", text=text))

            self._set_state(TurnState.SENDING)
            memories = await self._call(self.api.recent_memories, self.memory_limit)

            self._set_state(TurnState.AWAITING_REPLY)
            reply = await self._call(self.api.echo, text, memories)
            reply_message = ChatMessage(role="assistant", text=reply or FALLBACK_REPLY)
            self.messages.append(reply_message)

            self._set_state(TurnState.EXTRACTING_MEMORY)
            await self._remember(text)

            return reply_message

        except ApiError as e:
            logger.warning(f"Chat turn failed: {e.error_code} ({e.status_code})")
            self.messages = snapshot
            self.notice = notice_for(e)
            self.failed_input = text
            if e.auth_required:
                self.needs_login = True
            return None

        except Exception:
            logger.exception("Chat turn failed unexpectedly")
            self.messages = snapshot
            self.notice = GENERIC_NOTICE
            self.failed_input = text
            return None

        finally:
            self._in_flight = False
            self._set_state(TurnState.IDLE)

    async def _remember(self, text: str) -> None:
        try:
            result = await self._call(self.api.extract_memory, text)
            if result.should_write and result.memory:
                await self._call(self.api.append_memory, result.memory)
                self.last_memory = result.memory
        except ApiError as e:
            logger.info(f"Memory not stored this turn: {e.error_code}")
        except Exception:
            # The reply is already on screen; only the memory is lost
            logger.exception("Memory extraction failed unexpectedly")

    def reset(self) -> None:
        """Forget the transcript (a page reload does the same)."""
        if self._in_flight:
            raise TurnInProgress("Cannot clear the chat while a turn is running.")
        self.messages = []
        self.notice = None
        self.failed_input = None
        self.last_memory = None
