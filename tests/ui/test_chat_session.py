"""Tests for the client-side chat turn state machine."""

import asyncio
import threading
from typing import List, Optional

import pytest
import requests

from echora.models.chat import ExtractionResult
from echora.ui.api_client import ApiError, EchoraApiClient
from echora.ui.chat_session import (
    GENERIC_NOTICE,
    LOGIN_NOTICE,
    NETWORK_NOTICE,
    QUOTA_NOTICE,
    ChatSession,
    TurnInProgress,
    TurnState,
)


class FakeApi:
    """Records calls; each step can be told to fail."""

    def __init__(self):
        self.memories: List[str] = ["Has a dog named Max"]
        self.reply = "Hi! How are you today?"
        self.extraction = ExtractionResult.nothing()
        self.fail_on: Optional[str] = None
        self.error = ApiError("boom", status_code=503, error_code="completion_error")
        self.appended: List[str] = []
        self.echo_calls = []
        self.gate: Optional[threading.Event] = None

    def _maybe_fail(self, step: str):
        if self.fail_on == step:
            raise self.error

    def recent_memories(self, limit: int = 8) -> List[str]:
        self._maybe_fail("recent_memories")
        return self.memories[:limit]

    def echo(self, message: str, memories=None) -> str:
        if self.gate is not None:
            self.gate.wait(timeout=5)
        self._maybe_fail("echo")
        self.echo_calls.append((message, memories))
        return self.reply

    def extract_memory(self, message: str) -> ExtractionResult:
        self._maybe_fail("extract_memory")
        return self.extraction

    def append_memory(self, memory: str):
        self._maybe_fail("append_memory")
        self.appended.append(memory)
        return {"memory": memory}


@pytest.fixture
def api() -> FakeApi:
    return FakeApi()


@pytest.fixture
def states() -> List[TurnState]:
    return []


@pytest.fixture
def session(api: FakeApi, states: List[TurnState]) -> ChatSession:
    return ChatSession(api, memory_limit=8, on_state_change=states.append)


class TestSuccessfulTurn:
    """A turn that completes."""

    def test_reply_appended(self, session: ChatSession, api: FakeApi):
        reply = asyncio.run(session.send("Hello"))
        assert reply.text == "Hi! How are you today?"
        assert [(m.role, m.text) for m in session.messages] == [
            ("user", "Hello"),
            ("assistant", "Hi! How are you today?"),
        ]
        assert api.echo_calls == [("Hello", ["Has a dog named Max"])]

    def test_state_order(self, session: ChatSession, states: List[TurnState]):
        asyncio.run(session.send("Hello"))
        assert states == [
            TurnState.SENDING,
            TurnState.AWAITING_REPLY,
            TurnState.EXTRACTING_MEMORY,
            TurnState.IDLE,
        ]
        assert session.input_enabled

    def test_memory_written(self, session: ChatSession, api: FakeApi):
        api.extraction = ExtractionResult(should_write=True, memory="Enjoys hiking on weekends")
        asyncio.run(session.send("I love hiking on weekends"))
        assert api.appended == ["Enjoys hiking on weekends"]
        assert session.last_memory == "Enjoys hiking on weekends"

    def test_no_memory_written(self, session: ChatSession, api: FakeApi):
        asyncio.run(session.send("I'm tired"))
        assert api.appended == []
        assert session.last_memory is None

    def test_blank_input_ignored(self, session: ChatSession, states: List[TurnState]):
        assert asyncio.run(session.send("   ")) is None
        assert session.messages == []
        assert states == []

    def test_empty_reply_shows_fallback(self, session: ChatSession, api: FakeApi):
        api.reply = ""
        reply = asyncio.run(session.send("Hello"))
        assert reply.text == "ECHORA couldn't generate a response this time."


class TestFailedTurn:
    """Failures before the reply restore the transcript."""

    def test_reply_failure_rolls_back(self, session: ChatSession, api: FakeApi):
        asyncio.run(session.send("First"))
        before = list(session.messages)

        api.fail_on = "echo"
        assert asyncio.run(session.send("Second")) is None
        assert session.messages == before
        assert session.failed_input == "Second"
        assert session.notice == "boom"
        assert session.input_enabled

    def test_memory_fetch_failure_rolls_back(self, session: ChatSession, api: FakeApi):
        api.fail_on = "recent_memories"
        api.error = ApiError("Cannot connect to the ECHORA server.")
        asyncio.run(session.send("Hello"))
        assert session.messages == []
        assert session.notice == NETWORK_NOTICE

    def test_quota_notice(self, session: ChatSession, api: FakeApi):
        api.fail_on = "echo"
        api.error = ApiError("Rate limited", status_code=429, error_code="quota_exceeded")
        asyncio.run(session.send("Hello"))
        assert session.notice == QUOTA_NOTICE

    def test_auth_failure_requires_login(self, session: ChatSession, api: FakeApi):
        api.fail_on = "echo"
        api.error = ApiError("Please log in", status_code=401, error_code="auth_required", redirect="/login")
        asyncio.run(session.send("Hello"))
        assert session.needs_login
        assert session.notice == LOGIN_NOTICE
        assert not session.input_enabled

    def test_extraction_failure_keeps_reply(self, session: ChatSession, api: FakeApi):
        api.fail_on = "extract_memory"
        reply = asyncio.run(session.send("I love hiking"))
        assert reply is not None
        assert len(session.messages) == 2
        assert session.notice is None
        assert api.appended == []

    def test_append_failure_keeps_reply(self, session: ChatSession, api: FakeApi):
        api.extraction = ExtractionResult(should_write=True, memory="Enjoys hiking")
        api.fail_on = "append_memory"
        asyncio.run(session.send("I love hiking"))
        assert len(session.messages) == 2
        assert session.last_memory is None


class TestSingleTurnInFlight:
    """Only one turn may run at a time."""

    def test_second_send_rejected(self, session: ChatSession, api: FakeApi):
        api.gate = threading.Event()

        async def scenario():
            first = asyncio.create_task(session.send("First"))
            while session.state != TurnState.AWAITING_REPLY:
                await asyncio.sleep(0.01)
            assert session.busy
            assert not session.input_enabled
            with pytest.raises(TurnInProgress):
                await session.send("Second")
            with pytest.raises(TurnInProgress):
                session.reset()
            api.gate.set()
            return await first

        reply = asyncio.run(scenario())
        assert reply.text == "Hi! How are you today?"
        assert [m.text for m in session.messages] == ["First", "Hi! How are you today?"]

    def test_reset_clears_transcript(self, session: ChatSession):
        asyncio.run(session.send("Hello"))
        session.reset()
        assert session.messages == []


def http_response(status: int, content: bytes) -> requests.Response:
    response = requests.Response()
    response.status_code = status
    response._content = content
    return response


class ScriptedHttp:
    """Stands in for requests.Session; answers by URL path."""

    def __init__(self, outcomes: dict):
        self.outcomes = outcomes

    def request(self, method: str, url: str, **kwargs):
        outcome = self.outcomes[url.split("8000", 1)[1]]
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


class TestTransportFailures:
    """Broken connections and unreadable answers never escape a turn."""

    MEMORIES = http_response(200, b'{"memories": [], "count": 0}')

    def make_session(self, echo_outcome) -> ChatSession:
        http = ScriptedHttp({"/memory": self.MEMORIES, "/echo": echo_outcome})
        api = EchoraApiClient("http://backend:8000", token="tok", session=http)
        return ChatSession(api)

    def test_connection_dropped_mid_body(self):
        session = self.make_session(requests.exceptions.ChunkedEncodingError("connection reset"))
        assert asyncio.run(session.send("Hello")) is None
        assert session.messages == []
        assert session.notice == NETWORK_NOTICE
        assert session.failed_input == "Hello"
        assert session.state == TurnState.IDLE
        assert session.input_enabled

    @pytest.mark.parametrize("content", [b"<html>proxy error</html>", b"", b'["not", "an", "object"]'])
    def test_unreadable_reply_body(self, content: bytes):
        session = self.make_session(http_response(200, content))
        assert asyncio.run(session.send("Hello")) is None
        assert session.messages == []
        assert session.notice is not None
        assert session.input_enabled

    def test_unexpected_error_rolls_back(self, session: ChatSession, api: FakeApi):
        asyncio.run(session.send("First"))
        before = list(session.messages)

        api.fail_on = "echo"
        api.error = KeyError("reply")
        assert asyncio.run(session.send("Second")) is None
        assert session.messages == before
        assert session.notice == GENERIC_NOTICE
        assert not session.busy

    def test_unexpected_extraction_error_keeps_reply(self, session: ChatSession, api: FakeApi):
        api.fail_on = "extract_memory"
        api.error = TypeError("bad shape")
        assert asyncio.run(session.send("I love hiking")) is not None
        assert len(session.messages) == 2
        assert session.notice is None
