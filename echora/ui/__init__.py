"""
UI module - frontend-side helpers for streamlit_app.py.

- api_client.py   : requests-based client for the backend API
- chat_session.py : the chat turn state machine
"""
from echora.ui.api_client import ApiError, EchoraApiClient
from echora.ui.chat_session import ChatMessage, ChatSession, TurnInProgress, TurnState

__all__ = [
    "ApiError",
    "EchoraApiClient",
    "ChatMessage",
    "ChatSession",
    "TurnInProgress",
    "TurnState",
]
