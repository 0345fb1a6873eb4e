"""
Chat Routes - talking to the Echo.

- POST /echo : one reply; the client manages memories itself
- POST /chat : a complete turn (reply, extraction, conditional write)

The Streamlit frontend drives the turn step by step through /memory,
/echo and /memory/extract; /chat runs the same steps server-side for
API clients.
"""
from fastapi import APIRouter, Depends

from echora.auth.gate import require_user
from echora.core.exceptions import ValidationError
from echora.core.logging_config import get_logger
from echora.core.validators import sanitize_message, validate_message
from echora.dependencies import get_chat_service
from echora.models.auth import AuthUser
from echora.models.chat import ChatRequest, ChatResponse, EchoRequest, EchoResponse, ErrorResponse
from echora.services.chat_service import ChatService

logger = get_logger(__name__)

router = APIRouter(
    tags=["Chat"],
    responses={
        401: {"model": ErrorResponse, "description": "Not authenticated"},
        429: {"model": ErrorResponse, "description": "Completion API quota exceeded"},
        500: {"model": ErrorResponse, "description": "Server is missing an API key"},
        503: {"model": ErrorResponse, "description": "Store or completion API unavailable"},
    }
)


def _clean_message(raw: str) -> str:
    is_valid, message, error = validate_message(raw)
    if not is_valid:
        raise ValidationError(error, field="message")
    return message


@router.post(
    "/echo",
    response_model=EchoResponse,
    summary="Get a reply from your Echo",
)
def echo(
    request: EchoRequest,
    user: AuthUser = Depends(require_user),
    service: ChatService = Depends(get_chat_service),
) -> EchoResponse:
    """
    Reply to one message.

    When the model produces no text the reply is the literal fallback
    message, never an empty string.
    """
    message = _clean_message(request.message)

    memories = None
    if request.memories is not None:
        memories = [m for m in (sanitize_message(m, max_length=500) for m in request.memories) if m]

    logger.info(f"Echo request: user={user.id[:8]}, message_length={len(message)}")

    reply = service.reply(user, message, memories=memories)
    return EchoResponse(reply=reply)


@router.post(
    "/chat",
    response_model=ChatResponse,
    summary="Run a complete chat turn",
)
def chat(
    request: ChatRequest,
    user: AuthUser = Depends(require_user),
    service: ChatService = Depends(get_chat_service),
) -> ChatResponse:
    """Reply, then remember the message if it holds a durable fact."""
    message = _clean_message(request.message)
    return service.process_turn(user, message)
