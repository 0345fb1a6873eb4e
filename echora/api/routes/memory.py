"""
Memory Routes - the fact log and the extractor.

- GET  /memory         : recent facts, newest first
- POST /memory         : append a fact
- POST /memory/extract : ask the extractor whether a message holds one

Extraction always answers ``{"shouldWrite": ..., "memory": ...}``;
unusable model output is reported as shouldWrite=false.
"""
from fastapi import APIRouter, Depends, Query

from echora.auth.gate import require_user
from echora.core.exceptions import ValidationError
from echora.core.logging_config import get_logger
from echora.core.validators import validate_message
from echora.dependencies import get_chat_service, get_memory_store
from echora.memory.store import DEFAULT_RECALL_LIMIT, MemoryStore
from echora.models.auth import AuthUser
from echora.models.chat import (
    ErrorResponse,
    ExtractionResult,
    ExtractRequest,
    MemoryCreate,
    MemoryItem,
    MemoryListResponse,
)
from echora.services.chat_service import ChatService

logger = get_logger(__name__)

router = APIRouter(
    prefix="/memory",
    tags=["Memory"],
    responses={
        401: {"model": ErrorResponse, "description": "Not authenticated"},
        503: {"model": ErrorResponse, "description": "Store or completion API unavailable"},
    }
)


@router.get("", response_model=MemoryListResponse, summary="Recent memories")
def list_memories(
    limit: int = Query(default=DEFAULT_RECALL_LIMIT, ge=1, le=100, description="Maximum facts to return"),
    user: AuthUser = Depends(require_user),
    store: MemoryStore = Depends(get_memory_store),
) -> MemoryListResponse:
    memories = store.recent_memories(user.id, limit)
    return MemoryListResponse(memories=memories, count=len(memories))


@router.post("", response_model=MemoryItem, status_code=201, summary="Append a memory")
def append_memory(
    payload: MemoryCreate,
    user: AuthUser = Depends(require_user),
    store: MemoryStore = Depends(get_memory_store),
) -> MemoryItem:
    return store.append_memory(user.id, payload.memory)


@router.post(
    "/extract",
    response_model=ExtractionResult,
    summary="Extract a memory from a message",
    responses={429: {"model": ErrorResponse, "description": "Completion API quota exceeded"}},
)
def extract_memory(
    payload: ExtractRequest,
    user: AuthUser = Depends(require_user),
    service: ChatService = Depends(get_chat_service),
) -> ExtractionResult:
    """Classify the message; nothing is stored by this endpoint."""
    is_valid, message, error = validate_message(payload.message)
    if not is_valid:
        raise ValidationError(error, field="message")
    return service.extract(user, message)
