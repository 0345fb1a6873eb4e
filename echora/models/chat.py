"""
Request and Response models for the chat, echo and memory endpoints.

These Pydantic models define the contract between the frontend and the
server. The extraction result keeps the camelCase wire name
``shouldWrite`` through an alias.
"""
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


class EchoRequest(BaseModel):
    """
    Request model for POST /echo.

    Attributes:
        message: The user's message.
        memories: Facts the client already fetched; the server fetches
            the most recent ones itself when this is omitted.
    """
    message: str = Field(
        ...,
        min_length=1,
        max_length=2000,
        description="The user's message",
        examples=["I love hiking on weekends"]
    )
    memories: Optional[List[str]] = Field(
        default=None,
        description="Recent memory facts to use as context"
    )


class EchoResponse(BaseModel):
    """Response model for POST /echo."""
    reply: str
    timestamp: datetime = Field(default_factory=datetime.utcnow)


class ChatRequest(BaseModel):
    """Request model for POST /chat (a complete server-side turn)."""
    message: str = Field(..., min_length=1, max_length=2000)


class ChatResponse(BaseModel):
    """Response model for POST /chat."""
    reply: str
    memory_written: bool = False
    memory: Optional[str] = None
    timestamp: datetime = Field(default_factory=datetime.utcnow)


class ExtractRequest(BaseModel):
    """Request model for POST /memory/extract."""
    message: str = Field(..., min_length=1, max_length=2000)


class ExtractionResult(BaseModel):
    """
    The extractor's decision.

    should_write=False always comes with memory=None.
    """
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    should_write: bool = Field(default=False, alias="shouldWrite")
    memory: Optional[str] = None

    @model_validator(mode="before")
    @classmethod
    def _drop_memory_without_write(cls, data):
        if isinstance(data, dict):
            should_write = data.get("shouldWrite", data.get("should_write"))
            if should_write is not True:
                data = {**data, "memory": None}
        return data

    @classmethod
    def nothing(cls) -> "ExtractionResult":
        return cls(should_write=False, memory=None)


class MemoryCreate(BaseModel):
    """Request model for POST /memory."""
    memory: str = Field(..., min_length=1, max_length=500)


class MemoryItem(BaseModel):
    """One stored fact."""
    model_config = ConfigDict(from_attributes=True)

    id: int
    memory: str
    created_at: datetime


class MemoryListResponse(BaseModel):
    """Response model for GET /memory, newest first."""
    memories: List[str]
    count: int


class HealthResponse(BaseModel):
    """Response model for the /health endpoint."""
    status: str = Field(default="healthy")
    version: str
    timestamp: datetime = Field(default_factory=datetime.utcnow)


class ErrorResponse(BaseModel):
    """Standard error response model."""
    error: str
    message: str
    details: Optional[str] = None
    redirect: Optional[str] = None
    timestamp: datetime = Field(default_factory=datetime.utcnow)
