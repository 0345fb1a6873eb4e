"""
Models module - Pydantic schemas for data validation.

This module defines:
- Request models: Input validation for API endpoints
- Response models: Output formatting for API responses
- Internal models: Data transfer objects between layers
"""
from echora.models.auth import (
    AuthUser,
    Credentials,
    LogoutResponse,
    SessionResponse,
    SignupResponse,
)
from echora.models.chat import (
    ChatRequest,
    ChatResponse,
    EchoRequest,
    EchoResponse,
    ErrorResponse,
    ExtractionResult,
    ExtractRequest,
    HealthResponse,
    MemoryCreate,
    MemoryItem,
    MemoryListResponse,
)
from echora.models.settings import (
    AccountResponse,
    ApiKeyInput,
    DashboardResponse,
    EchoSettings,
    EchoSettingsInput,
)

__all__ = [
    "AuthUser",
    "Credentials",
    "LogoutResponse",
    "SessionResponse",
    "SignupResponse",
    "ChatRequest",
    "ChatResponse",
    "EchoRequest",
    "EchoResponse",
    "ErrorResponse",
    "ExtractionResult",
    "ExtractRequest",
    "HealthResponse",
    "MemoryCreate",
    "MemoryItem",
    "MemoryListResponse",
    "AccountResponse",
    "ApiKeyInput",
    "DashboardResponse",
    "EchoSettings",
    "EchoSettingsInput",
]
