"""
ECHORA application package.

This package contains all application source code organized by responsibility:
- api/       : FastAPI routes and HTTP handling
- auth/      : Sign-up, login and the session gate
- core/      : Configuration, logging, and cross-cutting utilities
- services/  : Business logic and orchestration of a chat turn
- llm/       : Completion client and prompt text
- database/  : Database access, ORM models and the settings/profile stores
- memory/    : Memory fact extraction and the memory fact log
- models/    : Pydantic models for request/response schemas
- ui/        : Frontend-side API client and chat session state machine
"""

__version__ = "0.3.0"
