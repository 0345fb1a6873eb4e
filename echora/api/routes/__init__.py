"""
API Routes module - Endpoint definitions.

Each file in this module defines routes for a specific domain:
- auth.py     : Sign-up, login, logout, session
- settings.py : Echo settings and dashboard
- account.py  : The user's own API key
- memory.py   : Memory facts and extraction
- chat.py     : Echo replies and complete turns
- health.py   : Health check endpoints
"""
from echora.api.routes.account import router as account_router
from echora.api.routes.auth import router as auth_router
from echora.api.routes.chat import router as chat_router
from echora.api.routes.health import router as health_router
from echora.api.routes.memory import router as memory_router
from echora.api.routes.settings import router as settings_router

__all__ = [
    "account_router",
    "auth_router",
    "chat_router",
    "health_router",
    "memory_router",
    "settings_router",
]
