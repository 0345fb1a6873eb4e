"""
FastAPI Application Entry Point.

``create_app()`` wires middleware, exception handlers and routers;
the module-level ``app`` is what uvicorn serves.

Run with: uvicorn echora.api.main:app --reload
"""
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from echora import __version__
from echora.api.routes import (
    account_router,
    auth_router,
    chat_router,
    health_router,
    memory_router,
    settings_router,
)
from echora.core.audit import AuditMiddleware, SecurityHeadersMiddleware
from echora.core.config import Settings, get_settings
from echora.core.exceptions import AuthRequired, EchoraException
from echora.core.logging_config import get_logger, setup_logging

settings = get_settings()
setup_logging(settings.log_level, settings.log_dir)
logger = get_logger(__name__)

ROUTERS = (
    health_router,
    auth_router,
    settings_router,
    account_router,
    memory_router,
    chat_router,
)

DESCRIPTION = """
Configure an AI version of yourself and talk to it.

- **Accounts**: sign-up, login, logout
- **Echo settings**: tone, boundaries, philosophy, safety rules, auto-reply
- **Chat**: replies shaped by your settings and by what your Echo remembers
- **Memory**: durable facts extracted from your messages
- **Bring your own key**: use your own completion API credits
"""


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create missing tables on startup; dispose of the pool on shutdown."""
    from echora.database import get_database, init_tables

    logger.info(
        f"Starting {settings.app_name} {__version__} ({settings.app_env}): "
        f"model={settings.llm_model}, extraction={settings.llm_extraction_model}, "
        f"server_key={'yes' if settings.groq_api_key else 'no'}"
    )
    try:
        init_tables(get_database())
    except Exception as e:
        logger.error(f"Failed to auto-init tables: {e}")

    yield

    logger.info(f"Shutting down {settings.app_name}")
    get_database().close()


def add_middleware(app: FastAPI, settings: Settings) -> None:
    # Last added is outermost: CORS (development), then audit, then security headers
    app.add_middleware(SecurityHeadersMiddleware)
    if settings.enable_audit_logging:
        app.add_middleware(AuditMiddleware)
    if settings.is_development():
        app.add_middleware(
            CORSMiddleware,
            allow_origins=["*"],
            allow_credentials=False,
            allow_methods=["*"],
            allow_headers=["*"],
        )
        logger.warning("CORS open to all origins (development)")


def add_exception_handlers(app: FastAPI, settings: Settings) -> None:
    """Render every error as ``{"error", "message", "details"}`` JSON."""

    @app.exception_handler(AuthRequired)
    async def auth_required_handler(request: Request, exc: AuthRequired):
        return JSONResponse(
            status_code=exc.status_code,
            content=exc.to_dict(),
            headers={"WWW-Authenticate": "Bearer"},
        )

    @app.exception_handler(EchoraException)
    async def echora_exception_handler(request: Request, exc: EchoraException):
        content = exc.to_dict()
        if not settings.is_development():
            content["details"] = None
        return JSONResponse(status_code=exc.status_code, content=content)

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.exception(f"Unhandled exception on {request.method} {request.url.path}: {exc}")
        return JSONResponse(
            status_code=500,
            content={
                "error": "internal_error",
                "message": "An unexpected error occurred",
                "details": str(exc) if settings.is_development() else None,
                "timestamp": datetime.now(timezone.utc).isoformat(),
            },
        )


def create_app(settings: Settings = settings) -> FastAPI:
    app = FastAPI(
        title="ECHORA API",
        description=DESCRIPTION,
        version=__version__,
        lifespan=lifespan,
    )
    add_middleware(app, settings)
    add_exception_handlers(app, settings)
    for router in ROUTERS:
        app.include_router(router)

    @app.get("/", include_in_schema=False)
    async def root():
        return {
            "message": "ECHORA API",
            "version": __version__,
            "documentation": "/docs",
            "health": "/health",
        }

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "echora.api.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.is_development(),
    )
