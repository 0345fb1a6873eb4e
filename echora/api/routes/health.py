"""
Health Check Routes - System health and monitoring endpoints.

- /health       : the API process is up
- /health/ready : the database answers as well
"""
from datetime import datetime

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from echora import __version__
from echora.core.logging_config import get_logger
from echora.database.connection import DatabaseConnection
from echora.dependencies import get_db
from echora.models.chat import HealthResponse

logger = get_logger(__name__)

router = APIRouter(
    prefix="/health",
    tags=["Health"],
)


@router.get(
    "",
    response_model=HealthResponse,
    summary="Health check endpoint",
)
async def health_check() -> HealthResponse:
    """Return 200 while the API is running."""
    logger.debug("Health check requested")

    return HealthResponse(
        status="healthy",
        version=__version__,
        timestamp=datetime.utcnow()
    )


@router.get(
    "/ready",
    response_model=HealthResponse,
    summary="Readiness check endpoint",
    responses={503: {"description": "Database unreachable"}},
)
def readiness_check(db: DatabaseConnection = Depends(get_db)):
    """Return 200 when the database answers, 503 otherwise."""
    logger.debug("Readiness check requested")

    if not db.check_connection():
        return JSONResponse(
            status_code=503,
            content={
                "status": "unavailable",
                "version": __version__,
                "timestamp": datetime.utcnow().isoformat(),
            },
        )

    return HealthResponse(
        status="ready",
        version=__version__,
        timestamp=datetime.utcnow()
    )
