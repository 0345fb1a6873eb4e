"""
Settings Routes - the Echo personality record and the dashboard.

PUT /settings stores the full record it receives: fields the client
leaves out are cleared. GET /dashboard reports an unconfigured Echo as
a normal state.
"""
from fastapi import APIRouter, Depends

from echora.auth.gate import require_user
from echora.core.exceptions import NotFoundError
from echora.core.logging_config import get_logger
from echora.database.settings_store import SettingsStore
from echora.dependencies import get_chat_service, get_settings_store
from echora.models.auth import AuthUser
from echora.models.chat import ErrorResponse
from echora.models.settings import DashboardResponse, EchoSettings, EchoSettingsInput
from echora.services.chat_service import ChatService

logger = get_logger(__name__)

router = APIRouter(
    tags=["Settings"],
    responses={
        401: {"model": ErrorResponse, "description": "Not authenticated"},
        503: {"model": ErrorResponse, "description": "Could not load/save"},
    }
)


@router.get(
    "/settings",
    response_model=EchoSettings,
    summary="Load Echo settings",
    responses={404: {"model": ErrorResponse, "description": "Echo not configured yet"}},
)
def get_echo_settings(
    user: AuthUser = Depends(require_user),
    store: SettingsStore = Depends(get_settings_store),
) -> EchoSettings:
    """Return the user's settings; 404 means they have not saved any yet."""
    settings = store.load_settings(user.id)
    if settings is None:
        raise NotFoundError("No Echo settings found.")
    return settings


@router.put(
    "/settings",
    response_model=EchoSettings,
    summary="Save Echo settings",
)
def save_echo_settings(
    payload: EchoSettingsInput,
    user: AuthUser = Depends(require_user),
    store: SettingsStore = Depends(get_settings_store),
) -> EchoSettings:
    """Insert or replace the user's full settings record."""
    return store.save_settings(user.id, payload)


@router.get(
    "/dashboard",
    response_model=DashboardResponse,
    summary="Echo status",
)
def dashboard(
    user: AuthUser = Depends(require_user),
    service: ChatService = Depends(get_chat_service),
) -> DashboardResponse:
    """Summarize whether the Echo is configured and what it remembers."""
    return service.dashboard(user)
