"""
Auth Routes - sign-up, login, logout and session lookup.

Login returns the session token in the body and also sets it as an
HttpOnly cookie, so both API clients and browsers can use it.
"""
from fastapi import APIRouter, Depends, Request, Response

from echora.auth.gate import SESSION_COOKIE, extract_token, require_session
from echora.auth.provider import AuthProvider
from echora.core.config import Settings
from echora.core.logging_config import get_logger
from echora.dependencies import get_app_settings, get_auth_provider
from echora.models.auth import Credentials, LogoutResponse, SessionResponse, SignupResponse
from echora.models.chat import ErrorResponse

logger = get_logger(__name__)

router = APIRouter(
    prefix="/auth",
    tags=["Auth"],
    responses={
        401: {"model": ErrorResponse, "description": "Not authenticated"},
    }
)


@router.post(
    "/signup",
    response_model=SignupResponse,
    status_code=201,
    summary="Create an account",
)
def signup(
    credentials: Credentials,
    provider: AuthProvider = Depends(get_auth_provider),
) -> SignupResponse:
    """Create an account; the user logs in afterwards."""
    user = provider.sign_up(credentials.email, credentials.password)
    return SignupResponse(user=user)


@router.post(
    "/login",
    response_model=SessionResponse,
    summary="Log in",
)
def login(
    credentials: Credentials,
    response: Response,
    provider: AuthProvider = Depends(get_auth_provider),
    settings: Settings = Depends(get_app_settings),
) -> SessionResponse:
    """Verify credentials and open a session."""
    session = provider.sign_in(credentials.email, credentials.password)
    response.set_cookie(
        key=SESSION_COOKIE,
        value=session.token,
        max_age=settings.session_ttl_minutes * 60,
        httponly=True,
        samesite="lax",
        secure=settings.is_production(),
    )
    return session


@router.post(
    "/logout",
    response_model=LogoutResponse,
    summary="Log out",
)
def logout(
    request: Request,
    response: Response,
    provider: AuthProvider = Depends(get_auth_provider),
) -> LogoutResponse:
    """End the current session. Logging out twice is harmless."""
    provider.sign_out(extract_token(request))
    response.delete_cookie(SESSION_COOKIE)
    return LogoutResponse()


@router.get(
    "/session",
    response_model=SessionResponse,
    summary="Current session",
)
async def current_session(session: SessionResponse = Depends(require_session)) -> SessionResponse:
    """Return the caller's session, or 401 when there is none."""
    return session
