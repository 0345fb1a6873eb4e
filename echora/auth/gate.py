"""
Session Gate - every settings, memory and chat endpoint depends on it.

The gate resolves the caller's session before any read or write. A
missing, unknown or expired session raises AuthRequired, which the API
renders as 401 with a redirect to the login view.
"""
from typing import Optional

from fastapi import Depends, Request

from echora.auth.provider import AuthProvider
from echora.core.config import SESSION_COOKIE
from echora.core.exceptions import AuthRequired
from echora.core.logging_config import get_logger
from echora.dependencies import get_auth_provider
from echora.models.auth import AuthUser, SessionResponse

logger = get_logger(__name__)


def extract_token(request: Request) -> Optional[str]:
    """Read the session token from the Authorization header or the cookie."""
    authorization = request.headers.get("Authorization", "")
    scheme, _, credentials = authorization.partition(" ")
    if scheme.lower() == "bearer" and credentials.strip():
        return credentials.strip()
    return request.cookies.get(SESSION_COOKIE) or None


def check_session(provider: AuthProvider, token: Optional[str]) -> SessionResponse:
    """
    Resolve a token or fail.

    Raises:
        AuthRequired: No valid session
    """
    session = provider.get_session(token)
    if session is None:
        logger.debug("Request rejected by session gate")
        raise AuthRequired()
    return session


def require_session(
    request: Request,
    provider: AuthProvider = Depends(get_auth_provider),
) -> SessionResponse:
    """FastAPI dependency returning the caller's session."""
    return check_session(provider, extract_token(request))


def require_user(session: SessionResponse = Depends(require_session)) -> AuthUser:
    """FastAPI dependency returning the caller's identity."""
    return session.user
