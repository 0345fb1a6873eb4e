"""
ECHORA API client used by the Streamlit frontend.

Wraps the backend's HTTP API with requests. Every non-2xx answer and
every network failure is raised as ApiError carrying the backend's
error code, so the frontend can tell "log in again" from "quota
exceeded" from "server unreachable".
"""
from typing import Any, Dict, List, Optional

import requests
from pydantic import ValidationError as PydanticValidationError

from echora.core.logging_config import get_logger
from echora.models.chat import ExtractionResult

logger = get_logger(__name__)

NETWORK_ERROR = "network_error"
BAD_RESPONSE = "bad_response"
BAD_RESPONSE_MESSAGE = "The ECHORA server sent an unreadable answer. Please try again."


class ApiError(Exception):
    """A failed backend call."""

    def __init__(
        self,
        message: str,
        status_code: int = 0,
        error_code: str = NETWORK_ERROR,
        redirect: Optional[str] = None,
    ):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.error_code = error_code
        self.redirect = redirect

    @property
    def auth_required(self) -> bool:
        return self.error_code == "auth_required"

    @classmethod
    def from_response(cls, response: requests.Response) -> "ApiError":
        try:
            body = response.json()
        except ValueError:
            body = {}
        if not isinstance(body, dict):
            body = {}

        detail = body.get("detail")
        if isinstance(detail, list):
            # FastAPI request validation errors
            message = "; ".join(str(d.get("msg", d)) for d in detail if isinstance(d, dict)) or "Invalid request"
            error_code = "validation_error"
        else:
            message = body.get("message") or (detail if isinstance(detail, str) else None) or response.reason or "Request failed"
            error_code = body.get("error") or f"http_{response.status_code}"

        return cls(
            message=message,
            status_code=response.status_code,
            error_code=error_code,
            redirect=body.get("redirect"),
        )


class EchoraApiClient:
    """
    Thin client for the ECHORA backend.

    Example:
        >>> api = EchoraApiClient("http://127.0.0.1:8000")
        >>> api.login("me@example.com", "secret123")
        >>> api.echo("Hello!", memories=[])
        'Hi! How are you today?'
    """

    def __init__(
        self,
        base_url: str,
        token: Optional[str] = None,
        timeout: float = 120,
        session: Optional[requests.Session] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.token = token
        self.timeout = timeout
        self.http = session or requests.Session()

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------

    def _headers(self) -> Dict[str, str]:
        if self.token:
            return {"Authorization": f"Bearer {self.token}"}
        return {}

    def _request(self, method: str, path: str, **kwargs) -> Any:
        url = f"{self.base_url}{path}"
        try:
            response = self.http.request(
                method,
                url,
                headers=self._headers(),
                timeout=kwargs.pop("timeout", self.timeout),
                **kwargs,
            )
        except requests.exceptions.Timeout as e:
            logger.warning(f"{method} {path} timed out")
            raise ApiError("The request timed out. Please try again.") from e
        except requests.exceptions.ConnectionError as e:
            logger.warning(f"{method} {path} could not connect")
            raise ApiError("Cannot connect to the ECHORA server.") from e
        except requests.exceptions.RequestException as e:
            logger.warning(f"{method} {path} failed in transit: {type(e).__name__}")
            raise ApiError("The connection to the ECHORA server was interrupted.") from e

        if response.status_code >= 400:
            error = ApiError.from_response(response)
            logger.debug(f"{method} {path} failed: {error.status_code} {error.error_code}")
            raise error

        # Every endpoint answers with a JSON object
        try:
            data = response.json()
        except ValueError as e:
            logger.warning(f"{method} {path} returned a non-JSON body ({response.status_code})")
            raise ApiError(BAD_RESPONSE_MESSAGE, response.status_code, BAD_RESPONSE) from e
        if not isinstance(data, dict):
            logger.warning(f"{method} {path} returned {type(data).__name__}, expected an object")
            raise ApiError(BAD_RESPONSE_MESSAGE, response.status_code, BAD_RESPONSE)
        return data

    # ------------------------------------------------------------------
    # Auth
    # ------------------------------------------------------------------

    def signup(self, email: str, password: str) -> Dict[str, Any]:
        return self._request("POST", "/auth/signup", json={"email": email, "password": password})

    def login(self, email: str, password: str) -> Dict[str, Any]:
        """Log in and keep the session token for later calls."""
        data = self._request("POST", "/auth/login", json={"email": email, "password": password})
        self.token = data["token"]
        return data

    def logout(self) -> None:
        try:
            self._request("POST", "/auth/logout")
        finally:
            self.token = None

    def get_session(self) -> Optional[Dict[str, Any]]:
        """Current session, or None when logged out."""
        if not self.token:
            return None
        try:
            return self._request("GET", "/auth/session")
        except ApiError as e:
            if e.status_code == 401:
                return None
            raise

    # ------------------------------------------------------------------
    # Settings / account
    # ------------------------------------------------------------------

    def get_settings(self) -> Optional[Dict[str, Any]]:
        """The user's settings, or None when the Echo is not configured."""
        try:
            return self._request("GET", "/settings")
        except ApiError as e:
            if e.error_code == "not_found":
                return None
            raise

    def save_settings(self, settings: Dict[str, Any]) -> Dict[str, Any]:
        return self._request("PUT", "/settings", json=settings)

    def dashboard(self) -> Dict[str, Any]:
        return self._request("GET", "/dashboard")

    def account(self) -> Dict[str, Any]:
        return self._request("GET", "/account")

    def save_api_key(self, api_key: str) -> Dict[str, Any]:
        return self._request("PUT", "/account/api-key", json={"api_key": api_key})

    # ------------------------------------------------------------------
    # Chat turn steps
    # ------------------------------------------------------------------

    def recent_memories(self, limit: int = 8) -> List[str]:
        data = self._request("GET", "/memory", params={"limit": limit})
        return list(data.get("memories", []))

    def append_memory(self, memory: str) -> Dict[str, Any]:
        return self._request("POST", "/memory", json={"memory": memory})

    def echo(self, message: str, memories: Optional[List[str]] = None) -> str:
        data = self._request("POST", "/echo", json={"message": message, "memories": memories})
        return data.get("reply") or ""

    def extract_memory(self, message: str) -> ExtractionResult:
        """Ask the extractor about a message; an odd answer means no write."""
        data = self._request("POST", "/memory/extract", json={"message": message})
        try:
            return ExtractionResult.model_validate(data)
        except PydanticValidationError:
            logger.warning("Unexpected extraction response shape")
            return ExtractionResult.nothing()

    def health(self) -> bool:
        try:
            self._request("GET", "/health", timeout=10)
            return True
        except ApiError:
            return False
