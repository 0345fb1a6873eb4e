"""
Custom Exceptions - Application-specific error classes.

Every error the application reports to a client derives from
EchoraException and carries a status code and an error code that the
API layer renders as JSON. MalformedModelOutput is the one internal
error: the memory extractor converts it into "nothing to remember" and
it never reaches a client.
"""
from typing import Optional


class EchoraException(Exception):
    """
    Base exception for all ECHORA errors.

    Subclass this for specific error types.
    """
    status_code: int = 500
    error_code: str = "internal_error"

    def __init__(self, message: str, details: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.details = details

    def to_dict(self) -> dict:
        """Convert to error response dict."""
        return {
            "error": self.error_code,
            "message": self.message,
            "details": self.details
        }


class ConfigError(EchoraException):
    """Raised when a required credential or setting is missing."""
    status_code = 500
    error_code = "config_error"

    def __init__(self, message: str = "Server is missing a completion API key."):
        super().__init__(message)


class AuthRequired(EchoraException):
    """Raised when a request has no valid login session."""
    status_code = 401
    error_code = "auth_required"

    def __init__(self, message: str = "Please log in to continue.", redirect: str = "/login"):
        super().__init__(message)
        self.redirect = redirect

    def to_dict(self) -> dict:
        data = super().to_dict()
        data["redirect"] = self.redirect
        return data


class AuthError(EchoraException):
    """Raised when sign-in or sign-up is rejected."""
    status_code = 401
    error_code = "auth_error"

    def __init__(self, message: str, status_code: int = 401):
        super().__init__(message)
        self.status_code = status_code


class ValidationError(EchoraException):
    """Raised when input validation fails."""
    status_code = 400
    error_code = "validation_error"

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message, details=f"field={field}" if field else None)
        self.field = field


class NotFoundError(EchoraException):
    """
    Raised when a row the client asked for does not exist.

    "No settings yet" is a normal state; this exception only exists so
    endpoints that return a single record can answer 404.
    """
    status_code = 404
    error_code = "not_found"

    def __init__(self, message: str = "Not found"):
        super().__init__(message)


class TransportError(EchoraException):
    """Base for failed calls to the database or the completion API."""
    status_code = 503
    error_code = "transport_error"


class StoreError(TransportError):
    """Raised when a database read or write fails."""
    error_code = "store_error"

    def __init__(self, message: str = "Could not reach the data store.", details: Optional[str] = None):
        super().__init__(message, details)


class CompletionError(TransportError):
    """Raised when the completion API call fails (connection, timeout, 5xx)."""
    error_code = "completion_error"

    def __init__(self, message: str = "Something went wrong talking to your Echo.", details: Optional[str] = None):
        super().__init__(message, details)


class QuotaExceeded(EchoraException):
    """Raised when the completion API rejects a call for rate or quota reasons."""
    status_code = 429
    error_code = "quota_exceeded"

    def __init__(
        self,
        message: str = (
            "Your Echo has hit the completion API's rate or quota limit. "
            "Check your API key and billing, then try again."
        ),
        details: Optional[str] = None
    ):
        super().__init__(message, details)


class MalformedModelOutput(EchoraException):
    """Raised internally when extraction output is not the expected JSON shape."""
    error_code = "malformed_model_output"

    def __init__(self, message: str, raw: Optional[str] = None):
        super().__init__(message, details=(raw or "")[:200] or None)
        self.raw = raw
