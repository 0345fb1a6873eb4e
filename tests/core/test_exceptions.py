"""Tests for the error taxonomy."""

from echora.core.exceptions import (
    AuthError,
    AuthRequired,
    CompletionError,
    ConfigError,
    EchoraException,
    MalformedModelOutput,
    NotFoundError,
    QuotaExceeded,
    StoreError,
    TransportError,
    ValidationError,
)


class TestErrorCodes:
    """Each error carries a status and a stable error code."""

    def test_status_codes(self):
        assert ConfigError().status_code == 500
        assert AuthRequired().status_code == 401
        assert ValidationError("bad").status_code == 400
        assert NotFoundError().status_code == 404
        assert StoreError().status_code == 503
        assert CompletionError().status_code == 503
        assert QuotaExceeded().status_code == 429

    def test_transport_family(self):
        """Store and completion failures are both transport errors."""
        assert isinstance(StoreError(), TransportError)
        assert isinstance(CompletionError(), TransportError)
        assert not isinstance(QuotaExceeded(), TransportError)

    def test_auth_error_status_override(self):
        assert AuthError("Taken", status_code=409).status_code == 409


class TestToDict:
    """Tests for the JSON error body."""

    def test_base_shape(self):
        body = QuotaExceeded(details="429 from upstream").to_dict()
        assert body["error"] == "quota_exceeded"
        assert "API key" in body["message"]
        assert body["details"] == "429 from upstream"

    def test_auth_required_has_redirect(self):
        body = AuthRequired().to_dict()
        assert body["error"] == "auth_required"
        assert body["redirect"] == "/login"

    def test_validation_error_names_field(self):
        err = ValidationError("Message cannot be empty", field="message")
        assert err.field == "message"
        assert err.to_dict()["details"] == "field=message"


class TestMalformedModelOutput:
    """MalformedModelOutput keeps a truncated copy of the raw text."""

    def test_raw_truncated_in_details(self):
        err = MalformedModelOutput("bad", raw="x" * 500)
        assert err.raw == "x" * 500
        assert len(err.details) == 200
        assert isinstance(err, EchoraException)

    def test_no_raw(self):
        assert MalformedModelOutput("bad").details is None
