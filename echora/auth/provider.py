"""
Auth Provider - local e-mail/password accounts and login sessions.

Passwords are stored as salted PBKDF2-SHA256 hashes. A login issues an
opaque random token backed by an auth_sessions row; the token is the
only credential the client holds.
"""
import base64
import hashlib
import hmac
import secrets
from datetime import datetime, timedelta
from typing import Optional

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from echora.core.exceptions import AuthError, StoreError, ValidationError
from echora.core.logging_config import LoggerMixin
from echora.core.validators import validate_email, validate_password
from echora.database.connection import DatabaseConnection
from echora.database.models import AuthSession, User
from echora.models.auth import AuthUser, SessionResponse

PBKDF2_ITERATIONS = 240_000
_ALGO = "pbkdf2_sha256"


def hash_password(password: str, iterations: int = PBKDF2_ITERATIONS) -> str:
    """Hash a password as ``pbkdf2_sha256$<iterations>$<salt>$<hash>``."""
    salt = secrets.token_bytes(16)
    digest = hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt, iterations)
    return "$".join([
        _ALGO,
        str(iterations),
        base64.b64encode(salt).decode("ascii"),
        base64.b64encode(digest).decode("ascii"),
    ])


def verify_password(password: str, encoded: str) -> bool:
    """Check a password against a stored hash."""
    try:
        algo, iterations, salt_b64, digest_b64 = encoded.split("$")
    except ValueError:
        return False
    if algo != _ALGO:
        return False
    salt = base64.b64decode(salt_b64)
    expected = base64.b64decode(digest_b64)
    digest = hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt, int(iterations))
    return hmac.compare_digest(digest, expected)


class AuthProvider(LoggerMixin):
    """
    Sign-up, sign-in, session lookup and sign-out.

    Example:
        >>> auth = AuthProvider(db, session_ttl_minutes=60)
        >>> auth.sign_up("me@example.com", "secret123")
        >>> session = auth.sign_in("me@example.com", "secret123")
        >>> auth.get_session(session.token).user.email
        'me@example.com'
    """

    def __init__(self, db: DatabaseConnection, session_ttl_minutes: int = 10080):
        self.db = db
        self.session_ttl = timedelta(minutes=session_ttl_minutes)

    def sign_up(self, email: str, password: str) -> AuthUser:
        """
        Create an account.

        Raises:
            ValidationError: Malformed e-mail or too-short password
            AuthError: The e-mail is already registered (409)
        """
        is_valid, email, error = validate_email(email)
        if not is_valid:
            raise ValidationError(error, field="email")
        is_valid, error = validate_password(password)
        if not is_valid:
            raise ValidationError(error, field="password")

        user = User(email=email, password_hash=hash_password(password))
        try:
            with self.db.get_session() as session:
                session.add(user)
                session.flush()
                auth_user = AuthUser(id=user.id, email=user.email)
        except IntegrityError as e:
            self.logger.info("Sign-up rejected: e-mail already registered")
            raise AuthError("An account with this email already exists.", status_code=409) from e
        except SQLAlchemyError as e:
            raise StoreError("Could not create your account.", details=str(e)) from e

        self.logger.info(f"Created account user={auth_user.id[:8]}")
        return auth_user

    def sign_in(self, email: str, password: str) -> SessionResponse:
        """
        Verify credentials and open a session.

        Raises:
            AuthError: Unknown e-mail or wrong password
        """
        _, email, _ = validate_email(email)
        try:
            with self.db.get_session() as session:
                user = session.execute(
                    select(User).where(User.email == email)
                ).scalar_one_or_none()

                if user is None or not verify_password(password or "", user.password_hash):
                    raise AuthError("Invalid email or password.")

                now = datetime.utcnow()
                purged = session.execute(
                    delete(AuthSession).where(AuthSession.expires_at <= now)
                ).rowcount
                auth_session = AuthSession(
                    token=secrets.token_urlsafe(32),
                    user_id=user.id,
                    created_at=now,
                    expires_at=now + self.session_ttl,
                )
                session.add(auth_session)
                result = SessionResponse(
                    token=auth_session.token,
                    user=AuthUser(id=user.id, email=user.email),
                    expires_at=auth_session.expires_at,
                )
        except SQLAlchemyError as e:
            raise StoreError("Could not sign you in.", details=str(e)) from e

        self.logger.info(f"Signed in user={result.user.id[:8]}")
        if purged:
            self.logger.debug(f"Purged {purged} expired session(s)")
        return result

    def get_session(self, token: Optional[str]) -> Optional[SessionResponse]:
        """
        Resolve a session token.

        Returns:
            The session, or None if the token is unknown or expired
        """
        if not token:
            return None
        try:
            with self.db.get_session() as session:
                row = session.execute(
                    select(AuthSession, User)
                    .join(User, User.id == AuthSession.user_id)
                    .where(AuthSession.token == token)
                ).first()
        except SQLAlchemyError as e:
            raise StoreError("Could not check your session.", details=str(e)) from e

        if row is None:
            return None

        auth_session, user = row
        if auth_session.expires_at <= datetime.utcnow():
            self.logger.debug(f"Expired session for user={user.id[:8]}")
            self._delete_session(token, "Could not check your session.")
            return None

        return SessionResponse(
            token=auth_session.token,
            user=AuthUser(id=user.id, email=user.email),
            expires_at=auth_session.expires_at,
        )

    def sign_out(self, token: Optional[str]) -> None:
        """Delete a session. Unknown tokens are ignored."""
        if not token:
            return
        self._delete_session(token, "Could not sign you out.")
        self.logger.info("Signed out a session")

    def _delete_session(self, token: str, failure_message: str) -> None:
        try:
            with self.db.get_session() as session:
                session.execute(delete(AuthSession).where(AuthSession.token == token))
        except SQLAlchemyError as e:
            raise StoreError(failure_message, details=str(e)) from e
