"""
Input Validators - Sanitization and validation utilities.

This module provides input validation for user-supplied text:
- Chat message sanitization
- E-mail and password checks for sign-up
- Settings text field cleanup
"""
import re
from typing import List, Optional, Tuple

from echora.core.logging_config import get_logger

logger = get_logger(__name__)

MAX_MESSAGE_LENGTH = 2000
MIN_PASSWORD_LENGTH = 6

_EMAIL_REGEX = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def sanitize_message(message: str, max_length: int = MAX_MESSAGE_LENGTH) -> str:
    """
    Sanitize a user message.

    - Strips leading/trailing whitespace
    - Removes null bytes
    - Collapses runs of spaces and tabs (newlines are kept)
    - Limits length

    Args:
        message: Raw user message
        max_length: Maximum allowed length

    Returns:
        Sanitized message
    """
    if not message:
        return ""

    cleaned = message.replace("\x00", "")
    cleaned = re.sub(r"[ \t]+", " ", cleaned)
    cleaned = cleaned.strip()

    if len(cleaned) > max_length:
        cleaned = cleaned[:max_length]

    return cleaned


def validate_message(message: str) -> Tuple[bool, str, Optional[str]]:
    """
    Full validation and sanitization of a chat message.

    Args:
        message: Raw user message

    Returns:
        Tuple of (is_valid, sanitized_message, error_message)
    """
    if not message or not message.strip():
        return False, "", "Message cannot be empty"

    if len(message.strip()) > MAX_MESSAGE_LENGTH:
        return False, "", f"Message too long (max {MAX_MESSAGE_LENGTH} characters)"

    sanitized = sanitize_message(message)
    if not sanitized:
        return False, "", "Message cannot be empty after sanitization"

    return True, sanitized, None


def validate_email(email: str) -> Tuple[bool, str, Optional[str]]:
    """
    Normalize and validate an e-mail address.

    Returns:
        Tuple of (is_valid, normalized_email, error_message)
    """
    normalized = (email or "").strip().lower()
    if not normalized:
        return False, "", "Email is required"
    if not _EMAIL_REGEX.match(normalized):
        return False, normalized, "Email address is not valid"
    return True, normalized, None


def validate_password(password: str) -> Tuple[bool, Optional[str]]:
    """Check the minimum password policy."""
    if not password or len(password) < MIN_PASSWORD_LENGTH:
        return False, f"Password must be at least {MIN_PASSWORD_LENGTH} characters"
    return True, None


def clean_optional_text(value: Optional[str]) -> Optional[str]:
    """Strip a settings text field; blank becomes None."""
    if value is None:
        return None
    cleaned = value.replace("\x00", "").strip()
    return cleaned or None


def parse_tones(value) -> Optional[List[str]]:
    """
    Normalize tone descriptors.

    Accepts either a list of strings or a single comma-separated string
    (the settings form sends the latter). Empty input becomes None.

    >>> parse_tones("calm, direct,  kind")
    ['calm', 'direct', 'kind']
    """
    if value is None:
        return None
    if isinstance(value, str):
        parts = value.split(",")
    else:
        parts = [str(v) for v in value]
    tones = [p.strip() for p in parts if p and p.strip()]
    return tones or None
