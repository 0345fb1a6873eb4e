"""
Centralized logging configuration.

Every module logs through ``get_logger(__name__)``. ``setup_logging``
runs once at API startup and sends records to stdout and to a daily
file under the log directory.

Completion API keys and session tokens must never reach a log file in
full: a redaction filter on both handlers masks anything that looks
like one, and ``mask_secret`` is what code should use when it wants to
mention a key on purpose.
"""
import logging
import re
import sys
from datetime import datetime
from pathlib import Path
from typing import Optional, Union

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s:%(lineno)d | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Libraries that log every HTTP exchange
NOISY_LOGGERS = ("httpx", "httpcore", "groq", "urllib3", "watchdog")

_SECRET_PATTERNS = (
    re.compile(r"\b(gsk|sk)[-_][A-Za-z0-9_\-]{8,}"),
    re.compile(r"(?i)(bearer\s+)[A-Za-z0-9_\-\.]{12,}"),
)

_logging_configured = False


def mask_secret(value: Optional[str], visible: int = 4) -> str:
    """
    Mask a secret for logs and API responses.

    >>> mask_secret("gsk_abcdefgh1234")
    'gsk_…1234'
    """
    if not value:
        return ""
    if len(value) <= visible * 2:
        return "…" + value[-visible:]
    return f"{value[:visible]}…{value[-visible:]}"


def _redact(match: "re.Match") -> str:
    if match.lastindex and match.group(0).lower().startswith("bearer"):
        return match.group(1) + "…"
    return mask_secret(match.group(0))


class SecretRedactingFilter(logging.Filter):
    """Masks API keys and bearer tokens in the final log message."""

    def filter(self, record: logging.LogRecord) -> bool:
        message = record.getMessage()
        redacted = message
        for pattern in _SECRET_PATTERNS:
            redacted = pattern.sub(_redact, redacted)
        if redacted != message:
            record.msg = redacted
            record.args = None
        return True


def setup_logging(
    log_level: str = "INFO",
    log_dir: Optional[Union[str, Path]] = None
) -> logging.Logger:
    """
    Configure application-wide logging.

    Safe to call more than once; only the first call installs handlers.

    Args:
        log_level: Console verbosity (DEBUG, INFO, WARNING, ERROR, CRITICAL).
            The file always receives DEBUG and above.
        log_dir: Directory for log files. Defaults to 'logs/' in project root.

    Returns:
        The root logger
    """
    global _logging_configured

    root_logger = logging.getLogger()
    if _logging_configured:
        return root_logger

    log_dir = Path(log_dir) if log_dir else Path(__file__).parent.parent.parent / "logs"
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / f"echora_{datetime.now():%Y%m%d}.log"

    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT)
    redactor = SecretRedactingFilter()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(getattr(logging, log_level.upper(), logging.INFO))

    file_handler = logging.FileHandler(log_file, encoding="utf-8")
    file_handler.setLevel(logging.DEBUG)

    for handler in (console_handler, file_handler):
        handler.setFormatter(formatter)
        handler.addFilter(redactor)
        root_logger.addHandler(handler)
    root_logger.setLevel(logging.DEBUG)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    _logging_configured = True
    root_logger.debug(f"Logging configured: level={log_level}, file={log_file}")
    return root_logger


def get_logger(name: str) -> logging.Logger:
    """Logger for a module; pass ``__name__``."""
    return logging.getLogger(name)


class LoggerMixin:
    """
    Gives a class a ``self.logger`` named after the class.

    Example:
        >>> class SettingsStore(LoggerMixin):
        ...     def load(self):
        ...         self.logger.info("Loading...")
    """

    @property
    def logger(self) -> logging.Logger:
        return get_logger(self.__class__.__name__)
