"""
Configuration management via environment variables.

A .env file in the project root is loaded once at import time and the
values are read into an immutable Settings object by ``get_settings()``.

The completion API key is optional at startup: users may bring their
own key from the account page, so a missing server key only matters
when a request actually needs one.
"""
import os
import re
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv


PROJECT_ROOT = Path(__file__).parent.parent.parent
load_dotenv(PROJECT_ROOT / ".env")

# Name of the cookie carrying the login session token
SESSION_COOKIE = "echora_session"

DEFAULT_DATABASE_URL = "sqlite:///./echora.db"


@dataclass(frozen=True)
class Settings:
    """
    Runtime configuration, read from the environment by ``get_settings``.

    ``groq_api_key`` is the server-wide fallback key; per-user keys live
    in the profile store. ``memory_recall_limit`` caps how many recent
    facts are injected into each turn's system prompt.
    """
    app_name: str
    app_env: str
    log_level: str
    log_dir: Optional[str]

    database_url: str

    groq_api_key: Optional[str]
    llm_model: str
    llm_extraction_model: str
    llm_temperature: float
    llm_max_tokens: int
    llm_timeout_seconds: float

    memory_recall_limit: int
    session_ttl_minutes: int
    enable_audit_logging: bool

    def is_development(self) -> bool:
        return self.app_env.lower() == "development"

    def is_production(self) -> bool:
        return self.app_env.lower() == "production"


def _env(key: str, default: str) -> str:
    return os.environ.get(key, default)


def _env_optional(key: str) -> Optional[str]:
    """Blank values count as unset."""
    value = os.environ.get(key, "").strip()
    return value or None


def _env_number(key: str, default: str, cast):
    raw = _env(key, default)
    try:
        return cast(raw)
    except ValueError:
        raise ValueError(
            f"Environment variable '{key}' must be a {cast.__name__}, got {raw!r}. "
            f"Please check your .env file."
        )


def _env_flag(key: str, default: bool) -> bool:
    return _env(key, "true" if default else "false").strip().lower() in ("1", "true", "yes", "on")


def normalize_database_url(database_url: str) -> str:
    """
    Rewrite hosted-provider URLs into SQLAlchemy dialect URLs.

    Hosted Postgres providers hand out ``postgres://`` URLs and MySQL
    providers ``mysql://`` ones; SQLAlchemy wants an explicit dialect
    and driver. pymysql also rejects the ``ssl-mode`` query parameter.
    """
    scheme, sep, rest = database_url.partition("://")
    scheme = {"postgres": "postgresql", "mysql": "mysql+pymysql"}.get(scheme, scheme)
    database_url = f"{scheme}{sep}{rest}"

    if "ssl-mode=" in database_url:
        database_url = re.sub(r"[?&]ssl-mode=[^&]+", "", database_url)
        if "?" not in database_url and "&" in database_url:
            database_url = database_url.replace("&", "?", 1)

    return database_url


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Read settings from the environment once and cache them.

    Call ``get_settings.cache_clear()`` after changing the environment.

    Raises:
        ValueError: If a numeric variable cannot be parsed
    """
    return Settings(
        app_name=_env("APP_NAME", "ECHORA"),
        app_env=_env("APP_ENV", "development"),
        log_level=_env("LOG_LEVEL", "INFO"),
        log_dir=_env_optional("LOG_DIR"),

        database_url=normalize_database_url(_env("DATABASE_URL", DEFAULT_DATABASE_URL)),

        groq_api_key=_env_optional("GROQ_API_KEY"),
        llm_model=_env("LLM_MODEL", "llama-3.3-70b-versatile"),
        llm_extraction_model=_env("LLM_EXTRACTION_MODEL", "llama-3.1-8b-instant"),
        llm_temperature=_env_number("LLM_TEMPERATURE", "0.7", float),
        llm_max_tokens=_env_number("LLM_MAX_TOKENS", "1024", int),
        llm_timeout_seconds=_env_number("LLM_TIMEOUT_SECONDS", "60", float),

        memory_recall_limit=_env_number("MEMORY_RECALL_LIMIT", "8", int),
        # 7 days
        session_ttl_minutes=_env_number("SESSION_TTL_MINUTES", "10080", int),
        enable_audit_logging=_env_flag("ENABLE_AUDIT_LOGGING", True),
    )
