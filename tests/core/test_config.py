"""Tests for configuration loading and database URL handling."""

import pytest

from echora.core.config import get_settings, normalize_database_url


class TestNormalizeDatabaseUrl:
    """Tests for hosted-provider URL rewriting."""

    def test_postgres_scheme_rewritten(self):
        """postgres:// becomes postgresql://."""
        url = normalize_database_url("postgres://u:p@db.example.com:5432/echora")
        assert url == "postgresql://u:p@db.example.com:5432/echora"

    def test_mysql_gets_pymysql_driver(self):
        """mysql:// becomes mysql+pymysql://."""
        url = normalize_database_url("mysql://u:p@host/echora")
        assert url == "mysql+pymysql://u:p@host/echora"

    def test_ssl_mode_stripped_alone(self):
        """A lone ssl-mode parameter is removed with its '?'."""
        url = normalize_database_url("mysql://u:p@host/echora?ssl-mode=REQUIRED")
        assert url == "mysql+pymysql://u:p@host/echora"

    def test_ssl_mode_stripped_first_of_many(self):
        """Removing the first parameter promotes the next one to '?'."""
        url = normalize_database_url("mysql://u:p@host/echora?ssl-mode=REQUIRED&charset=utf8mb4")
        assert url == "mysql+pymysql://u:p@host/echora?charset=utf8mb4"

    def test_sqlite_untouched(self):
        """SQLite URLs pass through."""
        assert normalize_database_url("sqlite:///./echora.db") == "sqlite:///./echora.db"


class TestGetSettings:
    """Tests for environment-driven settings."""

    @pytest.fixture(autouse=True)
    def fresh_cache(self):
        get_settings.cache_clear()
        yield
        get_settings.cache_clear()

    def test_reads_environment(self):
        """Values set by the test environment are picked up."""
        settings = get_settings()
        assert settings.database_url == "sqlite://"
        assert settings.groq_api_key == "gsk_server_test_key"
        assert settings.enable_audit_logging is False
        assert settings.is_development()

    def test_defaults(self, monkeypatch: pytest.MonkeyPatch):
        """Unset variables fall back to defaults."""
        for key in ("LLM_MODEL", "MEMORY_RECALL_LIMIT", "SESSION_TTL_MINUTES", "LLM_TEMPERATURE"):
            monkeypatch.delenv(key, raising=False)
        settings = get_settings()
        assert settings.llm_model == "llama-3.3-70b-versatile"
        assert settings.memory_recall_limit == 8
        assert settings.session_ttl_minutes == 10080
        assert settings.llm_temperature == 0.7

    def test_blank_api_key_is_none(self, monkeypatch: pytest.MonkeyPatch):
        """A blank server key counts as unset."""
        monkeypatch.setenv("GROQ_API_KEY", "   ")
        assert get_settings().groq_api_key is None

    def test_settings_are_frozen(self):
        """Settings cannot be modified at runtime."""
        settings = get_settings()
        with pytest.raises(Exception):
            settings.app_env = "production"

    def test_production_flag(self, monkeypatch: pytest.MonkeyPatch):
        """APP_ENV=production is detected case-insensitively."""
        monkeypatch.setenv("APP_ENV", "Production")
        settings = get_settings()
        assert settings.is_production()
        assert not settings.is_development()

    def test_bad_number_names_variable(self, monkeypatch: pytest.MonkeyPatch):
        """An unparseable number reports which variable is wrong."""
        monkeypatch.setenv("MEMORY_RECALL_LIMIT", "lots")
        with pytest.raises(ValueError, match="MEMORY_RECALL_LIMIT"):
            get_settings()

    def test_audit_flag_variants(self, monkeypatch: pytest.MonkeyPatch):
        """'1', 'yes' and 'on' also enable a flag."""
        monkeypatch.setenv("ENABLE_AUDIT_LOGGING", "Yes")
        assert get_settings().enable_audit_logging is True
