"""Tests for SettingsStore and the database layer under it."""

import pytest
from sqlalchemy import inspect, select

from echora.core.exceptions import StoreError
from echora.database import DatabaseConnection, init_tables
from echora.database.models import EchoSettingsRecord
from echora.database.settings_store import SettingsStore
from echora.models.settings import EchoSettingsInput

USER_A = "aaaaaaaa-0000-4000-8000-000000000001"
USER_B = "bbbbbbbb-0000-4000-8000-000000000002"


class TestDatabaseConnection:
    """Tests for connection setup and table creation."""

    def test_creates_all_tables(self, db: DatabaseConnection):
        """init_tables creates every ECHORA table."""
        tables = set(inspect(db.engine).get_table_names())
        assert {"users", "auth_sessions", "echo_settings", "profiles", "conversation_memory"} <= tables

    def test_init_tables_idempotent(self, db: DatabaseConnection):
        assert init_tables(db)
        assert init_tables(db)

    def test_check_connection(self, db: DatabaseConnection):
        assert db.check_connection()
        assert db.dialect == "sqlite"

    def test_session_rolls_back_on_error(self, db: DatabaseConnection):
        """A failed block leaves nothing behind."""
        with pytest.raises(RuntimeError):
            with db.get_session() as session:
                session.add(EchoSettingsRecord(user_id=USER_A, tones=["calm"]))
                session.flush()
                raise RuntimeError("boom")

        with db.get_session() as session:
            assert session.execute(select(EchoSettingsRecord)).first() is None


class TestLoadSettings:
    """Tests for load_settings."""

    def test_missing_row_is_none(self, settings_store: SettingsStore):
        """A new account has no settings; that is not an error."""
        assert settings_store.load_settings(USER_A) is None

    def test_store_failure_raises_store_error(self, settings_store: SettingsStore, db: DatabaseConnection):
        """A broken database surfaces as StoreError."""
        with db.engine.begin() as conn:
            conn.exec_driver_sql("DROP TABLE echo_settings")
        with pytest.raises(StoreError):
            settings_store.load_settings(USER_A)


class TestSaveSettings:
    """Tests for save_settings."""

    def test_round_trip(self, settings_store: SettingsStore):
        """Saved fields come back unchanged."""
        saved = settings_store.save_settings(
            USER_A,
            EchoSettingsInput(
                tones="calm, direct",
                boundaries="No politics",
                base_prompt="Growth over comfort",
                safety_rules="Be gentle",
                default_reply_style="Short paragraphs",
                auto_reply_enabled=True,
            ),
        )
        assert saved.user_id == USER_A
        assert saved.tones == ["calm", "direct"]
        assert saved.auto_reply_enabled is True

        loaded = settings_store.load_settings(USER_A)
        assert loaded.boundaries == "No politics"
        assert loaded.base_prompt == "Growth over comfort"
        assert loaded.default_reply_style == "Short paragraphs"
        assert loaded.updated_at is not None

    def test_second_save_replaces_whole_record(self, settings_store: SettingsStore):
        """Fields left out of a later save are stored as null."""
        settings_store.save_settings(
            USER_A,
            EchoSettingsInput(tones=["calm"], boundaries="No politics", auto_reply_enabled=True),
        )
        settings_store.save_settings(USER_A, EchoSettingsInput(tones=["playful"]))

        loaded = settings_store.load_settings(USER_A)
        assert loaded.tones == ["playful"]
        assert loaded.boundaries is None
        assert loaded.auto_reply_enabled is None

    def test_one_row_per_user(self, settings_store: SettingsStore, db: DatabaseConnection):
        """Repeated saves never create a second row."""
        for tone in ("calm", "direct", "kind"):
            settings_store.save_settings(USER_A, EchoSettingsInput(tones=[tone]))

        with db.get_session() as session:
            rows = session.execute(
                select(EchoSettingsRecord).where(EchoSettingsRecord.user_id == USER_A)
            ).scalars().all()
        assert len(rows) == 1

    def test_users_are_isolated(self, settings_store: SettingsStore):
        """One user's settings never leak into another's."""
        settings_store.save_settings(USER_A, EchoSettingsInput(tones=["calm"]))
        assert settings_store.load_settings(USER_B) is None

    def test_blank_text_stored_as_null(self, settings_store: SettingsStore):
        saved = settings_store.save_settings(USER_A, EchoSettingsInput(boundaries="   ", tones=""))
        assert saved.boundaries is None
        assert saved.tones is None
