"""
Settings Store - reads and writes the user's Echo settings record.

The store is the only writer of the echo_settings table. A missing row
is the normal state of a new account and comes back as None; any
database failure is reported as StoreError.
"""
from datetime import datetime
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from echora.core.exceptions import StoreError
from echora.core.logging_config import LoggerMixin
from echora.database.connection import DatabaseConnection
from echora.database.models import EchoSettingsRecord
from echora.database.upsert import upsert
from echora.models.settings import EchoSettings, EchoSettingsInput

SETTINGS_FIELDS = (
    "tones",
    "boundaries",
    "base_prompt",
    "safety_rules",
    "default_reply_style",
    "auto_reply_enabled",
)


class SettingsStore(LoggerMixin):
    """
    Settings store bound to one database handle.

    Example:
        >>> store = SettingsStore(db)
        >>> store.load_settings("user-1") is None
        True
        >>> store.save_settings("user-1", EchoSettingsInput(tones=["calm"]))
    """

    def __init__(self, db: DatabaseConnection):
        self.db = db

    def load_settings(self, user_id: str) -> Optional[EchoSettings]:
        """
        Load the settings record for a user.

        Returns:
            EchoSettings, or None when the user has not saved any yet

        Raises:
            StoreError: If the database cannot be read
        """
        try:
            with self.db.get_session() as session:
                record = session.execute(
                    select(EchoSettingsRecord).where(EchoSettingsRecord.user_id == user_id)
                ).scalar_one_or_none()

                if record is None:
                    self.logger.debug(f"No settings yet for user={user_id[:8]}")
                    return None

                return EchoSettings.model_validate(record)
        except SQLAlchemyError as e:
            self.logger.error(f"Could not load settings for user={user_id[:8]}: {e}")
            raise StoreError("Could not load your Echo settings.", details=str(e)) from e

    def save_settings(self, user_id: str, settings: EchoSettingsInput) -> EchoSettings:
        """
        Upsert the full settings record for a user.

        Every field is written: a field left unset in ``settings`` is
        stored as null, overwriting any previous value.

        Raises:
            StoreError: If the database cannot be written
        """
        values = {field: getattr(settings, field) for field in SETTINGS_FIELDS}
        values["user_id"] = user_id
        values["updated_at"] = datetime.utcnow()

        try:
            with self.db.get_session() as session:
                upsert(session, EchoSettingsRecord, values, conflict_columns=("user_id",))
        except SQLAlchemyError as e:
            self.logger.error(f"Could not save settings for user={user_id[:8]}: {e}")
            raise StoreError("Could not save your Echo settings.", details=str(e)) from e

        self.logger.info(f"Saved settings for user={user_id[:8]}")

        saved = self.load_settings(user_id)
        if saved is None:
            raise StoreError("Settings were saved but could not be read back.")
        return saved
