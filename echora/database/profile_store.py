"""
Profile Store - the user's own completion API key.

Users who paste their own key on the account page have their Echo
calls billed to it; everyone else uses the server key.
"""
from datetime import datetime
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from echora.core.exceptions import StoreError
from echora.core.logging_config import LoggerMixin, mask_secret
from echora.database.connection import DatabaseConnection
from echora.database.models import Profile
from echora.database.upsert import upsert


class ProfileStore(LoggerMixin):
    """Reads and writes the profiles table."""

    def __init__(self, db: DatabaseConnection):
        self.db = db

    def get_api_key(self, user_id: str) -> Optional[str]:
        """Return the user's stored API key, or None."""
        try:
            with self.db.get_session() as session:
                return session.execute(
                    select(Profile.openai_api_key).where(Profile.user_id == user_id)
                ).scalar_one_or_none()
        except SQLAlchemyError as e:
            self.logger.error(f"Could not load profile for user={user_id[:8]}: {e}")
            raise StoreError("Could not load your profile.", details=str(e)) from e

    def has_api_key(self, user_id: str) -> bool:
        return bool(self.get_api_key(user_id))

    def save_api_key(self, user_id: str, api_key: str) -> None:
        """Upsert the user's API key."""
        values = {
            "user_id": user_id,
            "openai_api_key": api_key,
            "updated_at": datetime.utcnow(),
        }
        try:
            with self.db.get_session() as session:
                upsert(session, Profile, values, conflict_columns=("user_id",))
        except SQLAlchemyError as e:
            self.logger.error(f"Could not save API key for user={user_id[:8]}: {e}")
            raise StoreError("Could not save your key.", details=str(e)) from e

        self.logger.info(f"Saved API key {mask_secret(api_key)} for user={user_id[:8]}")
