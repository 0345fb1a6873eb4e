"""
Database Initialization - Create the ECHORA tables.

Tables are created at application startup when they do not exist yet.
"""
from typing import Optional

from echora.core.logging_config import get_logger
from echora.database.connection import DatabaseConnection, get_database
from echora.database.models import Base

logger = get_logger(__name__)


def init_tables(db: Optional[DatabaseConnection] = None) -> bool:
    """
    Create all tables if they don't exist.

    Args:
        db: Database to initialize (defaults to the process-wide one)

    Returns:
        True if tables were created successfully
    """
    db = db or get_database()
    try:
        Base.metadata.create_all(db.engine)
        logger.info("ECHORA tables initialized successfully")
        return True
    except Exception as e:
        logger.error(f"Failed to initialize tables: {e}")
        raise


def drop_tables(db: Optional[DatabaseConnection] = None) -> bool:
    """
    Drop all tables (use with caution!).

    This is mainly for testing/development purposes.
    """
    db = db or get_database()
    try:
        Base.metadata.drop_all(db.engine)
        logger.warning("ECHORA tables dropped")
        return True
    except Exception as e:
        logger.error(f"Failed to drop tables: {e}")
        raise


if __name__ == "__main__":
    print("Initializing ECHORA tables...")
    init_tables()
    print("Done!")
