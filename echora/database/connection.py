"""
Database Connection Management.

One engine per process, shared by every store. SQLite is the default
for local development and tests; PostgreSQL and MySQL URLs work the
same way once the matching driver extra is installed.
"""
from contextlib import contextmanager
from typing import Iterator, Optional

from sqlalchemy import create_engine, make_url, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from echora.core.config import get_settings
from echora.core.logging_config import get_logger

logger = get_logger(__name__)

IN_MEMORY_SQLITE = ("sqlite://", "sqlite:///:memory:")


def build_engine(db_url: str) -> Engine:
    """Create an engine with pool options suited to the dialect."""
    if db_url.startswith("sqlite"):
        options = {"connect_args": {"check_same_thread": False}}
        # An in-memory database only exists inside one connection
        if db_url in IN_MEMORY_SQLITE:
            options["poolclass"] = StaticPool
    else:
        options = {"pool_pre_ping": True, "pool_size": 5, "max_overflow": 10}
    return create_engine(db_url, echo=False, **options)


def safe_url(db_url: str) -> str:
    """The URL with its password hidden, for logs."""
    return make_url(db_url).render_as_string(hide_password=True)


class DatabaseConnection:
    """
    Owns the engine and hands out transactional sessions.

    Stores receive an instance and never create engines themselves.

    Example:
        >>> db = DatabaseConnection("sqlite://")
        >>> with db.get_session() as session:
        ...     session.execute(text("SELECT 1"))
    """

    def __init__(self, connection_url: Optional[str] = None):
        self.url = connection_url or get_settings().database_url
        self.engine = build_engine(self.url)
        self._session_factory = sessionmaker(
            bind=self.engine,
            autoflush=False,
            expire_on_commit=False,
        )
        logger.info(f"Database connection initialized: {safe_url(self.url)}")

    @property
    def dialect(self) -> str:
        """sqlite, postgresql or mysql."""
        return self.engine.dialect.name

    @contextmanager
    def get_session(self) -> Iterator[Session]:
        """
        A session that commits when the block exits cleanly.

        Any exception rolls the transaction back and propagates.
        """
        session = self._session_factory()
        try:
            yield session
            session.commit()
        except Exception as e:
            session.rollback()
            if isinstance(e, SQLAlchemyError):
                logger.error(f"Database error, rolling back: {e}")
            raise
        finally:
            session.close()

    def check_connection(self) -> bool:
        """True when a trivial query succeeds."""
        try:
            with self.engine.connect() as conn:
                conn.execute(text("SELECT 1"))
        except SQLAlchemyError as e:
            logger.error(f"Database connection check failed: {e}")
            return False
        return True

    def close(self) -> None:
        self.engine.dispose()
        logger.info("Database connections closed")


_db_connection: Optional[DatabaseConnection] = None


def get_database() -> DatabaseConnection:
    """The process-wide connection, created on first use."""
    global _db_connection
    if _db_connection is None:
        _db_connection = DatabaseConnection()
    return _db_connection


def reset_database() -> None:
    """Dispose of the process-wide connection so the next call rebuilds it."""
    global _db_connection
    if _db_connection is not None:
        _db_connection.close()
    _db_connection = None
