"""
Dialect-aware upsert.

Every "one row per user" table relies on a unique user_id column; the
conflict target is always explicit so the database enforces the
invariant instead of a read-then-write in application code.
"""
from typing import Any, Dict, Sequence

from sqlalchemy.orm import Session

from echora.core.exceptions import ConfigError


def upsert(
    session: Session,
    model,
    values: Dict[str, Any],
    conflict_columns: Sequence[str],
) -> None:
    """
    Insert ``values`` into ``model``'s table or update the conflicting row.

    All non-conflict columns present in ``values`` are overwritten,
    including ones whose value is None.

    Args:
        session: Open SQLAlchemy session
        model: ORM model class
        values: Column values for the row
        conflict_columns: Columns of the unique constraint to resolve on
    """
    dialect = session.get_bind().dialect.name
    table = model.__table__
    update_values = {k: v for k, v in values.items() if k not in conflict_columns}

    if dialect == "postgresql":
        from sqlalchemy.dialects.postgresql import insert as pg_insert
        stmt = pg_insert(table).values(**values)
        stmt = stmt.on_conflict_do_update(index_elements=list(conflict_columns), set_=update_values)
    elif dialect == "sqlite":
        from sqlalchemy.dialects.sqlite import insert as sqlite_insert
        stmt = sqlite_insert(table).values(**values)
        stmt = stmt.on_conflict_do_update(index_elements=list(conflict_columns), set_=update_values)
    elif dialect == "mysql":
        from sqlalchemy.dialects.mysql import insert as mysql_insert
        stmt = mysql_insert(table).values(**values)
        stmt = stmt.on_duplicate_key_update(**update_values)
    else:
        raise ConfigError(
            f"Unsupported database dialect '{dialect}': set DATABASE_URL to SQLite, PostgreSQL or MySQL."
        )

    session.execute(stmt)
