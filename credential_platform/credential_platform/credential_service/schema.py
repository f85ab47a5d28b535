"""
Idempotent creation of the users table and its indexes.
"""
import logging

from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.schema import CreateIndex, CreateTable

from .errors import SchemaInitError
from .models import User, USERNAME_UNIQUE_INDEX
from .resilience import is_transient

logger = logging.getLogger(__name__)

# duplicate_table, duplicate_schema, unique_violation (pg_type row of a
# table created concurrently by another process)
ALREADY_EXISTS_SQLSTATES = {"42P07", "42P06", "23505"}


def is_already_exists(error: SQLAlchemyError) -> bool:
    orig = getattr(error, "orig", None)
    if orig is None:
        return False
    code = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
    if code in ALREADY_EXISTS_SQLSTATES:
        return True
    return "already exists" in str(orig).lower()


def _create_schema(engine: Engine, username_unique: bool) -> None:
    table = User.__table__
    with engine.begin() as conn:
        conn.execute(CreateTable(table, if_not_exists=True))
        for idx in sorted(table.indexes, key=lambda idx: idx.name):
            if idx.name == USERNAME_UNIQUE_INDEX and not username_unique:
                continue
            conn.execute(CreateIndex(idx, if_not_exists=True))


def ensure_schema(engine: Engine, username_unique: bool = True) -> None:
    """
    Create the users table and its indexes if they are absent.

    Uses CREATE ... IF NOT EXISTS rather than inspect-then-create. When
    another process wins the race between our IF NOT EXISTS check and the
    create, the database reports "already exists"; the DDL is then run once
    more so the indexes this process rolled back are still guaranteed.

    Args:
        engine: SQLAlchemy engine
        username_unique: also create the unique index on username

    Raises:
        SQLAlchemyError: transient connectivity errors, unchanged, for the caller to retry
        SchemaInitError: any other failure
    """
    table_name = User.__tablename__

    for attempt in range(2):
        try:
            _create_schema(engine, username_unique)
            break
        except SQLAlchemyError as e:
            if is_transient(e):
                raise
            if is_already_exists(e):
                if attempt == 0:
                    logger.info("Schema objects for %r were created concurrently, re-checking", table_name)
                    continue
                logger.info("Schema objects for %r already exist", table_name)
                break
            logger.error("Error initializing database schema: %s", e)
            raise SchemaInitError(f"Could not create table {table_name!r}") from e

    logger.info("Schema for table %r is in place (username_unique=%s)", table_name, username_unique)
