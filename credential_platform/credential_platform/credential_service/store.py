"""
Data access for the users table.

Every statement is a bound SQLAlchemy expression. Driver errors never leave
this module: they are rolled back and re-raised as domain errors.
"""
from contextlib import contextmanager
from typing import Optional
import logging

from sqlalchemy import exists, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from .errors import DuplicateKey, SchemaMissing, StorageFailure, TransientError
from .models import User
from .resilience import is_transient

logger = logging.getLogger(__name__)

UNDEFINED_TABLE_SQLSTATE = "42P01"


def is_missing_table(error: SQLAlchemyError) -> bool:
    orig = getattr(error, "orig", None)
    if orig is None:
        return False
    # psycopg 3 exposes sqlstate, psycopg2 pgcode
    code = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
    if code == UNDEFINED_TABLE_SQLSTATE:
        return True
    return "no such table" in str(orig).lower()


class CredentialStore:
    def __init__(self, db: Session):
        self.db = db

    @contextmanager
    def _translate_errors(self, operation: str):
        try:
            yield
        except IntegrityError as e:
            self.db.rollback()
            raise DuplicateKey() from e
        except SQLAlchemyError as e:
            self.db.rollback()
            if is_missing_table(e):
                logger.error("Table %r does not exist during %s", User.__tablename__, operation)
                raise SchemaMissing() from e
            if is_transient(e):
                logger.warning("Database unavailable during %s: %s", operation, e)
                raise TransientError() from e
            logger.exception("Database error during %s", operation)
            raise StorageFailure() from e

    def insert_user(self, username: str, email: str, hashed_password: str,
                    profile_image: Optional[str] = None) -> int:
        with self._translate_errors("insert_user"):
            user = User(
                username=username,
                email=email,
                password=hashed_password,
                profile_image=profile_image,
            )
            self.db.add(user)
            self.db.commit()
            return user.id

    def find_by_email(self, email: str) -> Optional[User]:
        with self._translate_errors("find_by_email"):
            return self.db.execute(
                select(User).where(User.email == email)
            ).scalar_one_or_none()

    def exists_by_email(self, email: str) -> bool:
        with self._translate_errors("exists_by_email"):
            return bool(self.db.execute(
                select(exists().where(User.email == email))
            ).scalar())

    def update_password(self, email: str, new_hashed_password: str) -> int:
        """
        Replace the password hash for email.

        Returns:
            Number of rows changed; 0 means no user has that email.
        """
        with self._translate_errors("update_password"):
            result = self.db.execute(
                update(User)
                .where(User.email == email)
                .values(password=new_hashed_password)
                .execution_options(synchronize_session=False)
            )
            self.db.commit()
            return result.rowcount
