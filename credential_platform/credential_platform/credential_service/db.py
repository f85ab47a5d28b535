"""
Database engine and session management for the credential service
"""
from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker, Session
from sqlalchemy.exc import SQLAlchemyError
from fastapi import Request
from typing import Generator
import logging

from .config import Settings

logger = logging.getLogger(__name__)

Base = declarative_base()


def create_db_engine(config: Settings) -> Engine:
    """
    Create the SQLAlchemy engine and its connection pool.

    Checkout waits at most DB_POOL_TIMEOUT seconds, so an outage surfaces as
    an error instead of a hang. Connections older than DB_POOL_RECYCLE
    seconds are replaced and every checkout is pre-pinged.

    Args:
        config: Settings instance

    Returns:
        Engine: configured engine (no connection is opened yet)
    """
    url = config.DATABASE_URL
    if url.startswith("sqlite"):
        connect_args = {"check_same_thread": False, "timeout": config.DB_CONNECT_TIMEOUT}
    else:
        connect_args = {"connect_timeout": config.DB_CONNECT_TIMEOUT}

    return create_engine(
        url,
        connect_args=connect_args,
        pool_size=config.DB_POOL_SIZE,
        max_overflow=config.DB_MAX_OVERFLOW,
        pool_timeout=config.DB_POOL_TIMEOUT,
        pool_recycle=config.DB_POOL_RECYCLE,
        pool_pre_ping=True,
        echo=config.LOG_LEVEL == "DEBUG"
    )


def make_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(bind=engine, autocommit=False, autoflush=False, expire_on_commit=False)


def get_db(request: Request) -> Generator[Session, None, None]:
    """
    Dependency function to get a database session for one request.

    The session factory is created in the application lifespan and stored
    on app.state; the session is closed (and its connection returned to the
    pool) when the request finishes.

    Yields:
        Session: SQLAlchemy database session
    """
    db = request.app.state.session_factory()
    try:
        yield db
    finally:
        db.close()


def check_db_connection(engine: Engine) -> bool:
    """
    Check if database connection is working.

    Returns:
        bool: True if connection is successful, False otherwise
    """
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        return True
    except SQLAlchemyError as e:
        logger.error("Database connection check failed: %s", e)
        return False
