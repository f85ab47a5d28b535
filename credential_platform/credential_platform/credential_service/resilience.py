"""
Startup retry for database connectivity.

Only transient failures (refused connection, pool timeout, dropped
connection) are retried. Anything else is a configuration or programming
error and propagates on the first attempt.
"""
import logging
import time
from typing import Any, Callable

from pydantic import BaseModel, Field
from sqlalchemy import text
from sqlalchemy import exc as sa_exc
from sqlalchemy.engine import Engine

from .config import Settings
from .errors import DatabaseUnavailable

logger = logging.getLogger(__name__)


class RetryPolicy(BaseModel):
    max_attempts: int = Field(default=5, ge=1)
    base_delay: float = Field(default=1.0, ge=0)
    factor: float = Field(default=2.0, ge=1)
    max_delay: float = Field(default=30.0, ge=0)

    @classmethod
    def from_settings(cls, config: Settings) -> "RetryPolicy":
        return cls(
            max_attempts=config.DB_CONNECT_ATTEMPTS,
            base_delay=config.DB_RETRY_BASE_DELAY,
            factor=config.DB_RETRY_FACTOR,
            max_delay=config.DB_RETRY_MAX_DELAY,
        )

    def delay_for(self, attempt: int) -> float:
        """Delay in seconds after the given 0-based failed attempt."""
        return min(self.base_delay * (self.factor ** attempt), self.max_delay)


def is_transient(error: BaseException) -> bool:
    if isinstance(error, (sa_exc.OperationalError, sa_exc.InterfaceError, sa_exc.TimeoutError)):
        return True
    return isinstance(error, sa_exc.DBAPIError) and error.connection_invalidated


def retry_with_backoff(
    operation: Callable[[], Any],
    policy: RetryPolicy,
    sleep: Callable[[float], None] = time.sleep,
    description: str = "database operation",
) -> Any:
    """
    Run operation, retrying transient database errors with exponential backoff.

    Args:
        operation: zero-argument callable
        policy: attempt ceiling and delay schedule
        sleep: injectable for tests
        description: used in log lines

    Returns:
        Whatever operation returns

    Raises:
        DatabaseUnavailable: every attempt failed with a transient error
        Exception: the first non-transient error, unchanged
    """
    last_error = None

    for attempt in range(policy.max_attempts):
        try:
            return operation()
        except Exception as e:
            if not is_transient(e):
                raise
            last_error = e
            if attempt < policy.max_attempts - 1:
                wait_time = policy.delay_for(attempt)
                logger.warning(
                    "%s failed (attempt %s/%s), retrying in %.1fs: %s",
                    description, attempt + 1, policy.max_attempts, wait_time, e
                )
                sleep(wait_time)
            else:
                logger.error("%s failed after %s attempts: %s", description, policy.max_attempts, e)

    raise DatabaseUnavailable(
        f"{description} failed after {policy.max_attempts} attempts"
    ) from last_error


def wait_for_database(engine: Engine, policy: RetryPolicy, sleep: Callable[[float], None] = time.sleep) -> None:
    def ping():
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))

    retry_with_backoff(ping, policy, sleep=sleep, description="database connection")
    logger.info("Connected to database")
