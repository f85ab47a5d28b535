"""
Logging setup and credential event logger.
"""
from datetime import datetime
from fastapi import Request
from typing import Optional
import sys
import logging
import os

logger = logging.getLogger(__name__)

EVENT_LOG_FILE = "credential_events.log"

ALLOWED_EVENT_TYPES = {
    "signup_success",
    "signup_conflict",
    "login_success",
    "login_failure",
    "password_reset",
    "password_reset_failure",
}


def configure_logging(level: str = "INFO", log_dir: Optional[str] = None) -> None:
    """
    Configure stdout logging, plus a file handler when log_dir is set.

    Args:
        level: logging level name
        log_dir: directory for credential_events.log (optional)
    """
    handlers = [logging.StreamHandler(sys.stdout)]

    # Try to add file handler, but continue without it if directory creation fails
    if log_dir:
        try:
            os.makedirs(log_dir, exist_ok=True)
            handlers.append(logging.FileHandler(os.path.join(log_dir, EVENT_LOG_FILE)))
        except OSError as e:
            print(f"WARNING: Could not set up file logging: {e}", file=sys.stderr)

    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        handlers=handlers
    )


def client_ip(request: Request) -> Optional[str]:
    ip_address = None
    if request.client:
        ip_address = request.client.host

    # X-Forwarded-For can contain multiple IPs, take the first one
    if not ip_address and request.headers.get("x-forwarded-for"):
        ip_address = request.headers.get("x-forwarded-for").split(",")[0].strip()

    return ip_address


def log_credential_event(
    event_type: str,
    request: Request,
    user_id: Optional[int] = None,
    metadata: Optional[dict] = None
) -> None:
    """
    Write one audit line for a credential event.

    Passwords, hashes and confirmation fields must never be passed in
    metadata.

    Args:
        event_type: One of ALLOWED_EVENT_TYPES
        request: FastAPI Request object
        user_id: id of the affected user, when known
        metadata: Optional dictionary of additional context

    Raises:
        ValueError: If event_type is invalid
    """
    if event_type not in ALLOWED_EVENT_TYPES:
        raise ValueError(
            f"Invalid event_type '{event_type}'. Must be one of: {', '.join(sorted(ALLOWED_EVENT_TYPES))}"
        )

    logger.info(
        "CREDENTIAL %s user_id=%s ip=%s user_agent=%s timestamp=%s metadata=%s",
        event_type,
        user_id,
        client_ip(request),
        request.headers.get("user-agent"),
        datetime.utcnow().isoformat(),
        metadata or {}
    )
