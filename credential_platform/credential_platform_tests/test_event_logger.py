"""
Unit tests for the credential event logger.
"""
import logging
from unittest.mock import Mock, patch

import pytest

from credential_platform.credential_platform.credential_service.utils import event_logger
from credential_platform.credential_platform.credential_service.utils.event_logger import (
    configure_logging,
    log_credential_event,
)

LOGGER_NAME = event_logger.__name__


@pytest.fixture
def mock_request():
    """Create a mock FastAPI Request object."""
    request = Mock()
    request.client = Mock()
    request.client.host = "192.168.1.1"
    request.headers = {"user-agent": "Mozilla/5.0 Test Browser"}
    return request


@pytest.fixture
def captured(caplog):
    caplog.set_level(logging.INFO, logger=LOGGER_NAME)
    return caplog


def test_log_credential_event_writes_line(captured, mock_request):
    log_credential_event("login_success", mock_request, user_id=42)

    assert len(captured.records) == 1
    message = captured.records[0].getMessage()
    assert "CREDENTIAL login_success" in message
    assert "user_id=42" in message
    assert "ip=192.168.1.1" in message
    assert "Mozilla/5.0 Test Browser" in message


def test_log_credential_event_without_user(captured, mock_request):
    log_credential_event("login_failure", mock_request)
    assert "user_id=None" in captured.records[0].getMessage()


def test_log_credential_event_with_metadata(captured, mock_request):
    log_credential_event("signup_success", mock_request, user_id=1, metadata={"source": "form"})
    assert "'source': 'form'" in captured.records[0].getMessage()


def test_log_credential_event_invalid_type(mock_request):
    with pytest.raises(ValueError) as exc_info:
        log_credential_event("invalid_event", mock_request)

    assert "Invalid event_type" in str(exc_info.value)
    assert "invalid_event" in str(exc_info.value)


def test_log_credential_event_handles_missing_ip(captured):
    request = Mock()
    request.client = None
    request.headers = {"user-agent": "Test Browser"}

    log_credential_event("login_success", request)

    assert "ip=None" in captured.records[0].getMessage()


def test_log_credential_event_x_forwarded_for_fallback(captured):
    request = Mock()
    request.client = None
    request.headers = {
        "x-forwarded-for": "10.0.0.1, 192.168.1.1",
        "user-agent": "Test Browser"
    }

    log_credential_event("login_success", request)

    assert "ip=10.0.0.1 " in captured.records[0].getMessage()


def test_endpoints_never_log_passwords(client, captured):
    client.post("/api/signup", json={
        "username": "carol",
        "email": "c@x.com",
        "password": "s3cret-signup",
        "confirmPassword": "s3cret-signup",
    })
    client.post("/api/login", json={"email": "c@x.com", "password": "s3cret-wrong"})
    client.post("/api/reset-password", json={
        "email": "c@x.com", "newPassword": "s3cret-reset", "confirmNewPassword": "s3cret-reset"
    })

    text = captured.text
    assert "CREDENTIAL signup_success" in text
    assert "CREDENTIAL login_failure" in text
    assert "CREDENTIAL password_reset" in text
    for secret in ("s3cret-signup", "s3cret-wrong", "s3cret-reset", "$2b$"):
        assert secret not in text


def test_configure_logging_adds_file_handler(tmp_path):
    with patch.object(event_logger.logging, "basicConfig") as basic_config:
        configure_logging("debug", str(tmp_path / "logs"))

    kwargs = basic_config.call_args.kwargs
    assert kwargs["level"] == logging.DEBUG
    file_handlers = [h for h in kwargs["handlers"] if isinstance(h, logging.FileHandler)]
    assert len(file_handlers) == 1
    assert file_handlers[0].baseFilename.endswith("credential_events.log")
    for handler in file_handlers:
        handler.close()


def test_configure_logging_stdout_only_without_log_dir():
    with patch.object(event_logger.logging, "basicConfig") as basic_config:
        configure_logging("INFO")

    handlers = basic_config.call_args.kwargs["handlers"]
    assert len(handlers) == 1
    assert not isinstance(handlers[0], logging.FileHandler)


def test_signup_events_tag_request_source(client, captured):
    client.post("/api/signup", json={
        "username": "erin", "email": "e@x.com", "password": "p1", "confirmPassword": "p1"
    })
    client.post("/signup-data", data={
        "username": "erin", "email": "e@x.com", "password": "p1", "confirmPassword": "p1"
    })

    success = [r.getMessage() for r in captured.records if "signup_success" in r.getMessage()]
    conflict = [r.getMessage() for r in captured.records if "signup_conflict" in r.getMessage()]
    assert len(success) == 1 and "'source': 'json'" in success[0]
    assert len(conflict) == 1 and "'source': 'form'" in conflict[0]
