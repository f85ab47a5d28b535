"""
Domain errors raised by the credential store and service.

Each error carries the HTTP status it maps to and a message that is safe to
return to a client. Driver details stay in the logs.
"""
from typing import Optional


class DomainError(Exception):
    status_code = 500
    default_message = "Server error"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(DomainError):
    status_code = 400
    default_message = "Invalid request"


class Unauthorized(DomainError):
    status_code = 401
    default_message = "Invalid credentials"


class NotFound(DomainError):
    status_code = 404
    default_message = "Email not found"


class Conflict(DomainError):
    status_code = 409
    default_message = "Username or email already exists"


class SchemaMissing(DomainError):
    status_code = 500
    default_message = "Database is not initialized"


class StorageFailure(DomainError):
    status_code = 500
    default_message = "Server error"


class TransientError(DomainError):
    status_code = 503
    default_message = "Database unavailable"


class DuplicateKey(DomainError):
    """Unique constraint violation reported by the store; the service turns it into Conflict."""
    status_code = 409
    default_message = "Duplicate key"


class SchemaInitError(RuntimeError):
    """Schema creation failed for a reason other than a transient outage. Fatal at startup."""


class DatabaseUnavailable(RuntimeError):
    """The database stayed unreachable after every startup retry. Fatal at startup."""
