"""
Credential lifecycle: signup, login, email check and password reset.

The service validates input, hashes on write and verifies on read. It only
raises domain errors from errors.py; the HTTP layer maps them to responses.
"""
from typing import Optional
import logging

from passlib.context import CryptContext

from .auth import pwd_context, hash_password, verify_password, dummy_verify
from .errors import Conflict, DuplicateKey, NotFound, Unauthorized, ValidationError
from .store import CredentialStore

logger = logging.getLogger(__name__)

MAX_USERNAME_LENGTH = 50
MAX_EMAIL_LENGTH = 100


def _missing(*values: Optional[str]) -> bool:
    return any(value is None or not value.strip() for value in values)


class CredentialService:
    def __init__(
        self,
        store: CredentialStore,
        password_context: CryptContext = pwd_context,
        require_confirmation: bool = True,
    ):
        self.store = store
        self.password_context = password_context
        self.require_confirmation = require_confirmation

    def _check_confirmation(self, password: str, confirmation: Optional[str]) -> None:
        if confirmation is None and not self.require_confirmation:
            return
        if password != confirmation:
            raise ValidationError("Passwords do not match")

    def signup(
        self,
        username: Optional[str],
        email: Optional[str],
        password: Optional[str],
        confirm_password: Optional[str] = None,
        profile_image: Optional[str] = None,
    ) -> int:
        """
        Create a user and return its id.

        Raises:
            ValidationError: missing field, over-long field or confirmation mismatch
            Conflict: username or email already taken
        """
        required = [username, email, password]
        if self.require_confirmation:
            required.append(confirm_password)
        if _missing(*required):
            raise ValidationError("All fields are required")
        if len(username) > MAX_USERNAME_LENGTH:
            raise ValidationError(f"Username must be at most {MAX_USERNAME_LENGTH} characters")
        if len(email) > MAX_EMAIL_LENGTH:
            raise ValidationError(f"Email must be at most {MAX_EMAIL_LENGTH} characters")
        self._check_confirmation(password, confirm_password)

        hashed = hash_password(password, self.password_context)
        try:
            user_id = self.store.insert_user(username, email, hashed, profile_image)
        except DuplicateKey as e:
            raise Conflict("Username or email already exists") from e

        logger.info("Created user id=%s", user_id)
        return user_id

    def login(self, email: Optional[str], password: Optional[str]) -> int:
        """
        Verify credentials and return the user id.

        Unknown email and wrong password raise the same Unauthorized error.
        """
        if _missing(email, password):
            raise ValidationError("Email and password are required")

        user = self.store.find_by_email(email)
        if user is None:
            dummy_verify(self.password_context)
            raise Unauthorized("Invalid credentials")

        if not verify_password(password, user.password, self.password_context):
            raise Unauthorized("Invalid credentials")

        return user.id

    def check_email(self, email: Optional[str]) -> bool:
        if _missing(email):
            raise ValidationError("Email is required")
        return self.store.exists_by_email(email)

    def reset_password(
        self,
        email: Optional[str],
        new_password: Optional[str],
        confirm_new_password: Optional[str] = None,
    ) -> None:
        """
        Replace the password for email.

        Raises:
            ValidationError: missing field or confirmation mismatch
            NotFound: no user has that email
        """
        required = [email, new_password]
        if self.require_confirmation:
            required.append(confirm_new_password)
        if _missing(*required):
            raise ValidationError("All fields are required")
        self._check_confirmation(new_password, confirm_new_password)

        hashed = hash_password(new_password, self.password_context)
        if self.store.update_password(email, hashed) == 0:
            raise NotFound("Email not found")
        logger.info("Password reset for an existing account")
