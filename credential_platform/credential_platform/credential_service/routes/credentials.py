"""
Signup, login, email check and password reset endpoints.

Each operation is reachable under its /api path and under the legacy
form-post path used by the original HTML pages.
"""
from typing import Optional, Tuple
import logging

from fastapi import APIRouter, Depends, Request, status
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.orm import Session
from starlette.concurrency import run_in_threadpool
from starlette.datastructures import UploadFile

from ..auth import pwd_context
from ..config import settings
from ..db import get_db
from ..errors import Conflict, NotFound, Unauthorized, ValidationError
from ..schemas import (
    SignupRequest,
    LoginRequest,
    CheckEmailRequest,
    PasswordResetRequest,
    UserIdResponse,
    CheckEmailResponse,
    MessageResponse,
)
from ..service import CredentialService
from ..storage import ImageStorage, LocalImageStorage
from ..store import CredentialStore
from ..utils.event_logger import log_credential_event

router = APIRouter(tags=["credentials"])
logger = logging.getLogger(__name__)

FORM_CONTENT_TYPES = ("multipart/form-data", "application/x-www-form-urlencoded")


def get_credential_store(db: Session = Depends(get_db)) -> CredentialStore:
    return CredentialStore(db)


def get_credential_service(store: CredentialStore = Depends(get_credential_store)) -> CredentialService:
    return CredentialService(
        store,
        password_context=pwd_context,
        require_confirmation=settings.REQUIRE_PASSWORD_CONFIRMATION,
    )


def get_image_storage() -> ImageStorage:
    return LocalImageStorage(settings.UPLOAD_DIR, settings.UPLOAD_URL_PREFIX)


async def read_signup_payload(request: Request) -> Tuple[SignupRequest, Optional[UploadFile]]:
    """Parse a signup body sent either as a form (with optional image) or as JSON."""
    upload = None
    content_type = request.headers.get("content-type", "")
    if content_type.startswith(FORM_CONTENT_TYPES):
        form = await request.form()
        image = form.get("profileImage")
        if isinstance(image, UploadFile) and image.filename:
            upload = image
        fields = {key: value for key, value in form.items() if isinstance(value, str)}
    else:
        try:
            fields = await request.json()
        except ValueError as e:
            raise ValidationError("Invalid request body") from e

    try:
        return SignupRequest.model_validate(fields), upload
    except PydanticValidationError as e:
        raise ValidationError("Invalid request body") from e


@router.post("/api/signup", response_model=UserIdResponse, status_code=status.HTTP_201_CREATED)
@router.post("/signup-data", response_model=UserIdResponse, status_code=status.HTTP_201_CREATED)
async def signup(
    request: Request,
    service: CredentialService = Depends(get_credential_service),
    storage: ImageStorage = Depends(get_image_storage),
):
    payload, upload = await read_signup_payload(request)
    source = "form" if request.headers.get("content-type", "").startswith(FORM_CONTENT_TYPES) else "json"

    profile_image = None
    if upload is not None:
        profile_image = await run_in_threadpool(storage.save, upload)

    try:
        # bcrypt is CPU bound, keep it off the event loop
        user_id = await run_in_threadpool(
            service.signup,
            payload.username,
            payload.email,
            payload.password,
            payload.confirm_password,
            profile_image,
        )
    except Exception as e:
        if profile_image:
            storage.discard(profile_image)
        if isinstance(e, Conflict):
            log_credential_event("signup_conflict", request, metadata={"source": source})
        raise

    log_credential_event("signup_success", request, user_id=user_id, metadata={"source": source})
    return UserIdResponse(message="User created successfully", user_id=user_id)


@router.post("/api/login", response_model=UserIdResponse)
@router.post("/login-data", response_model=UserIdResponse)
def login(
    payload: LoginRequest,
    request: Request,
    service: CredentialService = Depends(get_credential_service),
):
    try:
        user_id = service.login(payload.email, payload.password)
    except Unauthorized:
        log_credential_event("login_failure", request)
        raise

    log_credential_event("login_success", request, user_id=user_id)
    return UserIdResponse(message="Login successful", user_id=user_id)


@router.post("/api/check-email", response_model=CheckEmailResponse)
@router.post("/check-email-data", response_model=CheckEmailResponse)
def check_email(
    payload: CheckEmailRequest,
    service: CredentialService = Depends(get_credential_service),
):
    return CheckEmailResponse(exists=service.check_email(payload.email))


@router.post("/api/reset-password", response_model=MessageResponse)
@router.post("/api/forgot-password", response_model=MessageResponse)
@router.post("/reset-password-data", response_model=MessageResponse)
def reset_password(
    payload: PasswordResetRequest,
    request: Request,
    service: CredentialService = Depends(get_credential_service),
):
    try:
        service.reset_password(payload.email, payload.new_password, payload.confirm_new_password)
    except NotFound:
        log_credential_event("password_reset_failure", request)
        raise

    log_credential_event("password_reset", request)
    return MessageResponse(message="Password reset successfully")
