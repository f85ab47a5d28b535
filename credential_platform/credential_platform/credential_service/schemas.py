from pydantic import BaseModel, ConfigDict, Field

from typing import Optional

# Request fields are optional so that missing values reach the service
# and come back as 400 with a readable message instead of a 422.

class CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class SignupRequest(CamelModel):
    username: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None
    confirm_password: Optional[str] = Field(default=None, alias="confirmPassword")


class LoginRequest(CamelModel):
    email: Optional[str] = None
    password: Optional[str] = None


class CheckEmailRequest(CamelModel):
    email: Optional[str] = None


class PasswordResetRequest(CamelModel):
    email: Optional[str] = None
    new_password: Optional[str] = Field(default=None, alias="newPassword")
    confirm_new_password: Optional[str] = Field(default=None, alias="confirmNewPassword")


class UserIdResponse(CamelModel):
    message: str
    user_id: int = Field(serialization_alias="userId")


class CheckEmailResponse(BaseModel):
    exists: bool


class MessageResponse(BaseModel):
    message: str


class HealthResponse(BaseModel):
    status: str
