"""Request/response schemas for user management and password rotation."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from hospital_cms.core.security import PASSWORD_MAX_LEN, USERNAME_MAX_LEN, USERNAME_MIN_LEN
from hospital_cms.schemas.auth import Role

USERNAME_PATTERN = r"^[A-Za-z0-9]+$"


class UserListItem(BaseModel):
    """User entry for the SUPER_ADMIN list (no password)."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    username: str
    name: str
    role: Role
    must_change_password: bool = Field(alias="mustChangePassword")
    created_at: datetime | None = Field(default=None, alias="createdAt")


class UserCreateRequest(BaseModel):
    username: str = Field(
        ...,
        min_length=USERNAME_MIN_LEN,
        max_length=USERNAME_MAX_LEN,
        pattern=USERNAME_PATTERN,
        description="Alphanumeric username",
    )
    password: str = Field(..., min_length=1, max_length=PASSWORD_MAX_LEN)
    name: str = Field(default="", max_length=255)
    role: Role = "ADMIN"


class UserUpdateRequest(BaseModel):
    """Partial update; omitted fields are left unchanged."""

    name: str | None = Field(default=None, max_length=255)
    role: Role | None = None


class PasswordChangeRequest(BaseModel):
    """
    Body for PATCH /users/me/password.

    currentPassword is only consulted when the account is not flagged for
    forced rotation; the server decides which case applies from the stored flag.
    """

    model_config = ConfigDict(populate_by_name=True)

    current_password: str | None = Field(
        default=None, max_length=PASSWORD_MAX_LEN, alias="currentPassword"
    )
    new_password: str = Field(..., max_length=PASSWORD_MAX_LEN, alias="newPassword")


class PasswordResetRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    new_password: str = Field(..., max_length=PASSWORD_MAX_LEN, alias="newPassword")
