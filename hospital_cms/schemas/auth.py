"""Request/response schemas for auth endpoints."""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

Role = Literal["ADMIN", "SUPER_ADMIN"]

ROLE_VALUES: frozenset[str] = frozenset({"ADMIN", "SUPER_ADMIN"})


class LoginRequest(BaseModel):
    """Credentials for login. Missing fields are treated as wrong credentials, not validation errors."""

    username: str = Field(default="", max_length=255, description="Username")
    password: str = Field(default="", max_length=128, description="Password")


class UserPublic(BaseModel):
    """User as exposed to the admin panel (no password material)."""

    id: str
    username: str
    name: str
    role: Role


class LoginResponse(BaseModel):
    """Body returned by POST /auth/login; the token itself travels in the cookie."""

    model_config = ConfigDict(populate_by_name=True)

    user: UserPublic
    must_change_password: bool = Field(default=False, alias="mustChangePassword")
    message: str | None = None


class MeResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    user: UserPublic
    must_change_password: bool = Field(default=False, alias="mustChangePassword")


class MessageResponse(BaseModel):
    message: str


class CurrentUser(BaseModel):
    """Authenticated user resolved from the session cookie, for dependency injection."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    username: str
    name: str
    role: Role
    must_change_password: bool = False
