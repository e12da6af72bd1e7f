"""Pydantic request/response schemas."""

from hospital_cms.schemas.audit import AuditAction, AuditLogEntry
from hospital_cms.schemas.auth import (
    CurrentUser,
    LoginRequest,
    LoginResponse,
    MeResponse,
    MessageResponse,
    Role,
    UserPublic,
)
from hospital_cms.schemas.health import HealthResponse
from hospital_cms.schemas.news import NewsArticleIn, NewsArticleOut
from hospital_cms.schemas.users import (
    PasswordChangeRequest,
    PasswordResetRequest,
    UserCreateRequest,
    UserListItem,
    UserUpdateRequest,
)

__all__ = [
    "AuditAction",
    "AuditLogEntry",
    "CurrentUser",
    "HealthResponse",
    "LoginRequest",
    "LoginResponse",
    "MeResponse",
    "MessageResponse",
    "NewsArticleIn",
    "NewsArticleOut",
    "PasswordChangeRequest",
    "PasswordResetRequest",
    "Role",
    "UserCreateRequest",
    "UserListItem",
    "UserPublic",
    "UserUpdateRequest",
]
