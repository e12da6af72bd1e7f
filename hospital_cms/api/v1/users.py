"""User management (SUPER_ADMIN only) and self-service password rotation."""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from hospital_cms.api.v1.auth import get_app_settings, get_current_user, require_super_admin
from hospital_cms.core.config import Settings
from hospital_cms.core.database import get_db
from hospital_cms.models import User
from hospital_cms.schemas.auth import CurrentUser, MessageResponse
from hospital_cms.schemas.users import (
    PasswordChangeRequest,
    PasswordResetRequest,
    UserCreateRequest,
    UserListItem,
    UserUpdateRequest,
)
from hospital_cms.services import users as user_service
from hospital_cms.services.audit import AuditLogger
from hospital_cms.services.auth import PasswordChangeError, resolve_rotation, rotate_password
from hospital_cms.services.users import UserManagementError

router = APIRouter()


def _to_item(user: User) -> UserListItem:
    return UserListItem(
        id=user.id,
        username=user.username,
        name=user.name,
        role=user.role,
        must_change_password=user.must_change_password,
        created_at=user.created_at,
    )


@router.patch("/me/password", response_model=MessageResponse)
def change_own_password(
    body: PasswordChangeRequest,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
    settings: Annotated[Settings, Depends(get_app_settings)],
) -> MessageResponse:
    """
    Rotate the caller's password.

    currentPassword is required unless the account is flagged for a forced
    change; the flag is read from the database, not from the request.
    """
    user = db.query(User).filter(User.id == current_user.id).first()
    if user is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Not authenticated")
    try:
        rotation = resolve_rotation(user, body.new_password, body.current_password)
        rotate_password(db, user, rotation, min_length=settings.PASSWORD_MIN_LENGTH)
    except PasswordChangeError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message) from e
    AuditLogger(db).record(
        "UPDATE", "USER", f"User {current_user.username} changed password", current_user.username
    )
    return MessageResponse(message="Password changed successfully")


@router.get("", response_model=list[UserListItem])
def list_users(
    _admin: Annotated[CurrentUser, Depends(require_super_admin)],
    db: Annotated[Session, Depends(get_db)],
) -> list[UserListItem]:
    return [_to_item(u) for u in user_service.list_users(db)]


@router.post("", response_model=UserListItem, status_code=status.HTTP_201_CREATED)
def create_user(
    body: UserCreateRequest,
    admin: Annotated[CurrentUser, Depends(require_super_admin)],
    db: Annotated[Session, Depends(get_db)],
    settings: Annotated[Settings, Depends(get_app_settings)],
) -> UserListItem:
    """Create an operator account; the new account must change its password at first login."""
    try:
        user = user_service.create_user(
            db,
            body.username,
            body.password,
            body.name,
            body.role,
            min_password_length=settings.PASSWORD_MIN_LENGTH,
        )
    except UserManagementError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message) from e
    item = _to_item(user)
    AuditLogger(db).record("CREATE", "USER", f"Created user: {item.username}", admin.username)
    return item


@router.patch("/{user_id}", response_model=UserListItem)
def update_user(
    user_id: str,
    body: UserUpdateRequest,
    admin: Annotated[CurrentUser, Depends(require_super_admin)],
    db: Annotated[Session, Depends(get_db)],
) -> UserListItem:
    """Update display name and/or role. Changing your own role is refused with 403."""
    try:
        user = user_service.update_user(db, admin.id, user_id, name=body.name, role=body.role)
    except UserManagementError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message) from e
    item = _to_item(user)
    changes = ", ".join(
        part
        for part in (
            f"name={item.name}" if body.name is not None else "",
            f"role={item.role}" if body.role is not None else "",
        )
        if part
    )
    AuditLogger(db).record(
        "UPDATE", "USER", f"Updated user: {item.username} ({changes or 'no changes'})", admin.username
    )
    return item


@router.delete("/{user_id}", response_model=MessageResponse)
def delete_user(
    user_id: str,
    admin: Annotated[CurrentUser, Depends(require_super_admin)],
    db: Annotated[Session, Depends(get_db)],
) -> MessageResponse:
    """Delete an operator account. Deleting your own account is refused with 403."""
    try:
        username = user_service.delete_user(db, admin.id, user_id)
    except UserManagementError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message) from e
    AuditLogger(db).record("DELETE", "USER", f"Deleted user: {username}", admin.username)
    return MessageResponse(message="User deleted")


@router.post("/{user_id}/reset-password", response_model=MessageResponse)
def reset_user_password(
    user_id: str,
    body: PasswordResetRequest,
    admin: Annotated[CurrentUser, Depends(require_super_admin)],
    db: Annotated[Session, Depends(get_db)],
    settings: Annotated[Settings, Depends(get_app_settings)],
) -> MessageResponse:
    """Set a temporary password; the account must rotate it at next login."""
    try:
        user = user_service.reset_password(
            db, user_id, body.new_password, min_password_length=settings.PASSWORD_MIN_LENGTH
        )
    except UserManagementError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message) from e
    AuditLogger(db).record("RESET", "USER", f"Reset password for user: {user.username}", admin.username)
    return MessageResponse(message="Password reset; user must change it at next login")
