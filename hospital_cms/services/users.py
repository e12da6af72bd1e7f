"""User management rules for SUPER_ADMIN operations, including self-protection."""

import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from hospital_cms.models import User
from hospital_cms.services.auth import PasswordChangeError, set_password, validate_new_password

logger = logging.getLogger(__name__)


class UserManagementError(Exception):
    def __init__(self, message: str, status_code: int = 400) -> None:
        self.message = message
        self.status_code = status_code
        super().__init__(message)


def list_users(db: Session) -> list[User]:
    return db.query(User).order_by(User.created_at, User.username).all()


def get_user(db: Session, user_id: str) -> User:
    user = db.query(User).filter(User.id == user_id).first()
    if user is None:
        raise UserManagementError("User not found", status_code=404)
    return user


def create_user(
    db: Session,
    username: str,
    password: str,
    name: str,
    role: str,
    *,
    min_password_length: int = 6,
) -> User:
    """Create an account whose first login must rotate the temporary password."""
    try:
        validate_new_password(password, min_password_length)
    except PasswordChangeError as e:
        raise UserManagementError(e.message) from e
    if db.query(User).filter(User.username == username).first() is not None:
        raise UserManagementError("Username already exists", status_code=409)
    user = User(username=username, name=name, role=role, must_change_password=True)
    set_password(user, password)
    db.add(user)
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        raise UserManagementError("Username already exists", status_code=409) from e
    db.refresh(user)
    logger.info("User created: username=%s role=%s", user.username, user.role)
    return user


def update_user(
    db: Session,
    actor_id: str,
    user_id: str,
    *,
    name: str | None = None,
    role: str | None = None,
) -> User:
    if role is not None and user_id == actor_id:
        raise UserManagementError("You cannot change your own role", status_code=403)
    user = get_user(db, user_id)
    if name is not None:
        user.name = name
    if role is not None:
        user.role = role
    db.commit()
    db.refresh(user)
    return user


def delete_user(db: Session, actor_id: str, user_id: str) -> str:
    """Delete the account and return its username for the audit trail."""
    if user_id == actor_id:
        raise UserManagementError("You cannot delete your own account", status_code=403)
    user = get_user(db, user_id)
    username = user.username
    db.delete(user)
    db.commit()
    logger.info("User deleted: username=%s", username)
    return username


def reset_password(
    db: Session,
    user_id: str,
    new_password: str,
    *,
    min_password_length: int = 6,
) -> User:
    """Assign a temporary password, force rotation at next login and lift any lockout."""
    user = get_user(db, user_id)
    try:
        validate_new_password(new_password, min_password_length)
    except PasswordChangeError as e:
        raise UserManagementError(e.message) from e
    set_password(user, new_password)
    user.must_change_password = True
    user.failed_login_attempts = 0
    user.locked_until = None
    db.commit()
    db.refresh(user)
    logger.info("Password reset: username=%s", user.username)
    return user
