"""Login verification, per-account lockout and password rotation."""

import logging
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

from sqlalchemy.orm import Session

from hospital_cms.core.security import (
    HASH_LEGACY,
    HASH_V1,
    PASSWORD_MAX_BYTES,
    PASSWORD_MAX_LEN,
    burn_verification_time,
    hash_password,
    needs_rehash,
    verify_password,
)
from hospital_cms.models import User

logger = logging.getLogger(__name__)


class InvalidCredentialsError(Exception):
    """Raised for unknown users, wrong passwords and locked accounts alike."""

    def __init__(self) -> None:
        self.message = "Invalid credentials"
        super().__init__(self.message)


class PasswordChangeError(Exception):
    """Raised when a password rotation is rejected; message is shown to the operator as-is."""

    def __init__(self, message: str, status_code: int = 400) -> None:
        self.message = message
        self.status_code = status_code
        super().__init__(message)


@dataclass(frozen=True)
class ForcedRotation:
    """Account is flagged must_change_password; the fresh login stands in for the current password."""

    new_password: str


@dataclass(frozen=True)
class NormalRotation:
    current_password: str
    new_password: str


RotationRequest = ForcedRotation | NormalRotation


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes even for timezone-aware columns.
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


def set_password(user: User, plain_password: str) -> None:
    """Store a new bcrypt hash on the user (does not commit)."""
    user.password_hash = hash_password(plain_password)
    user.password_scheme = HASH_V1


def is_locked(user: User, now: datetime) -> bool:
    return user.locked_until is not None and _as_utc(user.locked_until) > now


def authenticate_user(
    db: Session,
    username: str,
    password: str,
    *,
    lockout_threshold: int = 5,
    lockout_minutes: int = 15,
    now: datetime | None = None,
) -> User:
    """
    Return the user for valid credentials or raise InvalidCredentialsError.

    Every rejection path runs exactly one bcrypt verification and raises the
    same error, so neither the message nor the timing reveals whether the
    username exists or is locked.
    """
    now = now or datetime.now(UTC)
    user = db.query(User).filter(User.username == username).first() if username else None
    if user is None:
        burn_verification_time(password)
        logger.info("Login failed: unknown username")
        raise InvalidCredentialsError()

    if is_locked(user, now):
        burn_verification_time(password)
        logger.warning("Login refused: account locked username=%s", user.username)
        raise InvalidCredentialsError()

    if not verify_password(password, user.password_hash, user.password_scheme):
        if user.password_scheme == HASH_LEGACY:
            # Legacy comparison is instant; pay one bcrypt check like every other rejection.
            burn_verification_time(password)
        user.failed_login_attempts = (user.failed_login_attempts or 0) + 1
        if user.failed_login_attempts >= lockout_threshold:
            user.locked_until = now + timedelta(minutes=lockout_minutes)
            user.failed_login_attempts = 0
            logger.warning(
                "Account locked after repeated failures: username=%s until=%s",
                user.username,
                user.locked_until.isoformat(),
            )
        else:
            logger.info(
                "Login failed: wrong password username=%s attempts=%s",
                user.username,
                user.failed_login_attempts,
            )
        db.commit()
        raise InvalidCredentialsError()

    user.failed_login_attempts = 0
    user.locked_until = None
    if needs_rehash(user.password_scheme):
        set_password(user, password)
        logger.warning("Migrated legacy password hash to bcrypt: username=%s", user.username)
    db.commit()
    return user


def validate_new_password(password: str, min_length: int) -> None:
    if len(password) < min_length:
        raise PasswordChangeError(f"Password must be at least {min_length} characters")
    if len(password) > PASSWORD_MAX_LEN:
        raise PasswordChangeError(f"Password must be at most {PASSWORD_MAX_LEN} characters")
    if len(password.encode("utf-8")) > PASSWORD_MAX_BYTES:
        raise PasswordChangeError(f"Password must be at most {PASSWORD_MAX_BYTES} bytes")


def resolve_rotation(
    user: User,
    new_password: str,
    current_password: str | None,
) -> RotationRequest:
    """Pick the rotation kind from the stored flag, never from the shape of the request."""
    if user.must_change_password:
        return ForcedRotation(new_password=new_password)
    if not current_password:
        raise PasswordChangeError("Current password is required")
    return NormalRotation(current_password=current_password, new_password=new_password)


def rotate_password(
    db: Session,
    user: User,
    request: RotationRequest,
    *,
    min_length: int = 6,
) -> None:
    """Re-hash and persist the new password and clear the forced-rotation flag."""
    validate_new_password(request.new_password, min_length)
    if isinstance(request, NormalRotation) and not verify_password(
        request.current_password, user.password_hash, user.password_scheme
    ):
        raise PasswordChangeError("Current password is incorrect")
    if verify_password(request.new_password, user.password_hash, user.password_scheme):
        raise PasswordChangeError("New password must be different from the current password")

    set_password(user, request.new_password)
    user.must_change_password = False
    db.commit()
    logger.info(
        "Password changed: username=%s forced=%s",
        user.username,
        isinstance(request, ForcedRotation),
    )
