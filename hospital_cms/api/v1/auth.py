"""Cookie JWT login/logout/me and the auth dependencies (get_current_user, require_roles)."""

import logging
from collections.abc import Callable
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Request, Response, status
from sqlalchemy.orm import Session

from hospital_cms.api.v1.limits import limit_api_requests, limit_auth_attempts
from hospital_cms.core.config import Settings
from hospital_cms.core.database import get_db
from hospital_cms.core.security import InvalidTokenError, TokenService
from hospital_cms.models import User
from hospital_cms.schemas.auth import (
    CurrentUser,
    LoginRequest,
    LoginResponse,
    MeResponse,
    MessageResponse,
    UserPublic,
)
from hospital_cms.services.audit import AuditLogger
from hospital_cms.services.auth import InvalidCredentialsError, authenticate_user

logger = logging.getLogger(__name__)

router = APIRouter()


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_token_service(request: Request) -> TokenService:
    return request.app.state.token_service


def _not_authenticated() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Not authenticated",
    )


def _is_secure_request(request: Request, settings: Settings) -> bool:
    if request.url.scheme == "https":
        return True
    if settings.TRUST_PROXY_HEADERS:
        proto = request.headers.get("x-forwarded-proto", "").split(",")[0].strip().lower()
        return proto == "https"
    return False


def _cookie_options(request: Request, settings: Settings) -> dict:
    secure = _is_secure_request(request, settings)
    return {
        "httponly": True,
        "secure": secure,
        "samesite": "none" if secure else "lax",
        "path": "/",
    }


def get_current_user(
    request: Request,
    db: Annotated[Session, Depends(get_db)],
    settings: Annotated[Settings, Depends(get_app_settings)],
    tokens: Annotated[TokenService, Depends(get_token_service)],
) -> CurrentUser:
    """Dependency: require a valid session cookie and return the current user. Raises 401 otherwise."""
    token = request.cookies.get(settings.AUTH_COOKIE_NAME)
    if not token:
        raise _not_authenticated()
    try:
        identity = tokens.verify(token)
    except InvalidTokenError:
        raise _not_authenticated()
    user = db.query(User).filter(User.id == identity.user_id).first()
    if user is None:
        # Account deleted after the token was issued.
        raise _not_authenticated()
    return CurrentUser.model_validate(user)


def require_roles(*roles: str) -> Callable[..., CurrentUser]:
    """
    Build a dependency that admits only the given roles (403 otherwise).

    With ENFORCE_PASSWORD_ROTATION on, accounts still flagged for a forced
    password change are refused too; the rotation endpoint itself only
    depends on get_current_user.
    """
    allowed = frozenset(roles)

    def dependency(
        current_user: Annotated[CurrentUser, Depends(get_current_user)],
        settings: Annotated[Settings, Depends(get_app_settings)],
    ) -> CurrentUser:
        if current_user.role not in allowed:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Access denied",
            )
        if settings.ENFORCE_PASSWORD_ROTATION and current_user.must_change_password:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Password change required",
            )
        return current_user

    return dependency


require_content_editor = require_roles("ADMIN", "SUPER_ADMIN")
require_super_admin = require_roles("SUPER_ADMIN")


@router.post(
    "/login",
    response_model=LoginResponse,
    dependencies=[Depends(limit_auth_attempts)],
)
def login(
    body: LoginRequest,
    request: Request,
    response: Response,
    db: Annotated[Session, Depends(get_db)],
    settings: Annotated[Settings, Depends(get_app_settings)],
    tokens: Annotated[TokenService, Depends(get_token_service)],
) -> LoginResponse:
    """
    Authenticate with username and password; the session token is set as an HTTP-only cookie.
    Unknown usernames, wrong passwords and locked accounts all return the same 401.
    """
    try:
        user = authenticate_user(
            db,
            body.username,
            body.password,
            lockout_threshold=settings.ACCOUNT_LOCKOUT_THRESHOLD,
            lockout_minutes=settings.ACCOUNT_LOCKOUT_MINUTES,
        )
    except InvalidCredentialsError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=e.message,
        ) from e

    public = UserPublic(id=user.id, username=user.username, name=user.name, role=user.role)
    must_change = bool(user.must_change_password)
    token = tokens.issue(user.id, user.username, user.role)
    response.set_cookie(
        settings.AUTH_COOKIE_NAME,
        token,
        max_age=tokens.max_age_seconds,
        **_cookie_options(request, settings),
    )
    AuditLogger(db).record("LOGIN", "USER", f"User {public.username} logged in", public.username)
    logger.info("Login succeeded: username=%s must_change_password=%s", public.username, must_change)

    return LoginResponse(
        user=public,
        must_change_password=must_change,
        message="You must change your password before continuing" if must_change else None,
    )


@router.post(
    "/logout",
    response_model=MessageResponse,
    dependencies=[Depends(limit_auth_attempts)],
)
def logout(
    request: Request,
    response: Response,
    db: Annotated[Session, Depends(get_db)],
    settings: Annotated[Settings, Depends(get_app_settings)],
    tokens: Annotated[TokenService, Depends(get_token_service)],
) -> MessageResponse:
    """Clear the session cookie. The token itself stays valid until it expires."""
    token = request.cookies.get(settings.AUTH_COOKIE_NAME)
    if token:
        try:
            identity = tokens.verify(token)
        except InvalidTokenError:
            identity = None
        if identity is not None:
            AuditLogger(db).record(
                "LOGOUT", "USER", f"User {identity.username} logged out", identity.username
            )
    response.delete_cookie(settings.AUTH_COOKIE_NAME, **_cookie_options(request, settings))
    return MessageResponse(message="Logged out")


@router.get(
    "/me",
    response_model=MeResponse,
    dependencies=[Depends(limit_api_requests)],
)
def me(current_user: Annotated[CurrentUser, Depends(get_current_user)]) -> MeResponse:
    """Return the identity behind the session cookie; 401 when there is no valid session."""
    return MeResponse(
        user=UserPublic(
            id=current_user.id,
            username=current_user.username,
            name=current_user.name,
            role=current_user.role,
        ),
        must_change_password=current_user.must_change_password,
    )
