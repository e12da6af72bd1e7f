"""Admin-panel client: local login throttling and password checks in front of the HTTP API."""

from hospital_cms.client.admin_client import (
    AdminApiError,
    AdminClient,
    LoginLockedError,
    LoginOutcome,
    PasswordValidationError,
)
from hospital_cms.client.throttle import LoginThrottle

__all__ = [
    "AdminApiError",
    "AdminClient",
    "LoginLockedError",
    "LoginOutcome",
    "LoginThrottle",
    "PasswordValidationError",
]
