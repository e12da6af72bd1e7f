"""Async HTTP client for the admin panel: session cookie, login throttle, password rotation."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

import httpx

from hospital_cms.client.throttle import LoginThrottle

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SEC = 10.0
MIN_PASSWORD_LENGTH = 6


class AdminApiError(Exception):
    """Raised when the API rejects a request; message is the server's error text."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        self.message = message
        self.status_code = status_code
        super().__init__(message)


class LoginLockedError(Exception):
    """Raised without contacting the server while the local throttle is engaged."""

    def __init__(self, remaining_seconds: int) -> None:
        self.remaining_seconds = remaining_seconds
        self.message = f"Too many failed attempts. Please wait {remaining_seconds} seconds."
        super().__init__(self.message)


class PasswordValidationError(Exception):
    """Raised for a weak or mismatched new password before any request is sent."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


@dataclass
class LoginOutcome:
    user: dict[str, Any]
    must_change_password: bool


def _error_message(resp: httpx.Response, fallback: str) -> str:
    try:
        body = resp.json()
    except ValueError:
        return fallback
    if isinstance(body, dict) and isinstance(body.get("error"), str):
        return body["error"]
    return fallback


class AdminClient:
    """
    Talks to the CMS API with the session cookie kept in the underlying httpx client.

    base_url includes the API prefix, e.g. "http://localhost:3000/api".
    """

    def __init__(
        self,
        base_url: str,
        *,
        throttle: LoginThrottle | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        timeout: float = DEFAULT_TIMEOUT_SEC,
        min_password_length: int = MIN_PASSWORD_LENGTH,
    ) -> None:
        self.throttle = throttle or LoginThrottle()
        self.min_password_length = min_password_length
        self.current_user: dict[str, Any] | None = None
        self.must_change_password = False
        self._client = httpx.AsyncClient(
            base_url=base_url,
            transport=transport,
            timeout=httpx.Timeout(timeout),
        )

    async def __aenter__(self) -> AdminClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def login(self, username: str, password: str) -> LoginOutcome:
        """
        Log in and keep the session cookie.

        Raises LoginLockedError while the throttle is engaged, AdminApiError on rejection.
        Any failed attempt (rejection or network error) counts toward the throttle.
        """
        if self.throttle.is_locked():
            raise LoginLockedError(self.throttle.remaining_seconds())
        try:
            resp = await self._client.post(
                "/auth/login", json={"username": username, "password": password}
            )
        except httpx.HTTPError as e:
            self.throttle.record_failure()
            logger.warning("Login request failed: %s", e)
            raise AdminApiError("Network error") from e
        if resp.status_code >= 400:
            self.throttle.record_failure()
            raise AdminApiError(_error_message(resp, "Login failed"), resp.status_code)

        self.throttle.record_success()
        data = resp.json()
        self.current_user = data["user"]
        self.must_change_password = bool(data.get("mustChangePassword", False))
        return LoginOutcome(user=self.current_user, must_change_password=self.must_change_password)

    async def logout(self) -> None:
        try:
            await self._client.post("/auth/logout")
        except httpx.HTTPError as e:
            logger.warning("Logout request failed: %s", e)
        self._client.cookies.clear()
        self.current_user = None
        self.must_change_password = False

    async def me(self) -> dict[str, Any] | None:
        """Current identity, or None when the session is missing or expired."""
        resp = await self._client.get("/auth/me")
        if resp.status_code == 401:
            self.current_user = None
            return None
        if resp.status_code >= 400:
            raise AdminApiError(_error_message(resp, "Failed to load session"), resp.status_code)
        data = resp.json()
        self.current_user = data["user"]
        self.must_change_password = bool(data.get("mustChangePassword", False))
        return self.current_user

    def validate_new_password(self, new_password: str, confirm_password: str) -> None:
        if not new_password:
            raise PasswordValidationError("New password is required")
        if len(new_password) < self.min_password_length:
            raise PasswordValidationError(
                f"Password must be at least {self.min_password_length} characters"
            )
        if new_password != confirm_password:
            raise PasswordValidationError("Passwords do not match")

    async def change_password(
        self,
        new_password: str,
        confirm_password: str,
        current_password: str | None = None,
    ) -> None:
        """
        Rotate the password of the logged-in account.

        The current password is only sent when the session is not in forced
        rotation. Server rejections surface the server's message verbatim.
        """
        self.validate_new_password(new_password, confirm_password)
        body: dict[str, str] = {"newPassword": new_password}
        if not self.must_change_password and current_password is not None:
            body["currentPassword"] = current_password
        resp = await self._client.patch("/users/me/password", json=body)
        if resp.status_code >= 400:
            raise AdminApiError(
                _error_message(resp, "Failed to change password"), resp.status_code
            )
        self.must_change_password = False
