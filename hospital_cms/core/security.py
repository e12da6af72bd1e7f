"""Password hashing and JWT creation/verification for cookie authentication."""

import hashlib
import hmac
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Any, Literal

import bcrypt
import jwt

# Bcrypt cost (rounds); 12 is a good default for security vs speed.
BCRYPT_ROUNDS = 12

USERNAME_MIN_LEN = 1
USERNAME_MAX_LEN = 64
# bcrypt only reads the first 72 bytes, so stored passwords are capped there.
PASSWORD_MAX_BYTES = 72
PASSWORD_MAX_LEN = 72

# Credential scheme tags stored next to each hash.
HASH_V1 = "HASH_V1"
HASH_LEGACY = "HASH_LEGACY"
PasswordScheme = Literal["HASH_V1", "HASH_LEGACY"]

_SHA256_HEX_LEN = 64
_dummy_hash: str | None = None


def hash_password(plain_password: str) -> str:
    """Hash a plain-text password for storage. Do not store plain passwords."""
    pw_bytes = plain_password.encode("utf-8")[:PASSWORD_MAX_BYTES]
    return bcrypt.hashpw(pw_bytes, bcrypt.gensalt(rounds=BCRYPT_ROUNDS)).decode("utf-8")


def _verify_legacy(plain_password: str, stored: str) -> bool:
    """Legacy records hold either an unsalted SHA-256 hex digest or the plaintext itself."""
    candidate = plain_password.encode("utf-8")
    if len(stored) == _SHA256_HEX_LEN and all(c in "0123456789abcdefABCDEF" for c in stored):
        digest = hashlib.sha256(candidate).hexdigest()
        return hmac.compare_digest(digest, stored.lower())
    return hmac.compare_digest(candidate, stored.encode("utf-8"))


def verify_password(
    plain_password: str,
    hashed: str,
    scheme: PasswordScheme = HASH_V1,
) -> bool:
    """Verify a plain password against a stored hash using the record's scheme."""
    if not hashed:
        return False
    if scheme == HASH_LEGACY:
        return _verify_legacy(plain_password, hashed)
    pw_bytes = plain_password.encode("utf-8")[:PASSWORD_MAX_BYTES]
    try:
        return bcrypt.checkpw(pw_bytes, hashed.encode("utf-8"))
    except (ValueError, TypeError):
        return False


def needs_rehash(scheme: str) -> bool:
    """True for credentials that must be migrated to HASH_V1 on next successful login."""
    return scheme != HASH_V1


def burn_verification_time(plain_password: str) -> None:
    """Run one bcrypt check against a throwaway hash so unknown users cost the same as known ones."""
    global _dummy_hash
    if _dummy_hash is None:
        _dummy_hash = hash_password("not-a-real-password")
    verify_password(plain_password, _dummy_hash)


class InvalidTokenError(Exception):
    """Raised for any token that cannot be trusted (malformed, bad signature, expired)."""

    def __init__(self) -> None:
        self.message = "Not authenticated"
        super().__init__(self.message)


@dataclass(frozen=True)
class TokenIdentity:
    """Identity claims carried by a verified session token."""

    user_id: str
    username: str
    role: str


class TokenService:
    """Signs and verifies session tokens with a secret fixed at startup."""

    def __init__(self, secret: str, algorithm: str = "HS256", expire_minutes: int = 1440) -> None:
        if not secret or not secret.strip():
            raise ValueError("Token signing secret must be set")
        self._secret = secret
        self.algorithm = algorithm
        self.expire_minutes = expire_minutes

    @property
    def max_age_seconds(self) -> int:
        return self.expire_minutes * 60

    def issue(
        self,
        user_id: str,
        username: str,
        role: str,
        now: datetime | None = None,
    ) -> str:
        """Create a JWT with sub, username, role, iat and exp."""
        issued_at = now or datetime.now(UTC)
        payload: dict[str, Any] = {
            "sub": str(user_id),
            "username": username,
            "role": role,
            "iat": issued_at,
            "exp": issued_at + timedelta(minutes=self.expire_minutes),
        }
        return jwt.encode(payload, self._secret, algorithm=self.algorithm)

    def verify(self, token: str) -> TokenIdentity:
        """
        Decode and validate a token.
        Raises InvalidTokenError for every failure so callers cannot tell the causes apart.
        """
        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[self.algorithm],
                options={"require": ["sub", "exp", "iat"]},
            )
        except jwt.PyJWTError as e:
            raise InvalidTokenError() from e
        sub = payload.get("sub")
        username = payload.get("username")
        role = payload.get("role")
        if not sub or not isinstance(username, str) or not isinstance(role, str):
            raise InvalidTokenError()
        return TokenIdentity(user_id=str(sub), username=username, role=role)
