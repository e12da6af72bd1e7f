"""Application configuration loaded from environment variables."""

from functools import lru_cache
from typing import Literal

from pydantic import SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Allowed URL schemes for DATABASE_URL (module-level so validators can use it).
VALID_DATABASE_URL_PREFIXES = (
    "postgresql://",
    "postgresql+psycopg2://",
    "postgres://",
    "postgres+psycopg2://",
    "sqlite://",
    "sqlite+pysqlite://",
)


class Settings(BaseSettings):
    """Validated application settings from env and optional .env file.

    DATABASE_URL and JWT_SECRET have no defaults: constructing Settings without
    them raises, so the API never starts half-configured.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    APP_ENV: Literal["dev", "test", "prod"] = "dev"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"
    API_PREFIX: str = "/api"
    CORS_ORIGINS: list[str] = ["http://localhost:5173"]

    DATABASE_URL: str

    # JWT carried in an HTTP-only cookie
    JWT_SECRET: SecretStr
    JWT_ALGORITHM: str = "HS256"
    JWT_EXPIRE_MINUTES: int = 1440
    AUTH_COOKIE_NAME: str = "token"
    # Honour X-Forwarded-Proto / X-Forwarded-For; enable only behind a known reverse proxy.
    TRUST_PROXY_HEADERS: bool = False

    PASSWORD_MIN_LENGTH: int = 6
    # When True, accounts flagged must_change_password can only rotate their password.
    ENFORCE_PASSWORD_ROTATION: bool = True

    # Server-side per-account lockout
    ACCOUNT_LOCKOUT_THRESHOLD: int = 5
    ACCOUNT_LOCKOUT_MINUTES: int = 15

    # Per-IP rate limits (sliding window)
    AUTH_RATE_LIMIT_MAX_ATTEMPTS: int = 10
    AUTH_RATE_LIMIT_WINDOW_SECONDS: int = 900
    API_RATE_LIMIT_MAX_REQUESTS: int = 300
    API_RATE_LIMIT_WINDOW_SECONDS: int = 900

    @field_validator("DATABASE_URL")
    @classmethod
    def validate_database_url(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("DATABASE_URL must be set and non-empty")
        if not any(v.strip().startswith(prefix) for prefix in VALID_DATABASE_URL_PREFIXES):
            raise ValueError(
                "DATABASE_URL must be a PostgreSQL or SQLite URL "
                "(e.g. postgresql+psycopg2:// or sqlite://)"
            )
        return v.strip()

    @field_validator("JWT_SECRET")
    @classmethod
    def validate_jwt_secret(cls, v: SecretStr) -> SecretStr:
        if not v.get_secret_value() or not v.get_secret_value().strip():
            raise ValueError("JWT_SECRET must be set and non-empty")
        return v

    @field_validator("JWT_ALGORITHM")
    @classmethod
    def validate_jwt_algorithm(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("JWT_ALGORITHM must be set and non-empty")
        return v.strip()

    @field_validator("JWT_EXPIRE_MINUTES")
    @classmethod
    def validate_jwt_expire_minutes(cls, v: int) -> int:
        if v < 1 or v > 10080:
            raise ValueError(
                "JWT_EXPIRE_MINUTES must be between 1 and 10080 (1 min to 7 days)"
            )
        return v

    @field_validator("AUTH_COOKIE_NAME")
    @classmethod
    def validate_cookie_name(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("AUTH_COOKIE_NAME must be set and non-empty")
        return v.strip()

    @field_validator("PASSWORD_MIN_LENGTH")
    @classmethod
    def validate_password_min_length(cls, v: int) -> int:
        if v < 6 or v > 72:
            raise ValueError("PASSWORD_MIN_LENGTH must be between 6 and 72")
        return v

    @field_validator("ACCOUNT_LOCKOUT_THRESHOLD")
    @classmethod
    def validate_lockout_threshold(cls, v: int) -> int:
        if v < 1 or v > 100:
            raise ValueError("ACCOUNT_LOCKOUT_THRESHOLD must be between 1 and 100")
        return v

    @field_validator("ACCOUNT_LOCKOUT_MINUTES")
    @classmethod
    def validate_lockout_minutes(cls, v: int) -> int:
        if v < 1 or v > 1440:
            raise ValueError("ACCOUNT_LOCKOUT_MINUTES must be between 1 and 1440")
        return v

    @field_validator(
        "AUTH_RATE_LIMIT_MAX_ATTEMPTS",
        "AUTH_RATE_LIMIT_WINDOW_SECONDS",
        "API_RATE_LIMIT_MAX_REQUESTS",
        "API_RATE_LIMIT_WINDOW_SECONDS",
    )
    @classmethod
    def validate_rate_limit(cls, v: int) -> int:
        if v < 1 or v > 100_000:
            raise ValueError("Rate limit values must be between 1 and 100000")
        return v

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.strip().upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError("LOG_LEVEL must be one of DEBUG, INFO, WARNING, ERROR, CRITICAL")
        return level


@lru_cache
def get_settings() -> Settings:
    """Return cached settings instance; raises if required variables are missing."""
    return Settings()
