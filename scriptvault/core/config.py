"""Application configuration loaded from environment variables."""

from functools import lru_cache
from typing import Literal

from pydantic import SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from scriptvault.core.security import password_problem, username_problem

VALID_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class Settings(BaseSettings):
    """Validated application settings from env and optional .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    APP_ENV: Literal["dev", "prod"] = "dev"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"
    API_PREFIX: str = "/api"

    # Object store: "memory" keeps records in-process (dev/tests), "blob" talks to
    # a Vercel Blob compatible REST API and requires BLOB_READ_WRITE_TOKEN.
    STORAGE_BACKEND: Literal["memory", "blob"] = "memory"
    BLOB_API_URL: str = "https://blob.vercel-storage.com"
    BLOB_READ_WRITE_TOKEN: SecretStr | None = None
    STORAGE_REQUEST_TIMEOUT_SEC: float = 10.0
    STORAGE_RETRY_DELAY_SEC: float = 0.25

    # Sessions live in process memory only; a restart logs everyone out.
    SESSION_TTL_HOURS: int = 24
    SESSION_SWEEP_ENABLED: bool = True
    SESSION_SWEEP_INTERVAL_SEC: int = 3600

    ACCESS_CODE_DEFAULT_VALID_DAYS: int = 30

    # Seed for the default admin; hashed before it is written anywhere.
    ADMIN_USERNAME: str = "daveblunts"
    ADMIN_PASSWORD: SecretStr = SecretStr("escolar112200")

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = (v or "").strip().upper()
        if level not in VALID_LOG_LEVELS:
            raise ValueError(f"LOG_LEVEL must be one of {', '.join(VALID_LOG_LEVELS)}")
        return level

    @field_validator("API_PREFIX")
    @classmethod
    def validate_api_prefix(cls, v: str) -> str:
        prefix = (v or "").strip().rstrip("/")
        if not prefix.startswith("/"):
            raise ValueError("API_PREFIX must start with '/' (e.g. /api)")
        return prefix

    @field_validator("BLOB_API_URL")
    @classmethod
    def validate_blob_api_url(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("BLOB_API_URL must be set and non-empty")
        s = v.strip().lower()
        if not (s.startswith("http://") or s.startswith("https://")):
            raise ValueError(
                "BLOB_API_URL must use http or https (e.g. https://blob.vercel-storage.com)"
            )
        return v.strip().rstrip("/")

    @field_validator("STORAGE_REQUEST_TIMEOUT_SEC")
    @classmethod
    def validate_storage_timeout(cls, v: float) -> float:
        if v <= 0 or v > 120:
            raise ValueError(
                "STORAGE_REQUEST_TIMEOUT_SEC must be greater than 0 and at most 120"
            )
        return v

    @field_validator("STORAGE_RETRY_DELAY_SEC")
    @classmethod
    def validate_storage_retry_delay(cls, v: float) -> float:
        if v < 0 or v > 10:
            raise ValueError("STORAGE_RETRY_DELAY_SEC must be between 0 and 10")
        return v

    @field_validator("SESSION_TTL_HOURS")
    @classmethod
    def validate_session_ttl(cls, v: int) -> int:
        if v < 1 or v > 720:
            raise ValueError("SESSION_TTL_HOURS must be between 1 and 720 (30 days)")
        return v

    @field_validator("SESSION_SWEEP_INTERVAL_SEC")
    @classmethod
    def validate_sweep_interval(cls, v: int) -> int:
        if v < 1 or v > 86400:
            raise ValueError(
                "SESSION_SWEEP_INTERVAL_SEC must be between 1 and 86400 (1 day)"
            )
        return v

    @field_validator("ACCESS_CODE_DEFAULT_VALID_DAYS")
    @classmethod
    def validate_access_code_days(cls, v: int) -> int:
        if v < 1 or v > 365:
            raise ValueError("ACCESS_CODE_DEFAULT_VALID_DAYS must be between 1 and 365")
        return v

    @field_validator("ADMIN_USERNAME")
    @classmethod
    def validate_admin_username(cls, v: str) -> str:
        username = (v or "").strip()
        problem = username_problem(username)
        if problem:
            raise ValueError(f"ADMIN_USERNAME is not a valid username: {problem}")
        return username

    @field_validator("ADMIN_PASSWORD")
    @classmethod
    def validate_admin_password(cls, v: SecretStr) -> SecretStr:
        problem = password_problem(v.get_secret_value())
        if problem:
            raise ValueError(f"ADMIN_PASSWORD is not a valid password: {problem}")
        return v


@lru_cache
def get_settings() -> Settings:
    """Return cached settings instance (safe to call from dependencies)."""
    return Settings()


settings = get_settings()
