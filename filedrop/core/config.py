"""Application configuration loaded from environment variables."""

from functools import lru_cache
from typing import Literal

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Allowed URL schemes for DATABASE_URL (module-level so validators can use it).
VALID_DATABASE_URL_PREFIXES = (
    "postgresql://",
    "postgresql+psycopg2://",
    "postgres://",
    "mysql+pymysql://",
    "sqlite://",
)


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
    API_V1_PREFIX: str = "/api/v1"

    # Required: there is no usable default store.
    DATABASE_URL: str

    # Connection pool: requests beyond POOL_SIZE + MAX_OVERFLOW wait up to POOL_TIMEOUT.
    DB_POOL_SIZE: int = 5
    DB_MAX_OVERFLOW: int = 0
    DB_POOL_TIMEOUT_SEC: float = 30.0

    # Uploaded bytes live on local disk; only metadata goes to the database.
    UPLOAD_DIR: str = "./uploads"
    MAX_UPLOAD_BYTES: int = 50 * 1024 * 1024

    # Only enable behind a reverse proxy that overwrites X-Forwarded-For.
    TRUST_FORWARDED_FOR: bool = False

    # Entropy for generated API keys, in bytes before urlsafe-base64 encoding.
    API_KEY_BYTES: int = 32

    @field_validator("DATABASE_URL")
    @classmethod
    def validate_database_url(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("DATABASE_URL must be set and non-empty")
        v = v.strip()
        if not any(v.startswith(prefix) for prefix in VALID_DATABASE_URL_PREFIXES):
            raise ValueError(
                "DATABASE_URL must be a PostgreSQL, MySQL (mysql+pymysql://) or SQLite URL"
            )
        # SQLAlchemy no longer accepts the postgres:// alias.
        if v.startswith("postgres://"):
            v = "postgresql://" + v[len("postgres://"):]
        return v

    @field_validator("DB_POOL_SIZE")
    @classmethod
    def validate_pool_size(cls, v: int) -> int:
        if v < 1 or v > 100:
            raise ValueError("DB_POOL_SIZE must be between 1 and 100")
        return v

    @field_validator("DB_MAX_OVERFLOW")
    @classmethod
    def validate_max_overflow(cls, v: int) -> int:
        if v < 0 or v > 100:
            raise ValueError("DB_MAX_OVERFLOW must be between 0 and 100")
        return v

    @field_validator("DB_POOL_TIMEOUT_SEC")
    @classmethod
    def validate_pool_timeout(cls, v: float) -> float:
        if v <= 0 or v > 300:
            raise ValueError(
                "DB_POOL_TIMEOUT_SEC must be greater than 0 and at most 300"
            )
        return v

    @field_validator("UPLOAD_DIR")
    @classmethod
    def validate_upload_dir(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("UPLOAD_DIR must be set and non-empty")
        return v.strip()

    @field_validator("MAX_UPLOAD_BYTES")
    @classmethod
    def validate_max_upload_bytes(cls, v: int) -> int:
        if v < 1 or v > 5 * 1024 * 1024 * 1024:
            raise ValueError("MAX_UPLOAD_BYTES must be between 1 byte and 5 GiB")
        return v

    @field_validator("API_KEY_BYTES")
    @classmethod
    def validate_api_key_bytes(cls, v: int) -> int:
        # 96 bytes encode to 128 chars, the width of users.api_key.
        if v < 16 or v > 96:
            raise ValueError("API_KEY_BYTES must be between 16 and 96")
        return v


@lru_cache
def get_settings() -> Settings:
    """Return cached settings instance (safe to call from dependencies)."""
    return Settings()


settings = get_settings()
