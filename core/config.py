"""
core/config.py -- Centralized configuration via pydantic-settings.

All environment variable reads for the SSO service happen here. No module
should call os.getenv() directly -- import get_settings() instead.

Design patterns used:
  Singleton via lru_cache: get_settings() instantiates Settings once at first
      call and returns the cached instance on every subsequent call. This is
      the FastAPI dependency injection pattern for config.

  BaseSettings (pydantic-settings): Reads values from environment variables
      and an optional .env file. Field names map to env var names
      (e.g. token_ttl_seconds -> TOKEN_TTL_SECONDS).

Only token_ttl_seconds is consumed by the auth service itself. The remaining
fields belong to process wiring (storage, hashing cost, request deadline,
listen address).

Layer rule: core/ is the kernel. This module may not import from api/ or auth/.
"""

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_DEFAULT_DB_URL = f"sqlite:///{Path(__file__).resolve().parent.parent / 'sso.db'}"


class Settings(BaseSettings):
    """Application settings loaded from environment variables and .env file.

    All fields have defaults so Settings() can be instantiated in tests
    without a real .env file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ------------------------------------------------------------------
    # Core
    # ------------------------------------------------------------------

    # local/dev log at DEBUG, prod at INFO.
    env: Literal["local", "dev", "prod"] = "local"

    # ------------------------------------------------------------------
    # Auth
    # ------------------------------------------------------------------

    token_ttl_seconds: int = 3600
    # bcrypt work factor. Each +1 doubles hashing time.
    bcrypt_rounds: int = 12

    # ------------------------------------------------------------------
    # Storage
    # ------------------------------------------------------------------

    database_url: str = _DEFAULT_DB_URL

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------

    host: str = "127.0.0.1"
    port: int = 44044
    # Per-call deadline applied by the API layer around every service call.
    request_timeout_seconds: float = 5.0

    # ------------------------------------------------------------------
    # Validators
    # ------------------------------------------------------------------

    @field_validator("token_ttl_seconds")
    @classmethod
    def validate_token_ttl(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("TOKEN_TTL_SECONDS must be greater than 0")
        return v

    @field_validator("bcrypt_rounds")
    @classmethod
    def validate_bcrypt_rounds(cls, v: int) -> int:
        # bcrypt.gensalt() accepts 4..31
        if v < 4 or v > 31:
            raise ValueError("BCRYPT_ROUNDS must be between 4 and 31")
        return v

    @field_validator("database_url")
    @classmethod
    def validate_database_url(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("DATABASE_URL must be set and non-empty")
        return v.strip()

    @field_validator("request_timeout_seconds")
    @classmethod
    def validate_request_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("REQUEST_TIMEOUT_SECONDS must be greater than 0")
        return v


@lru_cache
def get_settings() -> Settings:
    """Return the application Settings singleton.

    In tests: call get_settings.cache_clear() between test cases if you need
    to inject different environment variables.
    """
    return Settings()
