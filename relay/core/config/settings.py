from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from relay.core.auth.base32 import decode_base32_strict, normalize_base32

BASE_DIR = Path(__file__).resolve().parents[3]

DEFAULT_SESSION_TTL_SECONDS = 12 * 60 * 60


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="RELAY_",
        env_file=(BASE_DIR / ".env", BASE_DIR / ".env.local"),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Shared operator secret. Accepted as a raw API credential and, unless
    # `session_signing_key` is set, used to sign dashboard session tokens.
    api_key: str | None = None
    totp_seed: str | None = None
    session_signing_key: str | None = None
    session_ttl_seconds: int = Field(default=DEFAULT_SESSION_TTL_SECONDS, gt=0)
    totp_window: int = Field(default=1, ge=0)
    totp_issuer: str = "relay"
    totp_account: str = "dashboard"
    access_log_enabled: bool = False
    startup_log_config: bool = False
    startup_log_env: bool = False

    @field_validator("api_key", "session_signing_key", mode="before")
    @classmethod
    def _blank_secret_is_unset(cls, value: object) -> object:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @field_validator("totp_seed", mode="before")
    @classmethod
    def _validate_totp_seed(cls, value: object) -> str | None:
        if value is None:
            return None
        if not isinstance(value, str):
            raise TypeError("totp_seed must be a base32 string")
        if not value.strip():
            return None
        # Request paths decode permissively; reject typos here, before serving.
        decode_base32_strict(value)
        return normalize_base32(value)

    @property
    def session_key(self) -> str | None:
        return self.session_signing_key or self.api_key


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
