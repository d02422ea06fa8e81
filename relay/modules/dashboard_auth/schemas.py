from __future__ import annotations

from pydantic import BaseModel, ConfigDict, field_validator

from relay.core.auth.totp import TOTP_DIGITS
from relay.modules.shared.schemas import DashboardModel


class AuthRequest(BaseModel):
    model_config = ConfigDict(extra="ignore")

    key: str | None = None
    code: str | None = None

    @field_validator("key", mode="before")
    @classmethod
    def _coerce_key(cls, value: object) -> str | None:
        if isinstance(value, str):
            return value
        if isinstance(value, int | float) and not isinstance(value, bool):
            return str(value)
        # Anything else can never equal the shared key.
        return None

    @field_validator("code", mode="before")
    @classmethod
    def _coerce_code(cls, value: object) -> str | None:
        if value is None or isinstance(value, str):
            return value
        if isinstance(value, int) and not isinstance(value, bool) and value >= 0:
            # JSON numbers lose leading zeros: 12345 was typed as "012345".
            return f"{value:0{TOTP_DIGITS}d}"
        return ""


class AuthResponse(BaseModel):
    ok: bool
    step: str | None = None
    token: str | None = None


class DashboardAuthSessionResponse(DashboardModel):
    authenticated: bool
    scheme: str
    expires_at: int | None = None
