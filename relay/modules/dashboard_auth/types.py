from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class AuthDecision(str, Enum):
    ALLOW = "allow"
    DENY = "deny"
    INDETERMINATE = "indeterminate"


class AuthScheme(str, Enum):
    SESSION_TOKEN = "session_token"
    API_KEY = "api_key"


@dataclass(frozen=True, slots=True)
class Credentials:
    session_token: str | None = None
    api_key: str | None = None


@dataclass(frozen=True, slots=True)
class SessionState:
    expires_at: int


@dataclass(frozen=True, slots=True)
class AuthorizationOutcome:
    decision: AuthDecision
    scheme: AuthScheme | None = None

    @property
    def allowed(self) -> bool:
        return self.decision is AuthDecision.ALLOW


@dataclass(frozen=True, slots=True)
class LoginResult:
    ok: bool
    step: str | None = None
    token: str | None = None
