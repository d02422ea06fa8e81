from __future__ import annotations

import logging

from relay.core.auth.errors import InvalidCodeError, InvalidCredentialError
from relay.core.auth.totp import build_otpauth_uri, verify_totp_code
from relay.core.config.settings import Settings
from relay.modules.dashboard_auth.gate import (
    AuthorizationGate,
    api_key_matches,
    build_request_gate,
    build_setup_gate,
)
from relay.modules.dashboard_auth.sessions import SessionTokenService
from relay.modules.dashboard_auth.setup_page import render_setup_page
from relay.modules.dashboard_auth.types import AuthorizationOutcome, Credentials, LoginResult

logger = logging.getLogger(__name__)

TOTP_STEP = "totp"


class TotpNotConfiguredError(ValueError):
    pass


class DashboardAuthService:
    def __init__(self, settings: Settings) -> None:
        self._settings = settings
        signing_key = settings.session_key
        self._sessions = (
            SessionTokenService(signing_key, ttl_seconds=settings.session_ttl_seconds) if signing_key else None
        )
        self._request_gate = build_request_gate(self._sessions, settings.api_key)
        self._setup_gate = build_setup_gate(settings.api_key)

    @property
    def sessions(self) -> SessionTokenService | None:
        return self._sessions

    @property
    def request_gate(self) -> AuthorizationGate:
        return self._request_gate

    def login(self, key: str | None, code: str | None, *, now_epoch: int | None = None) -> LoginResult:
        if not api_key_matches(self._settings.api_key, key):
            raise InvalidCredentialError("Invalid key")
        if code is None:
            return LoginResult(ok=True, step=TOTP_STEP)

        seed = self._settings.totp_seed
        if seed is None or self._sessions is None:
            logger.warning("Dashboard login attempted without a configured TOTP seed")
            raise InvalidCodeError("TOTP is not configured")
        verification = verify_totp_code(seed, code, window=self._settings.totp_window, now_epoch=now_epoch)
        if not verification.is_valid:
            raise InvalidCodeError("Invalid TOTP code")
        return LoginResult(ok=True, token=self._sessions.issue(now_epoch=now_epoch))

    def authorize(self, credentials: Credentials) -> AuthorizationOutcome:
        return self._request_gate.authorize(credentials)

    def authorize_setup(self, credentials: Credentials) -> AuthorizationOutcome:
        return self._setup_gate.authorize(credentials)

    def provisioning_uri(self) -> str:
        seed = self._settings.totp_seed
        if seed is None:
            raise TotpNotConfiguredError("TOTP seed is not configured. Set RELAY_TOTP_SEED to enable it.")
        return build_otpauth_uri(
            seed,
            account_name=self._settings.totp_account,
            issuer=self._settings.totp_issuer,
        )

    def setup_page(self) -> str:
        otpauth_uri = self.provisioning_uri()
        return render_setup_page(otpauth_uri, self._settings.totp_seed or "")
