from __future__ import annotations

import json
import logging
from time import time

from cryptography.fernet import InvalidToken

from relay.core.auth.errors import InvalidOrExpiredTokenError
from relay.core.config.settings import DEFAULT_SESSION_TTL_SECONDS
from relay.core.crypto import TokenSigner
from relay.modules.dashboard_auth.types import AuthDecision, SessionState

logger = logging.getLogger(__name__)


class SessionTokenService:
    """Issues and checks stateless dashboard session tokens.

    A token is a Fernet token over ``{"auth": true, "exp": <epoch seconds>}``.
    Nothing is stored server-side, so a token stays valid until ``exp`` even
    after the client logs out.
    """

    def __init__(self, signing_key: str, *, ttl_seconds: int = DEFAULT_SESSION_TTL_SECONDS) -> None:
        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be positive")
        self._signer = TokenSigner(signing_key)
        self._ttl_seconds = ttl_seconds

    @property
    def ttl_seconds(self) -> int:
        return self._ttl_seconds

    def issue(self, *, now_epoch: int | None = None) -> str:
        now = int(time()) if now_epoch is None else int(now_epoch)
        payload = json.dumps({"auth": True, "exp": now + self._ttl_seconds}, separators=(",", ":"))
        return self._signer.sign(payload)

    def state(self, token: str | None, *, now_epoch: int | None = None) -> SessionState | None:
        if not token:
            return None
        token = token.strip()
        if not token:
            return None
        try:
            raw = self._signer.unsign(token)
        except (InvalidToken, UnicodeError):
            return None
        try:
            data = json.loads(raw)
        except ValueError:
            return None
        if not isinstance(data, dict):
            return None
        exp = data.get("exp")
        if data.get("auth") is not True or not isinstance(exp, int) or isinstance(exp, bool):
            return None
        now = int(time()) if now_epoch is None else int(now_epoch)
        if now > exp:
            logger.debug("Session token expired exp=%s now=%s", exp, now)
            return None
        return SessionState(expires_at=exp)

    def verify(self, token: str | None, *, now_epoch: int | None = None) -> AuthDecision:
        if self.state(token, now_epoch=now_epoch) is None:
            return AuthDecision.DENY
        return AuthDecision.ALLOW

    def require(self, token: str | None, *, now_epoch: int | None = None) -> SessionState:
        state = self.state(token, now_epoch=now_epoch)
        if state is None:
            raise InvalidOrExpiredTokenError("Invalid or expired session token")
        return state
