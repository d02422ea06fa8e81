from __future__ import annotations

import hmac
from collections.abc import Sequence
from typing import Protocol

from fastapi import Request

from relay.modules.dashboard_auth.sessions import SessionTokenService
from relay.modules.dashboard_auth.types import AuthDecision, AuthorizationOutcome, AuthScheme, Credentials

SESSION_TOKEN_HEADER = "X-Session-Token"
API_KEY_HEADER = "X-Api-Key"
API_KEY_QUERY_PARAM = "key"
DASHBOARD_SESSION_COOKIE = "relay_session"


class CredentialStrategy(Protocol):
    scheme: AuthScheme

    def evaluate(self, credentials: Credentials) -> AuthDecision: ...


class SessionTokenStrategy:
    scheme = AuthScheme.SESSION_TOKEN

    def __init__(self, sessions: SessionTokenService | None) -> None:
        self._sessions = sessions

    def evaluate(self, credentials: Credentials) -> AuthDecision:
        if not credentials.session_token:
            return AuthDecision.INDETERMINATE
        if self._sessions is None:
            return AuthDecision.DENY
        return self._sessions.verify(credentials.session_token)


class ApiKeyStrategy:
    scheme = AuthScheme.API_KEY

    def __init__(self, api_key: str | None) -> None:
        self._api_key = api_key

    def evaluate(self, credentials: Credentials) -> AuthDecision:
        if not credentials.api_key:
            return AuthDecision.INDETERMINATE
        if api_key_matches(self._api_key, credentials.api_key):
            return AuthDecision.ALLOW
        return AuthDecision.DENY


class AuthorizationGate:
    """Runs credential strategies in order; the first ALLOW wins, otherwise DENY."""

    def __init__(self, strategies: Sequence[CredentialStrategy]) -> None:
        self._strategies = tuple(strategies)

    def authorize(self, credentials: Credentials) -> AuthorizationOutcome:
        for strategy in self._strategies:
            if strategy.evaluate(credentials) is AuthDecision.ALLOW:
                return AuthorizationOutcome(decision=AuthDecision.ALLOW, scheme=strategy.scheme)
        return AuthorizationOutcome(decision=AuthDecision.DENY)


def build_request_gate(sessions: SessionTokenService | None, api_key: str | None) -> AuthorizationGate:
    return AuthorizationGate([SessionTokenStrategy(sessions), ApiKeyStrategy(api_key)])


def build_setup_gate(api_key: str | None) -> AuthorizationGate:
    # Setup bootstraps the TOTP seed, so a session can never exist yet.
    return AuthorizationGate([ApiKeyStrategy(api_key)])


def api_key_matches(expected: str | None, provided: str | None) -> bool:
    if not expected or not provided:
        return False
    return hmac.compare_digest(expected.encode("utf-8"), provided.encode("utf-8"))


def credentials_from_request(request: Request, *, allow_query_key: bool = True) -> Credentials:
    token = request.headers.get(SESSION_TOKEN_HEADER) or _bearer_token(request)
    if not token:
        token = request.cookies.get(DASHBOARD_SESSION_COOKIE)
    api_key = request.headers.get(API_KEY_HEADER)
    if not api_key and allow_query_key:
        api_key = request.query_params.get(API_KEY_QUERY_PARAM)
    return Credentials(session_token=token or None, api_key=api_key or None)


def _bearer_token(request: Request) -> str | None:
    authorization = request.headers.get("Authorization", "")
    scheme, _, value = authorization.partition(" ")
    if scheme.lower() != "bearer":
        return None
    return value.strip() or None
