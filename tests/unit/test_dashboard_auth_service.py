from __future__ import annotations

import pytest

from relay.core.auth.errors import InvalidCodeError, InvalidCredentialError
from relay.core.config.settings import Settings
from relay.modules.dashboard_auth.service import TOTP_STEP, DashboardAuthService, TotpNotConfiguredError
from relay.modules.dashboard_auth.types import AuthDecision, AuthScheme, Credentials

pytestmark = pytest.mark.unit

API_KEY = "operator-key"
SEED = "GEZDGNBVGY3TQOJQGEZDGNBVGY3TQOJQ"
# Step 5 of the RFC 4226 seed; neighbours are 338314 (step 4) and 287922 (step 6).
NOW = 5 * 30


def _service(**overrides) -> DashboardAuthService:
    values = {"api_key": API_KEY, "totp_seed": SEED}
    values.update(overrides)
    return DashboardAuthService(Settings(**values))


def test_correct_key_without_code_requests_totp() -> None:
    result = _service().login(API_KEY, None, now_epoch=NOW)
    assert result.ok is True
    assert result.step == TOTP_STEP
    assert result.token is None


@pytest.mark.parametrize("key", [None, "", "wrong", API_KEY.upper()])
def test_wrong_key_is_rejected(key) -> None:
    with pytest.raises(InvalidCredentialError):
        _service().login(key, None, now_epoch=NOW)


def test_wrong_key_is_rejected_before_the_code_is_checked() -> None:
    with pytest.raises(InvalidCredentialError):
        _service().login("wrong", "254676", now_epoch=NOW)


def test_valid_code_issues_a_verifiable_token(monkeypatch) -> None:
    import relay.modules.dashboard_auth.sessions as sessions_module

    monkeypatch.setattr(sessions_module, "time", lambda: NOW)
    service = _service()
    result = service.login(API_KEY, "254676", now_epoch=NOW)
    assert result.ok is True
    assert result.token
    assert service.sessions is not None
    assert service.sessions.verify(result.token, now_epoch=NOW) is AuthDecision.ALLOW

    outcome = service.authorize(Credentials(session_token=result.token))
    assert outcome.scheme is AuthScheme.SESSION_TOKEN


@pytest.mark.parametrize("code", ["969429", "162583", "000000", "abc"])
def test_invalid_code_is_rejected(code: str) -> None:
    with pytest.raises(InvalidCodeError):
        _service().login(API_KEY, code, now_epoch=NOW)


def test_configured_window_is_honoured() -> None:
    with pytest.raises(InvalidCodeError):
        _service(totp_window=0).login(API_KEY, "338314", now_epoch=NOW)
    assert _service(totp_window=2).login(API_KEY, "969429", now_epoch=NOW).token


def test_login_without_seed_rejects_codes() -> None:
    service = _service(totp_seed=None)
    assert service.login(API_KEY, None).step == TOTP_STEP
    with pytest.raises(InvalidCodeError):
        service.login(API_KEY, "254676", now_epoch=NOW)


def test_setup_gate_only_accepts_the_raw_key() -> None:
    service = _service()
    token = service.login(API_KEY, "254676", now_epoch=NOW).token
    assert service.authorize_setup(Credentials(session_token=token)).allowed is False
    assert service.authorize_setup(Credentials(api_key=API_KEY)).allowed is True


def test_provisioning_uri_uses_configured_labels() -> None:
    uri = _service(totp_issuer="Acme", totp_account="ops").provisioning_uri()
    assert uri == f"otpauth://totp/Acme:ops?secret={SEED}&issuer=Acme&algorithm=SHA1&digits=6&period=30"


def test_provisioning_uri_requires_seed() -> None:
    with pytest.raises(TotpNotConfiguredError):
        _service(totp_seed=None).provisioning_uri()


def test_setup_page_embeds_seed_and_qr_code() -> None:
    page = _service().setup_page()
    assert SEED in page
    assert "data:image/svg+xml;base64," in page
