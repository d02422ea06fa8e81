from __future__ import annotations

import base64

import pytest

import relay.core.auth.totp as totp_module
from relay.cli import _build_log_config, main
from relay.core.config.settings import get_settings

pytestmark = pytest.mark.unit


def test_generate_seed_prints_base32(capsys) -> None:
    main(["generate-seed", "--bytes", "10"])
    seed = capsys.readouterr().out.strip()
    assert len(base64.b32decode(seed + "=" * (-len(seed) % 8))) == 10


def test_generate_seed_rejects_non_positive_length() -> None:
    with pytest.raises(SystemExit):
        main(["generate-seed", "--bytes", "0"])


def test_provisioning_uri_uses_configured_labels(monkeypatch, capsys) -> None:
    monkeypatch.setenv("RELAY_TOTP_ISSUER", "Acme Relay")
    get_settings.cache_clear()
    main(["provisioning-uri"])
    uri = capsys.readouterr().out.strip()
    assert uri.startswith("otpauth://totp/Acme%20Relay:dashboard?secret=GEZDGNBVGY3TQOJQGEZDGNBVGY3TQOJQ&")


def test_totp_code_prints_current_code(monkeypatch, capsys) -> None:
    monkeypatch.setattr(totp_module, "time", lambda: 59)
    main(["totp-code"])
    assert capsys.readouterr().out.strip() == "287082"


def test_totp_code_requires_seed(monkeypatch) -> None:
    monkeypatch.delenv("RELAY_TOTP_SEED", raising=False)
    get_settings.cache_clear()
    with pytest.raises(SystemExit):
        main(["totp-code"])


def test_invalid_seed_exits_with_message(monkeypatch) -> None:
    monkeypatch.setenv("RELAY_TOTP_SEED", "%%%%")
    get_settings.cache_clear()
    with pytest.raises(SystemExit) as exc_info:
        main(["provisioning-uri"])
    assert "Invalid relay configuration" in str(exc_info.value)


def test_log_config_routes_relay_logger_to_default_handler() -> None:
    config = _build_log_config(get_settings())
    assert config["loggers"]["relay"]["handlers"] == ["default"]
    assert config["loggers"]["relay"]["propagate"] is False
