from __future__ import annotations

import logging

import pytest

from relay.core.config.settings import get_settings
from relay.core.config.startup_log import StartupEnvSnapshot, _redact_value, log_startup_config

pytestmark = pytest.mark.unit


@pytest.mark.parametrize(
    "key",
    ["RELAY_API_KEY", "RELAY_TOTP_SEED", "RELAY_SESSION_SIGNING_KEY", "api_key", "totp_seed", "session_signing_key"],
)
def test_secrets_are_redacted(key: str) -> None:
    assert _redact_value(key, "value") == "***"


def test_non_secret_values_are_kept() -> None:
    assert _redact_value("RELAY_TOTP_ISSUER", "relay") == "relay"
    assert _redact_value("session_ttl_seconds", 43200) == 43200
    assert _redact_value("api_key", None) is None


def test_env_snapshot_only_collects_relay_variables(monkeypatch) -> None:
    monkeypatch.setenv("RELAY_TOTP_ISSUER", "acme")
    monkeypatch.setenv("UNRELATED_VARIABLE", "x")
    snapshot = StartupEnvSnapshot.from_process_env()
    assert snapshot.values["RELAY_TOTP_ISSUER"] == "acme"
    assert "UNRELATED_VARIABLE" not in snapshot.values


def test_startup_log_never_prints_secrets(monkeypatch, caplog) -> None:
    monkeypatch.setenv("RELAY_STARTUP_LOG_CONFIG", "true")
    monkeypatch.setenv("RELAY_STARTUP_LOG_ENV", "true")
    get_settings.cache_clear()

    with caplog.at_level(logging.INFO, logger="relay.core.config.startup_log"):
        log_startup_config()

    assert "Startup settings snapshot:" in caplog.text
    assert "test-api-key" not in caplog.text
    assert "GEZDGNBVGY3TQOJQGEZDGNBVGY3TQOJQ" not in caplog.text


def test_startup_log_warns_when_auth_is_unconfigured(monkeypatch, caplog) -> None:
    monkeypatch.delenv("RELAY_API_KEY", raising=False)
    monkeypatch.delenv("RELAY_TOTP_SEED", raising=False)
    get_settings.cache_clear()

    with caplog.at_level(logging.WARNING, logger="relay.core.config.startup_log"):
        log_startup_config()

    assert "RELAY_API_KEY is not set" in caplog.text
    assert "RELAY_TOTP_SEED is not set" in caplog.text
