from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Final

from relay.core.config.settings import BASE_DIR, Settings, get_settings

logger = logging.getLogger(__name__)

_ENV_PREFIX: Final[str] = "RELAY_"
_REDACT_VALUE: Final[str] = "***"
_SECRET_MARKERS: Final[tuple[str, ...]] = ("API_KEY", "TOTP_SEED", "SIGNING_KEY", "SECRET", "PASSWORD", "TOKEN")


@dataclass(frozen=True, slots=True)
class StartupEnvSnapshot:
    values: dict[str, str | None]

    @classmethod
    def from_process_env(cls) -> StartupEnvSnapshot:
        values: dict[str, str | None] = {}
        for key, value in os.environ.items():
            if key.startswith(_ENV_PREFIX):
                values[key] = value
        return cls(values=values)


def log_startup_config() -> None:
    settings = get_settings()
    _log_auth_readiness(settings)
    if not settings.startup_log_config and not settings.startup_log_env:
        return

    env_files = (BASE_DIR / ".env", BASE_DIR / ".env.local")
    env_file_status = ", ".join(f"{path.name}={'present' if path.exists() else 'missing'}" for path in env_files)
    logger.info("Startup config: env_files=[%s]", env_file_status)

    if settings.startup_log_env:
        _log_env_snapshot(StartupEnvSnapshot.from_process_env())

    if settings.startup_log_config:
        _log_settings(settings)


def _log_auth_readiness(settings: Settings) -> None:
    if settings.api_key is None:
        logger.warning("RELAY_API_KEY is not set; dashboard API requests will be rejected")
    if settings.totp_seed is None:
        logger.warning("RELAY_TOTP_SEED is not set; dashboard login and /setup are unavailable")
    if settings.session_signing_key is None and settings.api_key is not None:
        logger.info("Session tokens are signed with RELAY_API_KEY (RELAY_SESSION_SIGNING_KEY unset)")


def _log_env_snapshot(snapshot: StartupEnvSnapshot) -> None:
    items = sorted(snapshot.values.items(), key=lambda kv: kv[0])
    logger.info("Startup env snapshot (allowlist):")
    for key, value in items:
        if value is None:
            logger.info("  %s=<unset>", key)
            continue
        logger.info("  %s=%s", key, _redact_value(key, value))


def _log_settings(settings: Settings) -> None:
    # `mode="json"` converts Path -> str and other non-JSON types.
    data = settings.model_dump(mode="json")
    items = sorted(data.items(), key=lambda kv: kv[0])
    logger.info("Startup settings snapshot:")
    for key, value in items:
        logger.info("  %s=%s", key, _redact_value(key, value))


def _redact_value(key: str, value: object) -> object:
    if value is None:
        return value
    upper = key.upper()
    if any(marker in upper for marker in _SECRET_MARKERS):
        return _REDACT_VALUE
    return value
