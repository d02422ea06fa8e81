from __future__ import annotations

import argparse
import copy
import os

import uvicorn
import uvicorn.config
from pydantic import ValidationError

from relay.core.auth.totp import build_otpauth_uri, generate_totp_code, generate_totp_secret
from relay.core.config.settings import Settings, get_settings


def _build_log_config(settings: Settings) -> dict:
    # Uvicorn's default LOGGING_CONFIG does not attach handlers to the `relay.*` logger namespace.
    # Ensure application logs are visible on stdout without enabling noisy root logging.
    config = copy.deepcopy(uvicorn.config.LOGGING_CONFIG)
    loggers = config.setdefault("loggers", {})
    loggers["relay"] = {
        "handlers": ["default"],
        "level": "INFO",
        "propagate": False,
    }
    return config


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run the relay API server.")
    parser.add_argument("--host", default=os.getenv("HOST", "127.0.0.1"))
    parser.add_argument("--port", type=int, default=int(os.getenv("PORT", "3000")))
    parser.add_argument("--ssl-certfile", default=os.getenv("SSL_CERTFILE"))
    parser.add_argument("--ssl-keyfile", default=os.getenv("SSL_KEYFILE"))

    subparsers = parser.add_subparsers(dest="command")

    seed = subparsers.add_parser(
        "generate-seed",
        help="Print a new random base32 TOTP seed for RELAY_TOTP_SEED.",
    )
    seed.add_argument(
        "--bytes",
        type=int,
        default=20,
        help="Seed length in raw bytes (default: 20).",
    )

    subparsers.add_parser(
        "provisioning-uri",
        help="Print the otpauth:// URI for the configured RELAY_TOTP_SEED.",
    )
    subparsers.add_parser(
        "totp-code",
        help="Print the current TOTP code for the configured RELAY_TOTP_SEED.",
    )

    return parser.parse_args(argv)


def _load_settings() -> Settings:
    try:
        return get_settings()
    except ValidationError as exc:
        raise SystemExit(f"Invalid relay configuration:\n{exc}") from exc


def _require_seed(settings: Settings) -> str:
    if settings.totp_seed is None:
        raise SystemExit("RELAY_TOTP_SEED is not set.")
    return settings.totp_seed


def main(argv: list[str] | None = None) -> None:
    args = _parse_args(argv)

    if args.command is None:
        settings = _load_settings()
        if bool(args.ssl_certfile) ^ bool(args.ssl_keyfile):
            raise SystemExit("Both --ssl-certfile and --ssl-keyfile must be provided together.")

        uvicorn.run(
            "relay.main:app",
            host=args.host,
            port=args.port,
            ssl_certfile=args.ssl_certfile,
            ssl_keyfile=args.ssl_keyfile,
            log_config=_build_log_config(settings),
            access_log=settings.access_log_enabled,
        )
        return

    if args.command == "generate-seed":
        try:
            print(generate_totp_secret(args.bytes))
        except ValueError as exc:
            raise SystemExit(str(exc)) from exc
        return

    if args.command == "provisioning-uri":
        settings = _load_settings()
        seed = _require_seed(settings)
        print(build_otpauth_uri(seed, account_name=settings.totp_account, issuer=settings.totp_issuer))
        return

    if args.command == "totp-code":
        print(generate_totp_code(_require_seed(_load_settings())))
        return

    raise SystemExit(f"Unknown command: {args.command}")


if __name__ == "__main__":
    main()
