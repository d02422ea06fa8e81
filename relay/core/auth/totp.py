from __future__ import annotations

import base64
import hashlib
import hmac
import secrets
import struct
from dataclasses import dataclass
from time import time
from urllib.parse import quote

from relay.core.auth.base32 import decode_base32, normalize_base32

TOTP_PERIOD_SECONDS = 30
TOTP_DIGITS = 6

_MAX_COUNTER = 2**64 - 1


@dataclass(frozen=True, slots=True)
class TotpVerificationResult:
    is_valid: bool
    matched_step: int | None


def generate_totp_secret(bytes_length: int = 20) -> str:
    if bytes_length <= 0:
        raise ValueError("bytes_length must be positive")
    raw = secrets.token_bytes(bytes_length)
    return base64.b32encode(raw).decode("ascii").rstrip("=")


def build_otpauth_uri(secret: str, *, account_name: str, issuer: str) -> str:
    normalized_secret = normalize_base32(secret)
    label = f"{quote(issuer, safe='')}:{quote(account_name, safe='')}"
    issuer_quoted = quote(issuer, safe="")
    return (
        f"otpauth://totp/{label}?secret={normalized_secret}&issuer={issuer_quoted}"
        f"&algorithm=SHA1&digits={TOTP_DIGITS}&period={TOTP_PERIOD_SECONDS}"
    )


def generate_hotp_code(key: bytes, counter: int) -> str:
    """RFC 4226 HOTP value for ``counter``, as a zero-padded 6 digit string."""
    if counter < 0 or counter > _MAX_COUNTER:
        raise ValueError("counter must fit in an unsigned 64-bit integer")
    msg = struct.pack(">Q", counter)
    digest = hmac.new(key, msg, hashlib.sha1).digest()
    offset = digest[-1] & 0x0F
    binary = struct.unpack(">I", digest[offset : offset + 4])[0] & 0x7FFFFFFF
    return f"{binary % 10**TOTP_DIGITS:0{TOTP_DIGITS}d}"


def time_step(*, now_epoch: int | float | None = None, period_seconds: int = TOTP_PERIOD_SECONDS) -> int:
    timestamp = time() if now_epoch is None else now_epoch
    return int(timestamp // period_seconds)


def generate_totp_code(seed: str | bytes, *, now_epoch: int | float | None = None) -> str:
    return generate_hotp_code(_seed_key(seed), time_step(now_epoch=now_epoch))


def verify_totp_code(
    seed: str | bytes,
    code: str,
    *,
    window: int = 1,
    now_epoch: int | float | None = None,
) -> TotpVerificationResult:
    # No record of consumed steps is kept: a matching code stays valid for its whole window.
    if window < 0:
        raise ValueError("window must be non-negative")
    normalized_code = "".join(code.split())
    if len(normalized_code) != TOTP_DIGITS or not (normalized_code.isascii() and normalized_code.isdigit()):
        return TotpVerificationResult(is_valid=False, matched_step=None)

    key = _seed_key(seed)
    current_step = time_step(now_epoch=now_epoch)
    for offset in range(-window, window + 1):
        step = current_step + offset
        if step < 0:
            continue
        expected = generate_hotp_code(key, step)
        if hmac.compare_digest(expected, normalized_code):
            return TotpVerificationResult(is_valid=True, matched_step=step)
    return TotpVerificationResult(is_valid=False, matched_step=None)


def _seed_key(seed: str | bytes) -> bytes:
    if isinstance(seed, bytes):
        return seed
    return decode_base32(seed)
