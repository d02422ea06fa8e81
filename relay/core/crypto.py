from __future__ import annotations

import base64
import hashlib
from functools import lru_cache

from cryptography.fernet import Fernet

_KEY_CONTEXT = b"relay.session-token.v1:"


def derive_fernet_key(secret: str) -> bytes:
    # Fernet wants 32 urlsafe-base64 bytes; operators configure free-form secrets.
    digest = hashlib.sha256(_KEY_CONTEXT + secret.encode("utf-8")).digest()
    return base64.urlsafe_b64encode(digest)


@lru_cache(maxsize=8)
def _get_fernet(key: bytes) -> Fernet:
    return Fernet(key)


class TokenSigner:
    def __init__(self, secret: str) -> None:
        if not secret:
            raise ValueError("signing secret is required")
        self._fernet = _get_fernet(derive_fernet_key(secret))

    def sign(self, payload: str) -> str:
        return self._fernet.encrypt(payload.encode("utf-8")).decode("ascii")

    def unsign(self, token: str) -> str:
        """Return the payload, raising ``cryptography.fernet.InvalidToken`` on forged or garbled tokens."""
        return self._fernet.decrypt(token.encode("ascii")).decode("utf-8")
