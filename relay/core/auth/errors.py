from __future__ import annotations


class InvalidCredentialError(ValueError):
    pass


class InvalidCodeError(ValueError):
    pass


class InvalidOrExpiredTokenError(ValueError):
    pass


class MalformedSecretError(ValueError):
    pass
