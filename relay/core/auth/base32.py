from __future__ import annotations

from relay.core.auth.errors import MalformedSecretError

BASE32_ALPHABET = "ABCDEFGHIJKLMNOPQRSTUVWXYZ234567"

_SYMBOL_VALUES = {symbol: index for index, symbol in enumerate(BASE32_ALPHABET)}
# Residues of len(text) % 8 that cannot come out of a base32 encoder.
_INVALID_LENGTH_RESIDUES = frozenset({1, 3, 6})


def normalize_base32(text: str) -> str:
    return "".join(text.split()).upper().rstrip("=")


def decode_base32(text: str) -> bytes:
    """Decode base32 text without ever failing.

    Symbols outside ``A-Z2-7`` are skipped and trailing bits that do not
    fill a whole byte are dropped, so damaged input decodes to a shorter
    (possibly empty) key instead of raising.
    """
    buffer = 0
    bits = 0
    out = bytearray()
    for symbol in text.rstrip("=").upper():
        value = _SYMBOL_VALUES.get(symbol)
        if value is None:
            continue
        buffer = ((buffer << 5) | value) & 0xFFFF
        bits += 5
        if bits >= 8:
            bits -= 8
            out.append((buffer >> bits) & 0xFF)
    return bytes(out)


def decode_base32_strict(text: str) -> bytes:
    """Decode base32 text, raising ``MalformedSecretError`` on anything suspicious.

    Whitespace, letter case and trailing ``=`` padding are tolerated.
    """
    compact = normalize_base32(text)
    if not compact:
        raise MalformedSecretError("base32 secret is empty")
    invalid = sorted({symbol for symbol in compact if symbol not in _SYMBOL_VALUES})
    if invalid:
        raise MalformedSecretError(f"base32 secret contains invalid characters: {''.join(invalid)!r}")
    if len(compact) % 8 in _INVALID_LENGTH_RESIDUES:
        raise MalformedSecretError(f"base32 secret has an invalid length ({len(compact)})")
    return decode_base32(compact)
