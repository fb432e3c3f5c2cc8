from __future__ import annotations
import secrets
import time

# Crockford base32, lowercased
_ALPHABET = "0123456789abcdefghjkmnpqrstvwxyz"
_TS_CHARS = 10
_RAND_BITS = 110
_RAND_CHARS = 22


def _b32(value: int, width: int) -> str:
    out = []
    for _ in range(width):
        out.append(_ALPHABET[value & 0x1F])
        value >>= 5
    return "".join(reversed(out))


def new_id() -> str:
    """
    Time-prefixed record id: 10 chars of millisecond timestamp + 22 chars
    of random bits. Lexicographic order roughly follows creation time.
    """
    ts_ms = int(time.time() * 1000) & ((1 << 48) - 1)
    return _b32(ts_ms, _TS_CHARS) + _b32(secrets.randbits(_RAND_BITS), _RAND_CHARS)
