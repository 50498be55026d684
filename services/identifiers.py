"""Opaque applicant identifiers."""
from __future__ import annotations

import secrets
import string
import time

ID_PREFIX = "APP"
RANDOM_LENGTH = 8

_ALPHABET = string.digits + string.ascii_uppercase


def _to_base36(value: int) -> str:
    if value == 0:
        return "0"
    digits = []
    while value:
        value, remainder = divmod(value, 36)
        digits.append(_ALPHABET[remainder])
    return "".join(reversed(digits))


def generate_anonymous_id() -> str:
    """Return a fresh identifier: prefix, base-36 milliseconds, random suffix.

    The random suffix carries about 41 bits of entropy, so two calls in the same
    millisecond collide with negligible probability. Uniqueness is still enforced
    by the store.
    """

    timestamp = _to_base36(time.time_ns() // 1_000_000)
    suffix = "".join(secrets.choice(_ALPHABET) for _ in range(RANDOM_LENGTH))
    return f"{ID_PREFIX}{timestamp}{suffix}"


def normalize_anonymous_id(value: str) -> str:
    return value.strip().upper()
