"""Human-shareable reservation references like ``BK-LZ8K2Q1A-7F3X``"""
import secrets
import string
from datetime import datetime, timezone
from typing import Optional

DEFAULT_PREFIX = "BK"
SUFFIX_LENGTH = 4

_BASE36 = string.digits + string.ascii_uppercase


def to_base36(number: int) -> str:
    if number < 0:
        raise ValueError("Only non-negative numbers can be encoded")
    if number == 0:
        return "0"
    digits = []
    while number:
        number, remainder = divmod(number, 36)
        digits.append(_BASE36[remainder])
    return "".join(reversed(digits))


def generate_reference(prefix: str = DEFAULT_PREFIX, now: Optional[datetime] = None) -> str:
    """Prefix, base36 epoch milliseconds and a random base36 suffix.

    Uniqueness is only probable here; the reservation store enforces it.
    """
    now = now or datetime.now(timezone.utc)
    millis = int(now.timestamp() * 1000)
    suffix = "".join(secrets.choice(_BASE36) for _ in range(SUFFIX_LENGTH))
    return f"{prefix.upper()}-{to_base36(millis)}-{suffix}"
