"""Human-readable order numbers: ``ORD-{epoch millis}-{7 uppercase alnum}``."""

import secrets
import string
import time

PREFIX = "ORD"
SUFFIX_LENGTH = 7
_ALPHABET = string.ascii_uppercase + string.digits


def generate_order_number(now_ms: int | None = None) -> str:
    if now_ms is None:
        now_ms = time.time_ns() // 1_000_000
    suffix = "".join(secrets.choice(_ALPHABET) for _ in range(SUFFIX_LENGTH))
    return f"{PREFIX}-{now_ms}-{suffix}"
