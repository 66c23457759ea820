"""
Revision token and clock helpers.

Revision ids are opaque to callers. The default scheme mirrors the
creation instant plus a short random suffix, which keeps tokens roughly
sortable by creation time. Uniqueness is probabilistic; the uuid scheme
trades sortability for collision resistance.
"""

import secrets
import string
import time
import uuid
from typing import Optional

from .config import get_settings

REVISION_ID_PREFIX = "rev"
SUFFIX_LENGTH = 9

_BASE36_ALPHABET = string.digits + string.ascii_lowercase


def now_ms() -> int:
    """Current wall-clock time in milliseconds since the epoch."""
    return time.time_ns() // 1_000_000


def random_suffix(length: int = SUFFIX_LENGTH) -> str:
    """Random lowercase base36 string of the given length."""
    return "".join(secrets.choice(_BASE36_ALPHABET) for _ in range(length))


def generate_revision_id(
    timestamp_ms: Optional[int] = None,
    scheme: Optional[str] = None,
) -> str:
    """
    Mint a new revision token.

    Args:
        timestamp_ms: Creation instant to embed (defaults to now)
        scheme: "timestamp" or "uuid" (defaults to settings.revision_id_scheme)

    Returns:
        Token such as ``rev_1718000000000_k3j9x0a2b``
    """
    scheme = scheme or get_settings().revision_id_scheme

    if scheme == "uuid":
        return f"{REVISION_ID_PREFIX}_{uuid.uuid4().hex}"
    if scheme != "timestamp":
        raise ValueError(f"Unknown revision id scheme: {scheme}")

    if timestamp_ms is None:
        timestamp_ms = now_ms()
    return f"{REVISION_ID_PREFIX}_{timestamp_ms}_{random_suffix()}"
