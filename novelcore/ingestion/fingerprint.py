"""Content fingerprints for duplicate upload detection."""

import hashlib
import logging
import time

logger = logging.getLogger(__name__)

FALLBACK_HASH_PREFIX = "hash-"


def compute_fingerprint(raw: bytes) -> str:
    """Return the SHA-256 hex digest of ``raw``.

    The digest depends on the bytes only, never on the detected encoding.
    When SHA-256 is unavailable (e.g. blocked by a restricted OpenSSL
    build) a ``hash-<epoch millis>`` value is returned instead.

    Args:
        raw: The raw manuscript bytes.

    Returns:
        64 lowercase hex characters, or the fallback value.
    """
    try:
        return hashlib.sha256(raw).hexdigest()
    except (ValueError, AttributeError):
        logger.warning("SHA-256 unavailable; using timestamp fingerprint", exc_info=True)
        return f"{FALLBACK_HASH_PREFIX}{int(time.time() * 1000)}"


def is_fallback_fingerprint(value: str) -> bool:
    """Tell a timestamp fallback apart from a real digest."""
    return value.startswith(FALLBACK_HASH_PREFIX)
