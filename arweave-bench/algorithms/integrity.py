"""
Integrity checks for downloaded payloads.
"""

import hashlib
import logging
from typing import Optional

from configuration import HTML_SNIFF_BYTES, HTML_SIGNATURES

logger = logging.getLogger(__name__)

PASS = "PASS"
FAIL = "FAIL"


def verify_roundtrip(original: bytes, downloaded: bytes) -> str:
    """Byte-exact comparison of the uploaded and downloaded buffers."""
    if len(original) == len(downloaded) and original == downloaded:
        return PASS
    return FAIL


def sha256_hex(data: bytes) -> str:
    """Hex SHA-256 digest of data."""
    return hashlib.sha256(data).hexdigest()


def verify_size(expected_size: int, actual_size: int) -> Optional[bool]:
    """Compare the declared size with what was received.

    Returns None when no size was declared. A mismatch is only a warning.
    """
    if expected_size <= 0:
        return None
    if expected_size == actual_size:
        logger.info(f"✓ Size verification: PASS (matches expected {expected_size} bytes)")
        return True
    logger.warning(f"✗ Size verification: FAIL (expected {expected_size}, got {actual_size} bytes)")
    return False


def looks_like_html(data: bytes, sniff_bytes: int = HTML_SNIFF_BYTES) -> bool:
    """Heuristic: does the start of the payload look like a web page?"""
    head = data[:sniff_bytes].decode("utf-8", errors="replace")
    return any(signature in head for signature in HTML_SIGNATURES)
