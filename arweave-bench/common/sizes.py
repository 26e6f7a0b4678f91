"""
Size token parsing and payload generation.
"""

import os
import re

from configuration import BYTES_PER_KB, BYTES_PER_MB, BYTES_PER_GB
from common.errors import SizeFormatError

_SIZE_PATTERN = re.compile(r"(\d+)([KMG]?B?)", re.IGNORECASE | re.ASCII)

_UNIT_MULTIPLIERS = {
    "KB": BYTES_PER_KB,
    "MB": BYTES_PER_MB,
    "GB": BYTES_PER_GB,
}


def parse_size(token: str) -> int:
    """Parse a human-readable size token into a byte count.

    Accepts an integer followed by an optional unit (B, KB, MB, GB, case
    insensitive). Units are binary: 1KB is 1024 bytes. A bare K, M or G
    without the trailing B is accepted but counts as plain bytes.

    Args:
        token: Size token such as '500', '10KB' or '1GB'

    Returns:
        Number of bytes

    Raises:
        SizeFormatError: If the token does not match the grammar
    """
    match = _SIZE_PATTERN.fullmatch(token or "")
    if not match:
        raise SizeFormatError("Invalid size, e.g. 512KB, 5MB, 1GB")

    count = int(match.group(1))
    unit = match.group(2).upper()
    return count * _UNIT_MULTIPLIERS.get(unit, 1)


def format_size(num_bytes: int) -> str:
    """Render a byte count with thousands separators, e.g. '10,485,760 bytes'."""
    return f"{num_bytes:,} bytes"


def generate_payload(size_bytes: int) -> bytes:
    """Return a cryptographically random buffer of exactly size_bytes."""
    return os.urandom(size_bytes)
