"""
Common utilities for the Arweave benchmark.
"""

from .errors import (
    BenchmarkError,
    DownloadError,
    GatewayError,
    SizeFormatError,
    UploadError,
    WalletError,
)
from .sizes import parse_size, generate_payload
from .timer import Timer, now, elapsed_ms

__all__ = [
    'BenchmarkError', 'DownloadError', 'GatewayError', 'SizeFormatError',
    'UploadError', 'WalletError', 'parse_size', 'generate_payload',
    'Timer', 'now', 'elapsed_ms',
]
