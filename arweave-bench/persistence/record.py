"""
Basic data structures for the Arweave benchmark.
"""

from typing import NamedTuple, Tuple


class Measurement(NamedTuple):
    """Timing of one benchmark phase."""
    phase: str
    start_ns: int
    elapsed_ms: int


class PollResult(NamedTuple):
    """Outcome of waiting for the gateway to serve a resource."""
    available: bool
    last_status: str
    elapsed_ms: int
    attempts: int
    waited_ms: int


class DownloadResult(NamedTuple):
    """Bytes and chunk statistics of one streamed download."""
    data: bytes
    chunk_sizes: Tuple[int, ...]
    elapsed_ms: int

    @property
    def total_bytes(self) -> int:
        return len(self.data)

    @property
    def chunk_count(self) -> int:
        return len(self.chunk_sizes)

    @property
    def average_chunk_size_kb(self) -> float:
        if not self.chunk_sizes:
            return 0.0
        return self.total_bytes / self.chunk_count / 1024


class HeadInfo(NamedTuple):
    """Response details of a HEAD probe."""
    ok: bool
    status: int
    status_text: str
    content_type: str
    content_length: int


class TransactionMetadata(NamedTuple):
    """Declared size and decoded tags of a stored transaction."""
    data_size: int
    tags: dict
