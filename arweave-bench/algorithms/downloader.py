"""
Streaming downloader for the Arweave benchmark.
"""

import logging
from typing import AsyncIterable, List, NamedTuple, Optional, Tuple

from configuration import PROGRESS_STEP_BYTES, BYTES_PER_MEGABYTE_DECIMAL
from common.timer import Timer
from persistence.record import DownloadResult

logger = logging.getLogger(__name__)


class _Progress(NamedTuple):
    """Accumulator threaded through every read step.

    Chunks are held as a (chunk, previous) chain, newest first, so each step
    is constant time regardless of how many chunks came before.
    """
    received: Optional[Tuple[bytes, "Optional[tuple]"]] = None
    downloaded: int = 0

    def chunks(self) -> List[bytes]:
        """Received chunks in arrival order."""
        chunks = []
        cell = self.received
        while cell is not None:
            chunk, cell = cell
            chunks.append(chunk)
        chunks.reverse()
        return chunks


class StreamingDownloader:
    """Downloads a resource chunk by chunk, reporting progress for large bodies."""

    def __init__(self, progress_step_bytes: int = PROGRESS_STEP_BYTES):
        self.progress_step_bytes = progress_step_bytes

    def _crossed_step(self, downloaded: int, chunk_len: int) -> bool:
        # True when the chunk just received carried the total across a step boundary
        return downloaded % self.progress_step_bytes < chunk_len

    def _step(self, progress: _Progress, chunk: bytes, expected_size: int) -> _Progress:
        """Fold one chunk into the accumulator."""
        if not chunk:
            return progress

        updated = _Progress((chunk, progress.received), progress.downloaded + len(chunk))
        if expected_size > 0 and self._crossed_step(updated.downloaded, len(chunk)):
            percent = updated.downloaded / expected_size * 100
            downloaded_mb = updated.downloaded / BYTES_PER_MEGABYTE_DECIMAL
            logger.info(f"Downloaded: {downloaded_mb:.2f} MB ({percent:.1f}%)")
        return updated

    async def accumulate(self, chunks: AsyncIterable[bytes], expected_size: int = 0) -> DownloadResult:
        """Consume an async chunk stream into a single buffer.

        Args:
            chunks: Async iterable yielding body chunks; exhaustion ends the download
            expected_size: Declared total size in bytes, 0 if unknown

        Returns:
            DownloadResult with the concatenated data, per-chunk sizes and the
            elapsed time of the whole retrieval
        """
        progress = _Progress()
        with Timer("download") as timer:
            async for chunk in chunks:
                progress = self._step(progress, chunk, expected_size)
            chunks = progress.chunks()
            data = b"".join(chunks)

        return DownloadResult(
            data=data,
            chunk_sizes=tuple(len(c) for c in chunks),
            elapsed_ms=timer.elapsed_ms,
        )

    async def download(self, gateway, url: str, expected_size: int = 0) -> DownloadResult:
        """Stream url through the gateway client.

        The elapsed time covers the request itself as well as the body.

        Raises:
            DownloadError: If the initial response is not a success
        """
        with Timer("download") as timer:
            async with gateway.open_stream(url) as chunks:
                result = await self.accumulate(chunks, expected_size)

        return result._replace(elapsed_ms=timer.elapsed_ms)
