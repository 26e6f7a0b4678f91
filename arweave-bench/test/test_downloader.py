"""
Tests for the streaming downloader.
"""

import unittest
import sys
import os

# Add the parent directory to Python path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from configuration import BYTES_PER_MB
from algorithms.downloader import StreamingDownloader


async def stream(*chunks):
    for chunk in chunks:
        yield chunk


class TestStreamingDownloader(unittest.IsolatedAsyncioTestCase):

    def setUp(self):
        self.downloader = StreamingDownloader()

    async def test_concatenates_chunks_and_counts_them(self):
        chunks = [os.urandom(4 * BYTES_PER_MB) for _ in range(3)]

        result = await self.downloader.accumulate(stream(*chunks), expected_size=10 * BYTES_PER_MB)

        self.assertEqual(result.total_bytes, sum(len(c) for c in chunks))
        self.assertEqual(result.data, b"".join(chunks))
        self.assertEqual(result.chunk_count, 3)
        self.assertEqual(result.chunk_sizes, (4 * BYTES_PER_MB,) * 3)
        self.assertGreaterEqual(result.elapsed_ms, 0)

    async def test_progress_line_per_ten_mib_boundary(self):
        chunks = [b"x" * (4 * BYTES_PER_MB)] * 3

        with self.assertLogs('algorithms.downloader', level='INFO') as logs:
            await self.downloader.accumulate(stream(*chunks), expected_size=10 * BYTES_PER_MB)

        # Only the third chunk (8 MiB -> 12 MiB) crosses the 10 MiB boundary
        self.assertEqual(len(logs.output), 1)
        self.assertIn("Downloaded: 12.58 MB (120.0%)", logs.output[0])

    async def test_no_progress_without_expected_size(self):
        chunks = [b"x" * (4 * BYTES_PER_MB)] * 3

        with self.assertNoLogs('algorithms.downloader', level='INFO'):
            result = await self.downloader.accumulate(stream(*chunks), expected_size=0)

        self.assertEqual(result.chunk_count, 3)

    async def test_empty_reads_are_ignored(self):
        result = await self.downloader.accumulate(stream(b"ab", b"", b"cd"), expected_size=4)

        self.assertEqual(result.data, b"abcd")
        self.assertEqual(result.chunk_count, 2)
        self.assertAlmostEqual(result.average_chunk_size_kb, 2 / 1024)

    async def test_empty_body(self):
        result = await self.downloader.accumulate(stream(), expected_size=0)

        self.assertEqual(result.data, b"")
        self.assertEqual(result.chunk_count, 0)
        self.assertEqual(result.average_chunk_size_kb, 0.0)

    async def test_many_small_chunks_accumulate_in_linear_time(self):
        count = 100_000

        result = await self.downloader.accumulate(stream(*([b"x"] * count)), expected_size=0)

        self.assertEqual(result.chunk_count, count)
        self.assertEqual(result.data, b"x" * count)
        # Per-chunk copying of earlier chunks would take tens of seconds here
        self.assertLess(result.elapsed_ms, 5000)

    async def test_chunk_order_is_preserved(self):
        chunks = [bytes([i]) * (i + 1) for i in range(50)]

        result = await self.downloader.accumulate(stream(*chunks), expected_size=0)

        self.assertEqual(result.data, b"".join(chunks))
        self.assertEqual(result.chunk_sizes, tuple(range(1, 51)))

    async def test_custom_progress_step(self):
        downloader = StreamingDownloader(progress_step_bytes=10)

        with self.assertLogs('algorithms.downloader', level='INFO') as logs:
            await downloader.accumulate(stream(b"x" * 6, b"x" * 6, b"x" * 6, b"x" * 6), expected_size=24)

        # Totals 6, 12, 18, 24: boundaries crossed at 12 and 24
        self.assertEqual(len(logs.output), 2)


if __name__ == '__main__':
    unittest.main()
