"""
Read test: fetch an existing transaction from the gateway's raw endpoint,
verify its size and hash, and report throughput.
"""

import asyncio
import logging
from typing import Optional

import aiohttp

from configuration import DEFAULT_GATEWAY, DEFAULT_OUTPUT_DIR, REPORT_PREFIX, BYTES_PER_MEGABYTE_DECIMAL
from common.errors import GatewayError
from common.timer import Timer
from algorithms.downloader import StreamingDownloader
from algorithms.integrity import sha256_hex, verify_size, looks_like_html
from persistence.record import TransactionMetadata
from persistence.report import ReportWriter, build_read_report
from systems.gateway import GatewayClient

logger = logging.getLogger(__name__)


class ReadTest:
    """Download-and-verify benchmark for an already stored transaction."""

    def __init__(
        self,
        tx_id: str,
        gateway: str = DEFAULT_GATEWAY,
        output_dir: str = DEFAULT_OUTPUT_DIR,
        prefix: str = REPORT_PREFIX,
        downloader: StreamingDownloader = None,
    ):
        self.tx_id = tx_id
        self.gateway = gateway
        self.writer = ReportWriter(output_dir, prefix)
        self.downloader = downloader or StreamingDownloader()
        self.report = None
        self.report_path: Optional[str] = None
        self._raw_url = ""

    async def run(self) -> int:
        """Run the test; any failure is logged and saved as an error report.

        Returns:
            Process exit code (0 on completion, 1 on failure)
        """
        try:
            return await self._run()
        except Exception as e:
            logger.error(f"Read test failed: {e}", exc_info=True)
            self.writer.write_error_report(
                e,
                kind="read",
                tx_id=self.tx_id,
                extra={
                    "transaction": {
                        "id": self.tx_id,
                        "rawUrl": self._raw_url,
                        "gateway": self.gateway,
                    }
                },
            )
            return 1

    async def _fetch_metadata(self, gateway: GatewayClient):
        """Metadata is optional: failures are logged and the test goes on."""
        logger.info("Fetching transaction metadata...")
        try:
            with Timer("metadata") as timer:
                metadata = await gateway.fetch_metadata(self.tx_id)
        except (GatewayError, aiohttp.ClientError, asyncio.TimeoutError, ValueError) as e:
            logger.warning(f"Metadata fetch failed: {e}")
            return TransactionMetadata(data_size=0, tags={}), None

        logger.info(f"Transaction metadata retrieved in {timer.elapsed_ms:,} ms")
        logger.info(
            f"Expected data size: {metadata.data_size:,} bytes "
            f"({metadata.data_size / BYTES_PER_MEGABYTE_DECIMAL:.2f} MB)"
        )
        if "Content-Type" in metadata.tags:
            logger.info(f"Content-Type tag: {metadata.tags['Content-Type']}")
        return metadata, timer.elapsed_ms

    async def _run(self) -> int:
        async with GatewayClient(self.gateway) as gateway:
            raw_url = self._raw_url = gateway.raw_url(self.tx_id)
            tx_url = gateway.data_url(self.tx_id)

            logger.info(f"Reading transaction: {self.tx_id}")
            logger.info(f"Gateway: {self.gateway}")
            logger.info(f"Raw data URL: {raw_url}")
            logger.info(f"Transaction URL: {tx_url}")

            metadata, metadata_ms = await self._fetch_metadata(gateway)

            # Availability of the raw endpoint
            logger.info("Checking raw data availability...")
            with Timer("head") as head_timer:
                head = await gateway.head(raw_url)
            if not head.ok:
                logger.error(f"HEAD request latency: {head_timer.elapsed_ms:,} ms")
                logger.error("The transaction may still be pending or not yet available on this gateway.")
                raise GatewayError(
                    f"Transaction data not available: {head.status_text}",
                    status=head.status, reason=head.status_text,
                )
            logger.info(f"Status: {head.status_text}")
            logger.info(f"Response Content-Type: {head.content_type}")
            logger.info(f"Response Content-Length: {head.content_length:,} bytes")
            logger.info(f"HEAD request latency: {head_timer.elapsed_ms:,} ms")

            logger.info("Downloading raw data blob...")
            download = await self.downloader.download(gateway, raw_url, metadata.data_size)

        digest = sha256_hex(download.data)
        logger.info("Download complete!")
        logger.info(f"Downloaded size: {download.total_bytes:,} bytes")
        logger.info(f"Number of chunks received: {download.chunk_count}")
        logger.info(f"Average chunk size: {download.average_chunk_size_kb:.2f} KB")
        logger.info(f"Download latency: {download.elapsed_ms:,} ms")
        logger.info(f"SHA-256 hash: {digest}")

        size_match = verify_size(metadata.data_size, download.total_bytes)
        html = looks_like_html(download.data)
        if html:
            logger.warning("Downloaded content appears to be HTML, not raw data!")
            logger.warning("This might indicate the raw endpoint is not working correctly.")

        self.report = build_read_report(
            tx_id=self.tx_id,
            gateway=self.gateway,
            raw_url=raw_url,
            tx_url=tx_url,
            metadata=metadata,
            metadata_ms=metadata_ms,
            head=head,
            head_ms=head_timer.elapsed_ms,
            download=download,
            size_match=size_match,
            sha256_hash=digest,
            looks_like_html=html,
        )

        logger.info("=== Summary ===")
        logger.info(f"Transaction ID: {self.tx_id}")
        logger.info(f"File size: {self.report['fileSize']['humanReadable']}")
        logger.info(f"Download throughput: {self.report['download']['throughputMBpsFormatted']} MB/s")
        logger.info(f"Data hash (SHA-256): {digest[:16]}...")

        self.report_path = self.writer.write_read_report(self.report, self.tx_id)
        return 0
