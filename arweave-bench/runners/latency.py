"""
Latency test: upload a random payload, wait for the gateway to serve it,
download it back and verify integrity.
"""

import logging
from typing import Optional

from configuration import (
    DEFAULT_GATEWAY,
    DEFAULT_OUTPUT_DIR,
    REPORT_PREFIX,
    POLL_INTERVAL_MS,
    MAX_WAIT_MS,
)
from common.sizes import generate_payload, format_size
from common.timer import Timer
from algorithms.poller import AvailabilityPoller
from algorithms.integrity import verify_roundtrip
from persistence.report import ReportWriter, build_latency_report, throughput_mbps
from systems.gateway import GatewayClient

logger = logging.getLogger(__name__)


class LatencyTest:
    """End-to-end upload/availability/download benchmark for one payload size."""

    def __init__(
        self,
        wallet_path: str,
        size_bytes: int,
        size_token: str,
        gateway: str = DEFAULT_GATEWAY,
        output_dir: str = DEFAULT_OUTPUT_DIR,
        prefix: str = REPORT_PREFIX,
        poll_interval_ms: int = POLL_INTERVAL_MS,
        max_wait_ms: int = MAX_WAIT_MS,
        storage_system=None,
    ):
        self.wallet_path = wallet_path
        self.size_bytes = size_bytes
        self.size_token = size_token
        self.gateway = gateway
        self.poll_interval_ms = poll_interval_ms
        self.max_wait_ms = max_wait_ms
        self.writer = ReportWriter(output_dir, prefix)
        self.storage_system = storage_system
        self.report = None
        self.report_path: Optional[str] = None

    def _initialize_storage(self):
        """Create the Arweave upload path unless one was injected."""
        if self.storage_system is None:
            from systems.arweave import ArweaveSystem
            self.storage_system = ArweaveSystem(self.wallet_path)
        return self.storage_system

    async def run(self) -> int:
        """Run the test; any failure is logged and saved as an error report.

        Returns:
            Process exit code (0 on completion, 1 on failure)
        """
        try:
            return await self._run()
        except Exception as e:
            logger.error(f"Error: {e}", exc_info=True)
            self.writer.write_error_report(e, kind="test")
            return 1

    async def _run(self) -> int:
        storage = self._initialize_storage()

        logger.info(f"Generating random buffer of {format_size(self.size_bytes)}...")
        data = generate_payload(self.size_bytes)
        logger.info(f"Gateway: {self.gateway}")

        # Upload
        prepared = await storage.prepare(data)
        with Timer("upload") as upload_timer:
            await storage.upload_chunks(prepared)
        upload_ms = upload_timer.elapsed_ms
        tx_id = prepared.tx_id

        logger.info(f"TxID: {tx_id}")
        logger.info(f"Upload latency (to post all chunks): {upload_ms:,} ms")
        logger.info(f"Upload throughput: {throughput_mbps(self.size_bytes, upload_ms):.2f} MB/s")

        async with GatewayClient(self.gateway) as gateway:
            url = gateway.data_url(tx_id)

            # Wait until the gateway serves the data
            poller = AvailabilityPoller(
                gateway.probe,
                poll_interval_ms=self.poll_interval_ms,
                max_wait_ms=self.max_wait_ms,
            )
            poll = await poller.wait_until_available(url)
            logger.info(
                f"Gateway availability: {'OK' if poll.available else 'NOT YET'} "
                f"(last status: {poll.last_status})"
            )
            logger.info(f"Time until first 200 from gateway: {poll.elapsed_ms:,} ms")

            if not poll.available:
                # Upload timing is already measured; unread content is not a failure
                logger.info("Stopping before download (content not yet served by the gateway).")
                return 0

            # Download
            with Timer("download") as download_timer:
                downloaded = await gateway.get_bytes(url)
            download_ms = download_timer.elapsed_ms

        integrity = verify_roundtrip(data, downloaded)
        download_mbps = throughput_mbps(self.size_bytes, download_ms)
        logger.info(f"Download latency: {download_ms:,} ms")
        logger.info(f"Download throughput: {download_mbps:.2f} MB/s")
        logger.info(f"Integrity check: {integrity}")

        self.report = build_latency_report(
            gateway=self.gateway,
            size_bytes=self.size_bytes,
            size_token=self.size_token,
            upload_ms=upload_ms,
            poll=poll,
            download_ms=download_ms,
            integrity=integrity,
            tx_id=tx_id,
            url=url,
        )
        self._log_summary()
        self.report_path = self.writer.write_latency_report(self.report, tx_id)
        return 0

    def _log_summary(self):
        report = self.report
        logger.info("=== Summary ===")
        logger.info(
            f"Upload: {report['upload']['latencyMs']:,} ms "
            f"({report['upload']['throughputMBpsFormatted']} MB/s)"
        )
        logger.info(f"Gateway availability: {report['gatewayAvailability']['latencyMs']:,} ms")
        logger.info(
            f"Download: {report['download']['latencyMs']:,} ms "
            f"({report['download']['throughputMBpsFormatted']} MB/s)"
        )
        logger.info(f"TxID: {report['transaction']['id']}")
        logger.info(f"URL:  {report['transaction']['url']}")
