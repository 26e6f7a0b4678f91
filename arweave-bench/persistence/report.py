"""
JSON report assembly and persistence for the Arweave benchmark.

One report file is written per run. Successful latency runs are named after
the transaction id, read runs additionally carry an epoch-millisecond stamp so
repeated reads of the same transaction do not collide. Failed runs write a
reduced error report instead.
"""

import json
import logging
import os
import time
import traceback
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from configuration import (
    REPORT_PREFIX,
    DEFAULT_OUTPUT_DIR,
    BYTES_PER_MEGABYTE_DECIMAL,
    MILLISECONDS_PER_SECOND,
)
from persistence.record import DownloadResult, HeadInfo, PollResult, TransactionMetadata

logger = logging.getLogger(__name__)


def iso_timestamp() -> str:
    """Current UTC time as ISO-8601 with milliseconds, e.g. 2024-01-01T12:00:00.000Z."""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def epoch_millis() -> int:
    return time.time_ns() // 1_000_000


def throughput_mbps(num_bytes: int, elapsed_ms: int) -> float:
    """Decimal megabytes per second; 0.0 when no time elapsed."""
    if elapsed_ms <= 0:
        return 0.0
    return num_bytes / (elapsed_ms / MILLISECONDS_PER_SECOND) / BYTES_PER_MEGABYTE_DECIMAL


def _phase(elapsed_ms: int, num_bytes: int) -> Dict[str, Any]:
    mbps = throughput_mbps(num_bytes, elapsed_ms)
    return {
        "latencyMs": elapsed_ms,
        "throughputMBps": mbps,
        "throughputMBpsFormatted": f"{mbps:.2f}",
    }


def build_latency_report(
    gateway: str,
    size_bytes: int,
    size_token: str,
    upload_ms: int,
    poll: PollResult,
    download_ms: int,
    integrity: str,
    tx_id: str,
    url: str,
) -> Dict[str, Any]:
    """Assemble the report of an upload/availability/download run."""
    return {
        "timestamp": iso_timestamp(),
        "gateway": gateway,
        "fileSize": {
            "bytes": size_bytes,
            "humanReadable": size_token,
        },
        "upload": _phase(upload_ms, size_bytes),
        "gatewayAvailability": {
            "latencyMs": poll.elapsed_ms,
            "available": poll.available,
            "lastStatus": poll.last_status,
        },
        "download": _phase(download_ms, size_bytes),
        "integrityCheck": integrity,
        "transaction": {
            "id": tx_id,
            "url": url,
        },
    }


def build_read_report(
    tx_id: str,
    gateway: str,
    raw_url: str,
    tx_url: str,
    metadata: TransactionMetadata,
    metadata_ms: Optional[int],
    head: HeadInfo,
    head_ms: int,
    download: DownloadResult,
    size_match: Optional[bool],
    sha256_hash: str,
    looks_like_html: bool,
) -> Dict[str, Any]:
    """Assemble the report of a read run."""
    actual_size = download.total_bytes
    mbps = throughput_mbps(actual_size, download.elapsed_ms)
    megabytes = actual_size / BYTES_PER_MEGABYTE_DECIMAL
    return {
        "timestamp": iso_timestamp(),
        "transaction": {
            "id": tx_id,
            "rawUrl": raw_url,
            "txUrl": tx_url,
            "gateway": gateway,
        },
        "metadata": {
            "expectedSize": metadata.data_size,
            "tags": metadata.tags,
            "responseContentType": head.content_type,
            "responseContentLength": head.content_length,
            "latencyMs": metadata_ms,
        },
        "headRequest": {
            "status": head.status_text,
            "latencyMs": head_ms,
        },
        "download": {
            "actualSize": actual_size,
            "downloadLatencyMs": download.elapsed_ms,
            "throughputMBps": mbps,
            "throughputMBpsFormatted": f"{mbps:.2f}",
            "chunks": download.chunk_count,
            "averageChunkSizeKB": download.average_chunk_size_kb,
        },
        "verification": {
            "sizeMatch": size_match,
            "sha256Hash": sha256_hash,
            "looksLikeHTML": looks_like_html,
        },
        "fileSize": {
            "bytes": actual_size,
            "megabytes": megabytes,
            "humanReadable": f"{megabytes:.2f} MB",
        },
    }


class ReportWriter:
    """Writes benchmark reports as indented JSON files.

    Attributes:
        output_dir: Directory where reports are written
        prefix: Filename prefix shared by all reports of this tool
    """

    def __init__(self, output_dir: str = DEFAULT_OUTPUT_DIR, prefix: str = REPORT_PREFIX):
        self.output_dir = output_dir
        self.prefix = prefix

    def latency_filename(self, tx_id: str) -> str:
        return f"{self.prefix}-test-{tx_id}.json"

    def read_filename(self, tx_id: str, millis: Optional[int] = None) -> str:
        return f"{self.prefix}-read-{tx_id}-{millis or epoch_millis()}.json"

    def error_filename(self, kind: str, tx_id: Optional[str] = None, millis: Optional[int] = None) -> str:
        millis = millis or epoch_millis()
        if kind == "read" and tx_id:
            return f"{self.prefix}-read-error-{tx_id}-{millis}.json"
        return f"{self.prefix}-{kind}-error-{millis}.json"

    def _write(self, filename: str, payload: Dict[str, Any]) -> str:
        os.makedirs(self.output_dir, exist_ok=True)
        filepath = os.path.join(self.output_dir, filename)
        with open(filepath, "w", encoding="utf-8") as f:
            json.dump(payload, f, indent=2)
        return filepath

    def write_latency_report(self, report: Dict[str, Any], tx_id: str) -> str:
        """Write a latency test report and return its path."""
        filepath = self._write(self.latency_filename(tx_id), report)
        logger.info(f"Results saved to: {filepath}")
        return filepath

    def write_read_report(self, report: Dict[str, Any], tx_id: str) -> str:
        """Write a read test report and return its path."""
        filepath = self._write(self.read_filename(tx_id), report)
        logger.info(f"Results saved to: {filepath}")
        return filepath

    def write_error_report(
        self,
        error: BaseException,
        kind: str = "test",
        tx_id: Optional[str] = None,
        extra: Optional[Dict[str, Any]] = None,
    ) -> Optional[str]:
        """Best-effort write of a reduced error report.

        Returns:
            Path to the written file, or None if writing failed
        """
        payload = {
            "timestamp": iso_timestamp(),
            "error": str(error) or type(error).__name__,
            "errorType": type(error).__name__,
            "stack": "".join(traceback.format_exception(type(error), error, error.__traceback__)),
        }
        if extra:
            payload.update(extra)

        try:
            filepath = self._write(self.error_filename(kind, tx_id), payload)
        except (OSError, TypeError, ValueError) as e:
            logger.error(f"Failed to save error to file: {e}")
            return None

        logger.error(f"Error details saved to: {filepath}")
        return filepath
