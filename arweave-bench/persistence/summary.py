"""
Aggregation of latency test reports into a pandas table.
"""

import glob
import json
import logging
import os
from typing import List, Optional

import pandas as pd

from configuration import REPORT_PREFIX, DEFAULT_OUTPUT_DIR

logger = logging.getLogger(__name__)

# Flattened report column -> summary column
COLUMNS = {
    "timestamp": "timestamp",
    "gateway": "gateway",
    "fileSize.bytes": "size_bytes",
    "fileSize.humanReadable": "size",
    "upload.latencyMs": "upload_ms",
    "upload.throughputMBps": "upload_mbps",
    "gatewayAvailability.latencyMs": "availability_ms",
    "gatewayAvailability.available": "available",
    "download.latencyMs": "download_ms",
    "download.throughputMBps": "download_mbps",
    "integrityCheck": "integrity",
    "transaction.id": "tx_id",
}

PHASE_COLUMNS = ["upload_ms", "availability_ms", "download_ms"]
THROUGHPUT_COLUMNS = ["upload_mbps", "download_mbps"]


class ResultsSummary:
    """Loads `<prefix>-test-<txid>.json` reports and summarizes them by payload size.

    Attributes:
        results_dir: Directory scanned for reports
        prefix: Report filename prefix
        data: One row per report, or an empty DataFrame if none were found
    """

    def __init__(self, results_dir: str = DEFAULT_OUTPUT_DIR, prefix: str = REPORT_PREFIX):
        self.results_dir = results_dir
        self.prefix = prefix
        self.data: pd.DataFrame = self._load_data()

    def report_files(self) -> List[str]:
        """Paths of successful latency reports, error reports excluded."""
        pattern = os.path.join(self.results_dir, f"{self.prefix}-test-*.json")
        error_marker = f"{self.prefix}-test-error-"
        return sorted(
            path for path in glob.glob(pattern)
            if not os.path.basename(path).startswith(error_marker)
        )

    def _load_data(self) -> pd.DataFrame:
        records = []
        for path in self.report_files():
            try:
                with open(path, "r", encoding="utf-8") as f:
                    records.append(json.load(f))
            except (OSError, json.JSONDecodeError) as e:
                logger.warning(f"Skipping unreadable report {path}: {e}")

        if not records:
            logger.warning(f"No latency reports found in {self.results_dir}")
            return pd.DataFrame(columns=list(COLUMNS.values()))

        flat = pd.json_normalize(records)
        data = flat.reindex(columns=list(COLUMNS)).rename(columns=COLUMNS)
        data["timestamp"] = pd.to_datetime(data["timestamp"], utc=True, errors="coerce")
        logger.info(f"Loaded {len(data)} reports from {self.results_dir}")
        return data.sort_values(["size_bytes", "timestamp"]).reset_index(drop=True)

    def by_size(self) -> pd.DataFrame:
        """Per-size statistics: run count, pass rate, mean/median phase latency and throughput."""
        if self.data.empty:
            return pd.DataFrame()

        grouped = self.data.groupby(["size_bytes", "size"], sort=True)
        stats = grouped[PHASE_COLUMNS + THROUGHPUT_COLUMNS].agg(["mean", "median"])
        stats.columns = [f"{col}_{agg}" for col, agg in stats.columns]
        stats["runs"] = grouped.size()
        stats["pass_rate"] = grouped["integrity"].apply(lambda s: (s == "PASS").mean())
        return stats.reset_index()

    def save_csv(self, output_file: str) -> Optional[str]:
        """Write the per-size table to CSV.

        Returns:
            Path to the saved file, or None if there was nothing to save
        """
        table = self.by_size()
        if table.empty:
            return None

        directory = os.path.dirname(output_file)
        if directory:
            os.makedirs(directory, exist_ok=True)
        table.to_csv(output_file, index=False)
        logger.info(f"Saved summary of {len(self.data)} runs to {output_file}")
        return output_file
