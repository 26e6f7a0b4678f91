"""
Configuration constants for the Arweave gateway benchmark.

This module contains all configuration parameters including:
- Gateway and upload node endpoints
- Polling parameters for gateway availability
- Download progress and verification settings
- Report naming and output locations
- File size constants and conversion factors
"""

import os
from typing import List

# =============================================================================
# NETWORK CONFIGURATION
# =============================================================================

# Gateway used for reads (HEAD/GET) unless given on the command line
DEFAULT_GATEWAY: str = os.getenv("ARWEAVE_GATEWAY", "https://arweave.net")

# Node that receives the signed transaction and its chunks
UPLOAD_NODE_URL: str = os.getenv("ARWEAVE_UPLOAD_NODE", "https://arweave.net")

# JWK key file used by the sweep when none is given on the command line
ARWEAVE_WALLET_FILE: str = os.getenv("ARWEAVE_WALLET_FILE", "")

# Content-Type tag attached to uploaded payloads
CONTENT_TYPE: str = "application/octet-stream"

# =============================================================================
# AVAILABILITY POLLING
# =============================================================================

POLL_INTERVAL_MS: int = 2000  # Fixed delay between HEAD probes
MAX_WAIT_MS: int = 10 * 60 * 1000  # Give up waiting for the gateway after 10 minutes

# =============================================================================
# HTTP TIMEOUTS
# =============================================================================

# Only the connect phase is bounded; downloads of large payloads may take minutes
CONNECT_TIMEOUT_SECONDS: float = 30.0

# =============================================================================
# FILE SIZE CONSTANTS
# =============================================================================

BYTES_PER_KB: int = 1024
BYTES_PER_MB: int = 1024 * 1024
BYTES_PER_GB: int = 1024 * 1024 * 1024
BYTES_PER_MEGABYTE_DECIMAL: int = 1_000_000  # Throughput is reported in decimal MB/s
MILLISECONDS_PER_SECOND: int = 1000
NANOSECONDS_PER_MILLISECOND: int = 1_000_000

# =============================================================================
# DOWNLOAD AND VERIFICATION
# =============================================================================

PROGRESS_STEP_BYTES: int = 10 * BYTES_PER_MB  # One progress line per 10 MiB
HTML_SNIFF_BYTES: int = 1000  # Leading bytes inspected for markup signatures
HTML_SIGNATURES = ("<!DOCTYPE", "<html")

# =============================================================================
# REPORTS
# =============================================================================

REPORT_PREFIX: str = os.getenv("REPORT_PREFIX", "arweave")
DEFAULT_OUTPUT_DIR: str = os.getenv("RESULTS_DIR", ".")
DEFAULT_PLOTS_DIR: str = "plots"
DEFAULT_SUMMARY_FILE: str = "summary.csv"

# =============================================================================
# SWEEP DEFAULTS
# =============================================================================

SWEEP_SIZES: List[str] = ["10KB", "10MB", "20MB", "30MB", "70MB", "130MB"]
SWEEP_DELAY_SECONDS: float = 5.0  # Pause between tests to avoid overlapping network load
