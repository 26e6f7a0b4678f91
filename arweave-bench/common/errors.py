"""
Exception types raised by the benchmark.
"""

from typing import Optional


class BenchmarkError(Exception):
    """Base class for all benchmark errors."""


class SizeFormatError(BenchmarkError, ValueError):
    """Raised when a size token such as '5MB' cannot be parsed."""


class WalletError(BenchmarkError):
    """Raised when the JWK key file cannot be read or parsed."""


class UploadError(BenchmarkError):
    """Raised when submitting a transaction or one of its chunks fails."""


class GatewayError(BenchmarkError):
    """Raised when the gateway answers with a non-success status."""

    def __init__(self, message: str, status: Optional[int] = None, reason: str = ""):
        super().__init__(message)
        self.status = status
        self.reason = reason

    @property
    def status_text(self) -> str:
        """Status line in the form '404 Not Found'."""
        if self.status is None:
            return self.reason
        return f"{self.status} {self.reason}".strip()


class DownloadError(GatewayError):
    """Raised when a GET for the payload does not succeed."""
