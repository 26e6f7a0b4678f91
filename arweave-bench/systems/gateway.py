"""
Async HTTP client for an Arweave gateway.
"""

import base64
import contextlib
import logging
from typing import AsyncIterator, Dict, Tuple

import aiohttp

from configuration import CONNECT_TIMEOUT_SECONDS
from common.errors import DownloadError, GatewayError
from persistence.record import HeadInfo, TransactionMetadata

logger = logging.getLogger(__name__)


def decode_tag(value: str) -> str:
    """Decode a base64url tag name or value (padding optional) to text."""
    padded = value + "=" * (-len(value) % 4)
    return base64.urlsafe_b64decode(padded).decode("utf-8", errors="replace")


def decode_tags(raw_tags) -> Dict[str, str]:
    """Turn the metadata 'tags' array into a name -> value dict."""
    tags = {}
    if not isinstance(raw_tags, list):
        return tags
    for tag in raw_tags:
        try:
            tags[decode_tag(tag["name"])] = decode_tag(tag["value"])
        except (KeyError, TypeError, ValueError) as e:
            logger.debug(f"Skipping undecodable tag {tag!r}: {e}")
    return tags


def _content_length(value) -> int:
    """Parse a Content-Length header, treating absent or malformed values as 0."""
    try:
        return max(int(value), 0)
    except (TypeError, ValueError):
        return 0


class GatewayClient:
    """Read path of the benchmark: HEAD, GET and metadata calls against a gateway.

    Use as an async context manager so a single aiohttp session serves the
    whole run:

        async with GatewayClient("https://arweave.net") as gateway:
            info = await gateway.head(gateway.raw_url(tx_id))
    """

    def __init__(self, gateway_url: str, session: aiohttp.ClientSession = None):
        self.gateway_url = gateway_url
        self.base_url = gateway_url.rstrip("/")
        self.session = session
        self._owns_session = session is None

    async def __aenter__(self):
        """Async context manager entry."""
        if self.session is None:
            # No total timeout: multi-gigabyte downloads are bounded only by the transport
            timeout = aiohttp.ClientTimeout(total=None, sock_connect=CONNECT_TIMEOUT_SECONDS)
            self.session = aiohttp.ClientSession(timeout=timeout)
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        if self.session and self._owns_session:
            await self.session.close()
            self.session = None

    def _require_session(self) -> aiohttp.ClientSession:
        if self.session is None:
            raise RuntimeError("Gateway session not initialized. Use async context manager.")
        return self.session

    # URL helpers

    def data_url(self, tx_id: str) -> str:
        return f"{self.base_url}/{tx_id}"

    def raw_url(self, tx_id: str) -> str:
        return f"{self.base_url}/raw/{tx_id}"

    def metadata_url(self, tx_id: str) -> str:
        return f"{self.base_url}/tx/{tx_id}"

    # Requests

    async def head(self, url: str) -> HeadInfo:
        """Issue a HEAD request and return status and content headers.

        Transport errors propagate to the caller.
        """
        session = self._require_session()
        async with session.head(url, allow_redirects=True) as resp:
            info = HeadInfo(
                ok=resp.ok,
                status=resp.status,
                status_text=f"{resp.status} {resp.reason or ''}".strip(),
                content_type=resp.headers.get("Content-Type", "unknown"),
                content_length=_content_length(resp.headers.get("Content-Length")),
            )
        logger.debug(f"HEAD {url} -> {info.status_text}")
        return info

    async def probe(self, url: str) -> Tuple[bool, str]:
        """Existence probe used by the availability poller."""
        info = await self.head(url)
        return info.ok, info.status_text

    async def fetch_metadata(self, tx_id: str) -> TransactionMetadata:
        """Fetch the declared data size and tags of a transaction.

        Raises:
            GatewayError: If the gateway does not answer with a success status
        """
        session = self._require_session()
        url = self.metadata_url(tx_id)
        async with session.get(url) as resp:
            if not resp.ok:
                raise GatewayError(
                    f"Could not fetch metadata: {resp.status} {resp.reason}",
                    status=resp.status, reason=resp.reason or "",
                )
            metadata = await resp.json(content_type=None)

        if not isinstance(metadata, dict):
            raise GatewayError(f"Unexpected metadata document: {type(metadata).__name__}")
        data_size = int(metadata.get("data_size") or 0)
        return TransactionMetadata(data_size=data_size, tags=decode_tags(metadata.get("tags")))

    async def get_bytes(self, url: str) -> bytes:
        """Download a whole resource into memory.

        Raises:
            DownloadError: If the response status is not a success
        """
        session = self._require_session()
        async with session.get(url) as resp:
            if not resp.ok:
                raise DownloadError(
                    f"Unexpected download status: {resp.status} {resp.reason}",
                    status=resp.status, reason=resp.reason or "",
                )
            return await resp.read()

    @contextlib.asynccontextmanager
    async def open_stream(self, url: str) -> AsyncIterator[AsyncIterator[bytes]]:
        """Open a GET and yield an async iterator over body chunks as they arrive.

        Raises:
            DownloadError: If the initial response status is not a success
        """
        session = self._require_session()
        async with session.get(url) as resp:
            if not resp.ok:
                raise DownloadError(
                    f"Download failed: {resp.status} {resp.reason}",
                    status=resp.status, reason=resp.reason or "",
                )
            yield resp.content.iter_any()
