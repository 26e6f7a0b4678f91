"""
Arweave upload path: wallet loading, transaction signing and chunked submission.

Transaction construction and signing are delegated to arweave-python-client.
Its calls are blocking, so each one runs in a worker thread.
"""

import asyncio
import contextlib
import json
import logging
import os
import tempfile
from typing import Any, Dict, NamedTuple

from arweave.arweave_lib import Wallet, Transaction
from arweave.transaction_uploader import get_uploader

from configuration import UPLOAD_NODE_URL, CONTENT_TYPE
from common.errors import UploadError, WalletError

logger = logging.getLogger(__name__)


def load_jwk(path: str) -> Dict[str, Any]:
    """Read and parse a JWK key file.

    Raises:
        WalletError: If the file is missing or is not a JSON object
    """
    try:
        with open(path, "r", encoding="utf-8") as f:
            jwk = json.load(f)
    except OSError as e:
        raise WalletError(f"Cannot read wallet file {path}: {e}") from e
    except json.JSONDecodeError as e:
        raise WalletError(f"Wallet file {path} is not valid JSON: {e}") from e

    if not isinstance(jwk, dict) or "n" not in jwk:
        raise WalletError(f"Wallet file {path} does not contain an RSA JWK")
    return jwk


class PreparedUpload(NamedTuple):
    """A signed transaction, its chunk uploader and the spooled payload it reads from."""
    tx_id: str
    transaction: Any
    uploader: Any
    file_handler: Any = None
    file_path: str = ""


def _spool_payload(data: bytes) -> str:
    """Write data to a temporary file; the SDK chunks uploads from a file handle."""
    with tempfile.NamedTemporaryFile(prefix="arweave-payload-", delete=False) as f:
        f.write(data)
        return f.name


def _release(file_handler, file_path: str):
    if file_handler is not None:
        file_handler.close()
    if file_path:
        with contextlib.suppress(FileNotFoundError):
            os.remove(file_path)


class ArweaveSystem:
    """Submits payloads to an Arweave node as signed, chunk-uploaded transactions."""

    def __init__(self, wallet_path: str, node_url: str = UPLOAD_NODE_URL):
        self.wallet_path = wallet_path
        self.node_url = node_url
        self.wallet = None

        logger.info(f"Initialized Arweave upload path via {node_url}")

    def load_wallet(self):
        """Validate the key file and open it as an SDK wallet."""
        load_jwk(self.wallet_path)
        try:
            wallet = Wallet(self.wallet_path)
        except Exception as e:
            raise WalletError(f"Failed to open wallet {self.wallet_path}: {e}") from e
        wallet.api_url = self.node_url
        self.wallet = wallet
        return wallet

    def _build_transaction(self, file_handler, file_path: str, content_type: str):
        transaction = Transaction(self.wallet, file_handler=file_handler, file_path=file_path)
        # Anchor, price quote, /tx and /chunk all go to the same node
        transaction.api_url = self.node_url
        transaction.add_tag("Content-Type", content_type)
        transaction.sign()
        return transaction, get_uploader(transaction, file_handler)

    async def prepare(self, data: bytes, content_type: str = CONTENT_TYPE) -> PreparedUpload:
        """Create and sign a transaction for data, ready for chunk submission.

        The payload is spooled to a temporary file that stays open until
        upload_chunks finishes.

        Raises:
            UploadError: If the SDK fails to build or sign the transaction
        """
        if self.wallet is None:
            await asyncio.to_thread(self.load_wallet)

        file_path = await asyncio.to_thread(_spool_payload, data)
        file_handler = None
        try:
            file_handler = open(file_path, "rb")
            transaction, uploader = await asyncio.to_thread(
                self._build_transaction, file_handler, file_path, content_type
            )
        except Exception as e:
            _release(file_handler, file_path)
            raise UploadError(f"Failed to create transaction: {e}") from e

        logger.debug(f"Prepared transaction {transaction.id}")
        return PreparedUpload(
            tx_id=transaction.id,
            transaction=transaction,
            uploader=uploader,
            file_handler=file_handler,
            file_path=file_path,
        )

    async def upload_chunks(self, prepared: PreparedUpload) -> int:
        """Post every chunk of a prepared transaction, one after another.

        The spooled payload file is removed once the upload ends, successfully or not.

        Returns:
            Number of upload_chunk calls made

        Raises:
            UploadError: If posting a chunk fails
        """
        uploader = prepared.uploader
        calls = 0
        try:
            while not uploader.is_complete:
                try:
                    await asyncio.to_thread(uploader.upload_chunk)
                except Exception as e:
                    raise UploadError(f"Chunk upload failed for {prepared.tx_id}: {e}") from e
                calls += 1
                logger.debug(
                    f"Upload {prepared.tx_id}: {getattr(uploader, 'pct_complete', '?')}% complete"
                )
        finally:
            _release(prepared.file_handler, prepared.file_path)
        return calls
