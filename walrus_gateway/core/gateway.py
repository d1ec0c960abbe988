"""Blob gateway: proxies single-blob writes and reads.

Examples:
    >>> gateway = BlobGateway(network=WalrusNetwork(...))
    >>> result = await gateway.upload(b"hello", "hello.txt")
    >>> await gateway.download(result.blob_id)
    b'hello'

Tests:
    - tests/unit/test_gateway.py
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any

from walrus_gateway.core.errors import DownloadError, InvalidEpochError, NotFoundError, UploadError
from walrus_gateway.core.estimator import DEFAULT_EPOCHS, MAX_EPOCHS
from walrus_gateway.network.base import BlobNotFound, NetworkError, StorageNetwork
from walrus_gateway.network.walrus import extract_blob_id

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class UploadResult:
    """Outcome of a blob upload.

    Attributes:
        blob_id: Identifier minted by the network
        identifier: Name supplied by the caller
        epochs: Epochs the blob was stored for
        receipt: The network's write receipt, unmodified
    """

    blob_id: str
    identifier: str
    epochs: int
    receipt: dict[str, Any] = field(default_factory=dict)


class BlobGateway:
    """Writes and reads blobs through the storage network.

    Attributes:
        network: Storage network client
        default_epochs: Epochs used when the caller does not supply any
        deletable: Deletability flag applied to every write
        upload_timeout: Budget for one write, in seconds
        download_timeout: Budget for one read, in seconds
    """

    def __init__(
        self,
        network: StorageNetwork,
        default_epochs: int = DEFAULT_EPOCHS,
        deletable: bool = True,
        upload_timeout: float = 120.0,
        download_timeout: float = 30.0,
    ) -> None:
        self.network = network
        self.default_epochs = default_epochs
        self.deletable = deletable
        self.upload_timeout = upload_timeout
        self.download_timeout = download_timeout

    async def upload(self, data: bytes, identifier: str, epochs: int | None = None) -> UploadResult:
        """Store a blob.

        Args:
            data: File contents.
            identifier: Human-readable name (e.g. the filename).
            epochs: Storage duration; defaults to ``default_epochs``.

        Returns:
            UploadResult with the blob ID and raw receipt.

        Raises:
            InvalidEpochError: If epochs is given but not a positive integer.
            UploadError: If the write fails, times out or yields no blob ID.
        """
        if epochs is None:
            epochs = self.default_epochs
        elif isinstance(epochs, bool) or not isinstance(epochs, int) or not 0 < epochs <= MAX_EPOCHS:
            raise InvalidEpochError()
        logger.info(f"[UPLOAD] {identifier!r}: {len(data)} bytes, {epochs} epochs")

        try:
            receipt = await asyncio.wait_for(
                self.network.write_blob(data, epochs=epochs, deletable=self.deletable),
                timeout=self.upload_timeout,
            )
        except asyncio.TimeoutError as e:
            logger.error(f"[UPLOAD] {identifier!r} timed out after {self.upload_timeout}s")
            raise UploadError(timed_out=True) from e
        except NetworkError as e:
            logger.error(f"[UPLOAD] {identifier!r} failed: {e}")
            raise UploadError() from e

        blob_id = extract_blob_id(receipt)
        if not blob_id:
            logger.error(f"[UPLOAD] {identifier!r}: receipt has no blob ID")
            raise UploadError()

        logger.info(f"[UPLOAD] {identifier!r} stored as {blob_id}")
        return UploadResult(blob_id=blob_id, identifier=identifier, epochs=epochs, receipt=receipt)

    async def download(self, blob_id: str) -> bytes:
        """Fetch the original bytes of a blob.

        Raises:
            NotFoundError: If the network has no such blob.
            DownloadError: For any other failure or a timeout.
        """
        if not blob_id or not blob_id.strip():
            raise NotFoundError()

        try:
            data = await asyncio.wait_for(
                self.network.read_blob(blob_id),
                timeout=self.download_timeout,
            )
        except asyncio.TimeoutError as e:
            logger.error(f"[DOWNLOAD] {blob_id} timed out after {self.download_timeout}s")
            raise DownloadError(timed_out=True) from e
        except BlobNotFound as e:
            logger.info(f"[DOWNLOAD] {blob_id} not found")
            raise NotFoundError() from e
        except NetworkError as e:
            logger.error(f"[DOWNLOAD] {blob_id} failed: {e}")
            raise DownloadError() from e

        logger.info(f"[DOWNLOAD] {blob_id}: {len(data)} bytes")
        return data
