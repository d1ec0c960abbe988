"""Storage network abstraction layer.

This module defines the abstract base class and types for the external
blob-storage network. The gateway core only talks to ``StorageNetwork``;
``WalrusNetwork`` is the production implementation and tests substitute
in-memory stubs.

Examples:
    >>> class EchoNetwork(StorageNetwork):
    ...     async def quote_cost(self, size, epochs):
    ...         return CostQuote(storage_cost=500_000_000, write_cost=100_000_000)
    ...     ...

Tests:
    - tests/unit/test_walrus_network.py
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any

__all__ = [
    "BlobNotFound",
    "CostQuote",
    "NetworkError",
    "StorageNetwork",
]


@dataclass(frozen=True)
class CostQuote:
    """Network-supplied cost of storing a blob, in smallest units.

    Attributes:
        storage_cost: Cost of occupying space for the requested epochs
        write_cost: One-time cost of the write itself
        encoded_size: Encoded blob length the quote was priced on, if known
        storage_units: Number of storage units charged, if known
    """

    storage_cost: int
    write_cost: int
    encoded_size: int | None = None
    storage_units: int | None = None


class StorageNetwork(ABC):
    """Abstract client for the external blob-storage network.

    Implementations must be safe to share across concurrent requests.
    """

    @abstractmethod
    async def quote_cost(self, size: int, epochs: int) -> CostQuote:
        """Quote the cost of storing ``size`` bytes for ``epochs`` epochs.

        Raises:
            NetworkError: If the quote cannot be obtained.
        """

    @abstractmethod
    async def write_blob(self, data: bytes, epochs: int, deletable: bool) -> dict[str, Any]:
        """Store a blob and return the network's write receipt.

        Raises:
            NetworkError: If the write fails.
        """

    @abstractmethod
    async def read_blob(self, blob_id: str) -> bytes:
        """Return the decoded bytes of a stored blob.

        Raises:
            BlobNotFound: If the network has no blob for ``blob_id``.
            NetworkError: For any other failure.
        """

    async def close(self) -> None:
        """Release network resources."""


class NetworkError(Exception):
    """Base exception for storage network errors.

    Attributes:
        message: Error message (internal, not shown to callers)
        status_code: HTTP status code (if applicable)
        retryable: Whether the error is retryable
    """

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        retryable: bool = False,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.retryable = retryable

    def __str__(self) -> str:
        if self.status_code:
            return f"({self.status_code}) {self.args[0]}"
        return self.args[0]


class BlobNotFound(NetworkError):
    """The network reports no blob for the identifier."""

    def __init__(self, blob_id: str) -> None:
        super().__init__(f"Blob not found: {blob_id}", status_code=404)
        self.blob_id = blob_id
