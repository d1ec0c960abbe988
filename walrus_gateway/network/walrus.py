"""Walrus storage network implementation.

Prices come from the Walrus system object on Sui (JSON-RPC); writes go to
a Walrus publisher and reads to a Walrus aggregator, both over HTTP.

Walrus docs: https://docs.wal.app/usage/web-api.html

Examples:
    >>> from walrus_gateway.network.walrus import WalrusNetwork
    >>> network = WalrusNetwork(
    ...     rpc_url="https://fullnode.testnet.sui.io:443",
    ...     publisher_url="https://publisher.walrus-testnet.walrus.space",
    ...     aggregator_url="https://aggregator.walrus-testnet.walrus.space",
    ...     system_object_id="0x6c25...",
    ... )
    >>> quote = await network.quote_cost(size=1_048_576, epochs=5)

Tests:
    - tests/unit/test_walrus_network.py
"""

import logging
import time
from dataclasses import dataclass
from typing import Any
from urllib.parse import quote

import httpx

from walrus_gateway.network.base import BlobNotFound, CostQuote, NetworkError, StorageNetwork
from walrus_gateway.network.encoding import encoded_blob_length, storage_units_from_size

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SystemPricing:
    """Current Walrus prices and committee size.

    Attributes:
        storage_price_per_unit_size: Smallest units per storage unit per epoch
        write_price_per_unit_size: Smallest units per storage unit, once
        n_shards: Shards in the current committee
    """

    storage_price_per_unit_size: int
    write_price_per_unit_size: int
    n_shards: int


def _fields(value: Any) -> Any:
    """Unwrap the ``{"type": ..., "fields": {...}}`` envelope of Move structs."""
    if isinstance(value, dict) and isinstance(value.get("fields"), dict):
        return value["fields"]
    return value


def _as_int(value: Any, name: str) -> int:
    """Parse a u64 that JSON-RPC may render as a string."""
    if isinstance(value, bool):
        raise NetworkError(f"Field {name} is not an integer: {value!r}")
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.isdigit():
        return int(value)
    raise NetworkError(f"Field {name} is not an integer: {value!r}")


class WalrusNetwork(StorageNetwork):
    """Walrus client over Sui JSON-RPC, publisher and aggregator HTTP APIs.

    Attributes:
        rpc_url: Sui fullnode JSON-RPC URL
        publisher_url: Walrus publisher base URL
        aggregator_url: Walrus aggregator base URL
        system_object_id: Walrus system object on Sui
        owner_address: Address new blob objects are sent to (optional)
        timeout: Request timeout in seconds
    """

    def __init__(
        self,
        rpc_url: str,
        publisher_url: str,
        aggregator_url: str,
        system_object_id: str,
        owner_address: str | None = None,
        timeout: float = 30.0,
        pricing_cache_seconds: float = 60.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.rpc_url = rpc_url
        self.publisher_url = publisher_url.rstrip("/")
        self.aggregator_url = aggregator_url.rstrip("/")
        self.system_object_id = system_object_id
        self.owner_address = owner_address
        self.timeout = timeout
        self.pricing_cache_seconds = pricing_cache_seconds
        self._transport = transport
        self._client: httpx.AsyncClient | None = None
        self._pricing: SystemPricing | None = None
        self._pricing_fetched_at = 0.0
        self._rpc_id = 0

    @property
    def client(self) -> httpx.AsyncClient:
        """Get httpx async client (lazy initialization)."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                timeout=self.timeout,
                transport=self._transport,
                headers={"User-Agent": "walrus-gateway"},
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    def _handle_error(self, response: httpx.Response, action: str) -> None:
        """Convert HTTP errors to network errors.

        Args:
            response: The HTTP response.
            action: What was being attempted, for the error message.

        Raises:
            NetworkError: Always.
        """
        try:
            error_data = response.json()
            message = error_data.get("error", {}).get("message", response.text)
        except Exception:
            message = response.text

        raise NetworkError(
            message=f"{action} failed: {message}",
            status_code=response.status_code,
            retryable=response.status_code >= 500 or response.status_code == 429,
        )

    async def _send(self, method: str, url: str, action: str, **kwargs: Any) -> httpx.Response:
        """Send a request, mapping transport failures to NetworkError."""
        try:
            return await self.client.request(method, url, **kwargs)
        except httpx.TimeoutException as e:
            raise NetworkError(f"{action} timed out", retryable=True) from e
        except httpx.HTTPError as e:
            raise NetworkError(f"{action} failed: {e}", retryable=True) from e

    async def _rpc(self, method: str, params: list[Any]) -> Any:
        """Call a Sui JSON-RPC method and return its result."""
        self._rpc_id += 1
        payload = {
            "jsonrpc": "2.0",
            "id": self._rpc_id,
            "method": method,
            "params": params,
        }
        response = await self._send("POST", self.rpc_url, f"RPC {method}", json=payload)
        if response.status_code != 200:
            self._handle_error(response, f"RPC {method}")

        try:
            body = response.json()
        except ValueError as e:
            raise NetworkError(f"RPC {method} returned invalid JSON") from e
        if not isinstance(body, dict):
            raise NetworkError(f"RPC {method} returned a non-object response")

        if body.get("error"):
            error = body["error"]
            message = error.get("message", error) if isinstance(error, dict) else error
            raise NetworkError(f"RPC {method} error: {message}")
        if "result" not in body:
            raise NetworkError(f"RPC {method} returned no result")
        return body["result"]

    async def fetch_system_pricing(self) -> SystemPricing:
        """Read current prices and committee size from the system object.

        The system object only stores a version; the state lives in a
        dynamic field keyed by that version.

        Returns:
            SystemPricing for the current epoch.

        Raises:
            NetworkError: If the RPC fails or the state is malformed.
        """
        system = await self._rpc(
            "sui_getObject",
            [self.system_object_id, {"showContent": True}],
        )
        try:
            version = system["data"]["content"]["fields"]["version"]
        except (KeyError, TypeError) as e:
            raise NetworkError("Walrus system object has no version") from e

        inner_obj = await self._rpc(
            "suix_getDynamicFieldObject",
            [self.system_object_id, {"type": "u64", "value": str(version)}],
        )
        try:
            inner = _fields(inner_obj["data"]["content"]["fields"]["value"])
        except (KeyError, TypeError) as e:
            raise NetworkError("Walrus system state not found") from e
        if not isinstance(inner, dict):
            raise NetworkError("Walrus system state is malformed")

        committee = _fields(inner.get("committee", {}))
        n_shards = committee.get("n_shards") if isinstance(committee, dict) else None
        if n_shards is None:
            n_shards = inner.get("n_shards")

        pricing = SystemPricing(
            storage_price_per_unit_size=_as_int(
                inner.get("storage_price_per_unit_size"), "storage_price_per_unit_size"
            ),
            write_price_per_unit_size=_as_int(
                inner.get("write_price_per_unit_size"), "write_price_per_unit_size"
            ),
            n_shards=_as_int(n_shards, "n_shards"),
        )
        logger.debug(f"[WALRUS] System pricing: {pricing}")
        return pricing

    async def get_system_pricing(self) -> SystemPricing:
        """Return system pricing, reusing a recent read."""
        now = time.monotonic()
        if self._pricing is None or now - self._pricing_fetched_at > self.pricing_cache_seconds:
            self._pricing = await self.fetch_system_pricing()
            self._pricing_fetched_at = now
        return self._pricing

    async def quote_cost(self, size: int, epochs: int) -> CostQuote:
        """Quote storage and write cost for a blob.

        Args:
            size: Unencoded blob size in bytes.
            epochs: Storage duration in epochs.

        Returns:
            CostQuote in smallest units.
        """
        pricing = await self.get_system_pricing()
        try:
            encoded_size = encoded_blob_length(size, pricing.n_shards)
        except ValueError as e:
            raise NetworkError(f"Cannot encode blob: {e}") from e
        units = storage_units_from_size(encoded_size)

        return CostQuote(
            storage_cost=units * pricing.storage_price_per_unit_size * epochs,
            write_cost=units * pricing.write_price_per_unit_size,
            encoded_size=encoded_size,
            storage_units=units,
        )

    async def write_blob(self, data: bytes, epochs: int, deletable: bool) -> dict[str, Any]:
        """Store a blob through the publisher.

        Args:
            data: Blob contents.
            epochs: Storage duration in epochs.
            deletable: Whether the blob can be deleted before expiry.

        Returns:
            The publisher's JSON receipt.
        """
        params: dict[str, Any] = {
            "epochs": epochs,
            "deletable": "true" if deletable else "false",
        }
        if self.owner_address:
            params["send_object_to"] = self.owner_address

        response = await self._send(
            "PUT",
            f"{self.publisher_url}/v1/blobs",
            "Blob write",
            params=params,
            content=data,
            headers={"Content-Type": "application/octet-stream"},
        )
        if response.status_code != 200:
            self._handle_error(response, "Blob write")

        try:
            receipt = response.json()
        except ValueError as e:
            raise NetworkError("Publisher returned invalid JSON") from e
        if not isinstance(receipt, dict):
            raise NetworkError("Publisher returned an unexpected receipt")
        return receipt

    async def read_blob(self, blob_id: str) -> bytes:
        """Read the decoded contents of a blob from the aggregator.

        The aggregator's ``/v1/blobs/{id}`` route returns the original bytes,
        not the encoded slivers.
        """
        response = await self._send(
            "GET",
            f"{self.aggregator_url}/v1/blobs/{quote(blob_id, safe='')}",
            "Blob read",
        )
        if response.status_code == 404:
            raise BlobNotFound(blob_id)
        if response.status_code != 200:
            self._handle_error(response, "Blob read")
        return response.content


def extract_blob_id(receipt: dict[str, Any]) -> str | None:
    """Pull the blob ID out of a publisher receipt.

    Handles both ``newlyCreated`` and ``alreadyCertified`` receipts.
    """
    if not isinstance(receipt, dict):
        return None

    newly_created = receipt.get("newlyCreated")
    if isinstance(newly_created, dict):
        blob_object = newly_created.get("blobObject")
        if isinstance(blob_object, dict) and blob_object.get("blobId"):
            return str(blob_object["blobId"])

    already_certified = receipt.get("alreadyCertified")
    if isinstance(already_certified, dict) and already_certified.get("blobId"):
        return str(already_certified["blobId"])

    blob_id = receipt.get("blobId")
    return str(blob_id) if blob_id else None
