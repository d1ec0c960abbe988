"""
Pytest configuration and fixtures for Walrus Gateway tests.

No test talks to a real network: the app is built around ``StubNetwork``,
an in-memory ``StorageNetwork`` that records every call.
"""
import base64
import hashlib
from typing import Any, AsyncGenerator

import pytest
from httpx import ASGITransport, AsyncClient

from walrus_gateway.config import Settings
from walrus_gateway.main import create_app
from walrus_gateway.network.base import BlobNotFound, CostQuote, NetworkError, StorageNetwork


# Ed25519 seed 0x00..0x1f, base64 encoded
TEST_SECRET_KEY = base64.b64encode(bytes(range(32))).decode()


# ============================================
# Stub Network
# ============================================

class StubNetwork(StorageNetwork):
    """In-memory storage network.

    Quotes a fixed cost, stores blobs under their sha256 and records every
    call so tests can assert on what reached the network.
    """

    def __init__(self, storage_cost: int = 500_000_000, write_cost: int = 100_000_000):
        self.quote = CostQuote(storage_cost=storage_cost, write_cost=write_cost)
        self.blobs: dict[str, bytes] = {}
        self.quote_calls: list[tuple[int, int]] = []
        self.write_calls: list[dict[str, Any]] = []
        self.read_calls: list[str] = []
        self.fail_with: Exception | None = None
        self.closed = False

    async def quote_cost(self, size: int, epochs: int) -> CostQuote:
        self.quote_calls.append((size, epochs))
        if self.fail_with is not None:
            raise self.fail_with
        return self.quote

    async def write_blob(self, data: bytes, epochs: int, deletable: bool) -> dict[str, Any]:
        self.write_calls.append({"size": len(data), "epochs": epochs, "deletable": deletable})
        if self.fail_with is not None:
            raise self.fail_with
        blob_id = hashlib.sha256(data).hexdigest()
        self.blobs[blob_id] = data
        return {
            "newlyCreated": {
                "blobObject": {
                    "blobId": blob_id,
                    "size": len(data),
                    "deletable": deletable,
                },
                "cost": self.quote.write_cost,
            }
        }

    async def read_blob(self, blob_id: str) -> bytes:
        self.read_calls.append(blob_id)
        if self.fail_with is not None:
            raise self.fail_with
        if blob_id not in self.blobs:
            raise BlobNotFound(blob_id)
        return self.blobs[blob_id]

    async def close(self) -> None:
        self.closed = True


# ============================================
# Test Fixtures
# ============================================

@pytest.fixture
def secret_key() -> str:
    """Valid base64 Ed25519 secret key."""
    return TEST_SECRET_KEY


@pytest.fixture
def test_settings() -> Settings:
    """Settings that ignore any local .env file."""
    return Settings(
        SUI_SECRET_KEY=TEST_SECRET_KEY,
        SUI_NETWORK="testnet",
        FIAT_RATE=None,
        PRICE_FEED_ENABLED=False,
        MAX_UPLOAD_BYTES=1024,
        _env_file=None,
    )


@pytest.fixture
def stub_network() -> StubNetwork:
    """Fresh in-memory network per test."""
    return StubNetwork()


@pytest.fixture
def failing_network() -> StubNetwork:
    """Network whose every call fails."""
    network = StubNetwork()
    network.fail_with = NetworkError("publisher unavailable", status_code=503, retryable=True)
    return network


@pytest.fixture
def app(test_settings: Settings, stub_network: StubNetwork):
    """Application wired to the stub network."""
    return create_app(settings=test_settings, network=stub_network)


@pytest.fixture
async def test_client(app) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client bound to the application."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as client:
        yield client


# ============================================
# Pytest Configuration
# ============================================

def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers", "fast: Fast unit tests (no external API calls)"
    )
    config.addinivalue_line(
        "markers", "integration: Tests that exercise the HTTP surface end to end"
    )
