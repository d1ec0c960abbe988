"""Integration tests for the storage API.

Tests:
    - GET  /storage-cost
    - POST /write
    - GET  /read/{blobId}

The app runs in-process against ``StubNetwork``; nothing leaves the test.

Run with:
    pytest tests/integration/test_api_storage.py -v
"""

import pytest
from httpx import ASGITransport, AsyncClient

from walrus_gateway.config import Settings
from walrus_gateway.main import create_app


@pytest.fixture
async def failing_client(test_settings, failing_network):
    """Client for an app whose network always fails."""
    app = create_app(settings=test_settings, network=failing_network)
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client


@pytest.fixture
async def priced_client(secret_key, stub_network):
    """Client for an app with a static USD rate of 2.5."""
    settings = Settings(SUI_SECRET_KEY=secret_key, FIAT_RATE="2.5", _env_file=None)
    app = create_app(settings=settings, network=stub_network)
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client


# Storage Cost Endpoint Tests


@pytest.mark.integration
class TestStorageCost:
    """Tests for GET /storage-cost."""

    @pytest.mark.asyncio
    async def test_estimate(self, test_client, stub_network):
        """Test a 1 MiB, 5-epoch estimate returns exact totals."""
        response = await test_client.get(
            "/storage-cost", params={"fileSize": "1048576", "epochs": "5"}
        )
        assert response.status_code == 200

        data = response.json()
        assert data == {
            "fileSizeBytes": 1048576,
            "epochs": 5,
            "storageCost": "500000000",
            "writeCost": "100000000",
            "totalCost": "600000000",
            "totalCostInSui": 0.6,
        }
        assert stub_network.quote_calls == [(1048576, 5)]

    @pytest.mark.asyncio
    async def test_default_epochs(self, test_client, stub_network):
        """Test omitted epochs default to 3."""
        response = await test_client.get("/storage-cost", params={"fileSize": "100"})
        assert response.status_code == 200
        assert response.json()["epochs"] == 3
        assert stub_network.quote_calls == [(100, 3)]

    @pytest.mark.asyncio
    async def test_usd_with_rate(self, priced_client):
        """Test totalCostInUsd appears when a rate is configured."""
        response = await priced_client.get("/storage-cost", params={"fileSize": "10"})
        assert response.status_code == 200
        assert response.json()["totalCostInUsd"] == pytest.approx(1.5)

    @pytest.mark.asyncio
    async def test_usd_omitted_without_rate(self, test_client):
        """Test totalCostInUsd is absent when no rate is available."""
        response = await test_client.get("/storage-cost", params={"fileSize": "10"})
        assert "totalCostInUsd" not in response.json()

    @pytest.mark.asyncio
    async def test_missing_size(self, test_client, stub_network):
        """Test a missing fileSize is a 400 with its own message."""
        response = await test_client.get("/storage-cost")
        assert response.status_code == 400
        assert response.json() == {"error": "fileSize query parameter is required (in bytes)"}
        assert stub_network.quote_calls == []

    @pytest.mark.asyncio
    @pytest.mark.parametrize("size", ["abc", "0", "-10", "1.5", ""])
    async def test_invalid_size(self, test_client, stub_network, size):
        """Test invalid sizes are 400 and never reach the network."""
        response = await test_client.get("/storage-cost", params={"fileSize": size})
        assert response.status_code == 400
        assert response.json() == {"error": "size must be a positive number"}
        assert stub_network.quote_calls == []

    @pytest.mark.asyncio
    @pytest.mark.parametrize("epochs", ["2.5", "0", "-1", "many"])
    async def test_invalid_epochs(self, test_client, stub_network, epochs):
        """Test invalid epochs are 400 and never reach the network."""
        response = await test_client.get(
            "/storage-cost", params={"fileSize": "100", "epochs": epochs}
        )
        assert response.status_code == 400
        assert response.json() == {"error": "epochs must be a positive integer"}
        assert stub_network.quote_calls == []

    @pytest.mark.asyncio
    async def test_upstream_failure(self, failing_client):
        """Test a failed quote is a 502 without upstream details."""
        response = await failing_client.get("/storage-cost", params={"fileSize": "100"})
        assert response.status_code == 502
        assert response.json() == {"error": "failed to fetch storage cost quote"}


# Write Endpoint Tests


@pytest.mark.integration
class TestWrite:
    """Tests for POST /write."""

    @pytest.mark.asyncio
    async def test_upload(self, test_client, stub_network):
        """Test an upload returns the network receipt."""
        response = await test_client.post(
            "/write", files={"file": ("hello.txt", b"hello walrus", "text/plain")}
        )
        assert response.status_code == 200

        blob_id = response.json()["newlyCreated"]["blobObject"]["blobId"]
        assert stub_network.blobs[blob_id] == b"hello walrus"
        assert stub_network.write_calls == [{"size": 12, "epochs": 3, "deletable": True}]

    @pytest.mark.asyncio
    async def test_upload_with_epochs(self, test_client, stub_network):
        """Test the epochs form field reaches the network."""
        response = await test_client.post(
            "/write",
            files={"file": ("a.bin", b"abc", "application/octet-stream")},
            data={"epochs": "7"},
        )
        assert response.status_code == 200
        assert stub_network.write_calls[0]["epochs"] == 7

    @pytest.mark.asyncio
    async def test_invalid_epochs(self, test_client, stub_network):
        """Test invalid upload epochs are rejected before writing."""
        response = await test_client.post(
            "/write",
            files={"file": ("a.bin", b"abc", "application/octet-stream")},
            data={"epochs": "0"},
        )
        assert response.status_code == 400
        assert response.json() == {"error": "epochs must be a positive integer"}
        assert stub_network.write_calls == []

    @pytest.mark.asyncio
    async def test_missing_file(self, test_client, stub_network):
        """Test a request without the file field is a 400."""
        response = await test_client.post("/write", data={"epochs": "3"})
        assert response.status_code == 400
        assert response.json() == {"error": "file form field is required"}
        assert stub_network.write_calls == []

    @pytest.mark.asyncio
    async def test_empty_file(self, test_client, stub_network):
        """Test an empty file is a 400."""
        response = await test_client.post(
            "/write", files={"file": ("empty.txt", b"", "text/plain")}
        )
        assert response.status_code == 400
        assert stub_network.write_calls == []

    @pytest.mark.asyncio
    async def test_file_too_large(self, test_client, stub_network):
        """Test a file over MAX_UPLOAD_BYTES is a 413."""
        response = await test_client.post(
            "/write", files={"file": ("big.bin", b"x" * 2048, "application/octet-stream")}
        )
        assert response.status_code == 413
        assert response.json() == {"error": "file exceeds maximum upload size"}
        assert stub_network.write_calls == []

    @pytest.mark.asyncio
    async def test_upstream_failure(self, failing_client):
        """Test a failed write is a 502."""
        response = await failing_client.post(
            "/write", files={"file": ("a.txt", b"abc", "text/plain")}
        )
        assert response.status_code == 502
        assert response.json() == {"error": "failed to upload blob"}


# Read Endpoint Tests


@pytest.mark.integration
class TestRead:
    """Tests for GET /read/{blobId}."""

    @pytest.mark.asyncio
    async def test_round_trip(self, test_client):
        """Test bytes written through /write read back unchanged."""
        payload = bytes(range(256))
        write = await test_client.post(
            "/write", files={"file": ("bytes.bin", payload, "application/octet-stream")}
        )
        blob_id = write.json()["newlyCreated"]["blobObject"]["blobId"]

        response = await test_client.get(f"/read/{blob_id}")
        assert response.status_code == 200
        assert response.headers["content-type"] == "application/octet-stream"
        assert response.content == payload

    @pytest.mark.asyncio
    async def test_not_found(self, test_client):
        """Test an unknown blob ID is a 404."""
        response = await test_client.get("/read/does-not-exist")
        assert response.status_code == 404
        assert response.json() == {"error": "blob not found"}

    @pytest.mark.asyncio
    async def test_upstream_failure(self, failing_client):
        """Test a failed read is a 502."""
        response = await failing_client.get("/read/abc")
        assert response.status_code == 502
        assert response.json() == {"error": "failed to read blob"}
