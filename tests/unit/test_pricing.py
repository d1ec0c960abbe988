"""Unit tests for fiat price feeds.

Tests for walrus_gateway/network/pricing.py.

Run with:
    pytest tests/unit/test_pricing.py -v
"""

from decimal import Decimal

import httpx
import pytest

from walrus_gateway.network.pricing import CoinGeckoPriceFeed, StaticPriceFeed


@pytest.mark.fast
class TestStaticPriceFeed:
    """Tests for StaticPriceFeed."""

    @pytest.mark.asyncio
    async def test_returns_rate(self):
        """Test the configured rate is returned as-is."""
        feed = StaticPriceFeed(Decimal("2.5"))
        assert await feed.get_rate() == Decimal("2.5")
        assert feed.currency == "usd"

    def test_rejects_negative(self):
        """Test a negative rate is rejected at construction."""
        with pytest.raises(ValueError):
            StaticPriceFeed(Decimal("-1"))


@pytest.mark.fast
class TestCoinGeckoPriceFeed:
    """Tests for CoinGeckoPriceFeed."""

    @pytest.mark.asyncio
    async def test_fetches_rate(self):
        """Test the rate is read from the simple price endpoint."""
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, text='{"sui": {"usd": 3.1415}}')

        feed = CoinGeckoPriceFeed(transport=httpx.MockTransport(handler))
        rate = await feed.get_rate()

        assert rate == Decimal("3.1415")
        assert seen[0].url.path.endswith("/simple/price")
        assert seen[0].url.params["ids"] == "sui"
        assert seen[0].url.params["vs_currencies"] == "usd"
        await feed.close()

    @pytest.mark.asyncio
    async def test_caches_rate(self):
        """Test a fetched rate is reused within the cache window."""
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(200, json={"sui": {"usd": 2}})

        feed = CoinGeckoPriceFeed(transport=httpx.MockTransport(handler), cache_seconds=60)
        await feed.get_rate()
        await feed.get_rate()
        assert len(calls) == 1

    @pytest.mark.asyncio
    async def test_http_error_returns_none(self):
        """Test an upstream error yields no rate instead of raising."""
        def handler(request):
            return httpx.Response(429, text="rate limited")

        feed = CoinGeckoPriceFeed(transport=httpx.MockTransport(handler))
        assert await feed.get_rate() is None

    @pytest.mark.asyncio
    async def test_missing_coin_returns_none(self):
        """Test a response without the coin yields no rate."""
        def handler(request):
            return httpx.Response(200, json={})

        feed = CoinGeckoPriceFeed(transport=httpx.MockTransport(handler))
        assert await feed.get_rate() is None

    @pytest.mark.asyncio
    @pytest.mark.parametrize("raw", ["-1.5", "NaN", "Infinity", "-Infinity"])
    async def test_unusable_rate_returns_none(self, raw):
        """Test a negative or non-finite quote yields no rate and is not cached."""
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(200, text='{"sui": {"usd": %s}}' % raw)

        feed = CoinGeckoPriceFeed(transport=httpx.MockTransport(handler), cache_seconds=60)
        assert await feed.get_rate() is None
        assert await feed.get_rate() is None
        assert len(calls) == 2

    @pytest.mark.asyncio
    async def test_zero_rate_is_usable(self):
        """Test a zero quote is still a valid rate."""
        def handler(request):
            return httpx.Response(200, json={"sui": {"usd": 0}})

        feed = CoinGeckoPriceFeed(transport=httpx.MockTransport(handler))
        assert await feed.get_rate() == Decimal("0")

    @pytest.mark.asyncio
    async def test_failure_is_not_cached(self):
        """Test a failed read does not block the next attempt."""
        responses = [httpx.Response(500), httpx.Response(200, json={"sui": {"usd": 1.5}})]

        def handler(request):
            return responses.pop(0)

        feed = CoinGeckoPriceFeed(transport=httpx.MockTransport(handler))
        assert await feed.get_rate() is None
        assert await feed.get_rate() == Decimal("1.5")
