"""Fiat exchange-rate sources.

A missing rate is not an error: the estimator omits the fiat field
instead of reporting a made-up value.

Tests:
    - tests/unit/test_pricing.py
"""

from __future__ import annotations

import logging
import time
from abc import ABC, abstractmethod
from decimal import Decimal, InvalidOperation

import httpx

logger = logging.getLogger(__name__)

COINGECKO_BASE_URL = "https://api.coingecko.com/api/v3"


class PriceFeed(ABC):
    """Source of the token to fiat exchange rate."""

    currency: str = "usd"

    @abstractmethod
    async def get_rate(self) -> Decimal | None:
        """Return the current rate, or None if unavailable."""

    async def close(self) -> None:
        """Release resources."""


class StaticPriceFeed(PriceFeed):
    """Fixed rate taken from configuration."""

    def __init__(self, rate: Decimal, currency: str = "usd") -> None:
        if rate < 0:
            raise ValueError("rate must not be negative")
        self.rate = rate
        self.currency = currency

    async def get_rate(self) -> Decimal | None:
        return self.rate


class CoinGeckoPriceFeed(PriceFeed):
    """Rate fetched from CoinGecko's simple price endpoint.

    Successful reads are cached for ``cache_seconds``. Failures are logged
    and reported as None.

    Attributes:
        coin_id: CoinGecko coin id (e.g. "sui")
        currency: Fiat currency code
        base_url: API base URL
        timeout: Request timeout in seconds
        cache_seconds: Cache lifetime of a fetched rate
    """

    def __init__(
        self,
        coin_id: str = "sui",
        currency: str = "usd",
        base_url: str = COINGECKO_BASE_URL,
        timeout: float = 5.0,
        cache_seconds: float = 60.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.coin_id = coin_id
        self.currency = currency
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.cache_seconds = cache_seconds
        self._transport = transport
        self._client: httpx.AsyncClient | None = None
        self._rate: Decimal | None = None
        self._fetched_at = 0.0

    @property
    def client(self) -> httpx.AsyncClient:
        """Get httpx async client (lazy initialization)."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    async def get_rate(self) -> Decimal | None:
        now = time.monotonic()
        if self._rate is not None and now - self._fetched_at <= self.cache_seconds:
            return self._rate

        try:
            response = await self.client.get(
                "/simple/price",
                params={"ids": self.coin_id, "vs_currencies": self.currency},
            )
            response.raise_for_status()
            # parse_float keeps the quoted digits exactly
            data = response.json(parse_float=Decimal)
            rate = Decimal(str(data[self.coin_id][self.currency]))
        except (httpx.HTTPError, ValueError, KeyError, TypeError, InvalidOperation) as e:
            logger.warning(f"[PRICE] Exchange rate unavailable for {self.coin_id}: {e}")
            return None

        if not rate.is_finite() or rate < 0:
            logger.warning(f"[PRICE] Ignoring unusable rate for {self.coin_id}: {rate}")
            return None

        self._rate = rate
        self._fetched_at = now
        return rate
