"""Storage cost estimation.

Turns a candidate upload (size in bytes, duration in epochs) into a
``CostReport``: the network's storage and write quotes, their exact sum
and the sum rendered in tokens and, when a rate is available, fiat.

Caller input is parsed and validated by ``parse_estimate_request`` before
the network is contacted.

Examples:
    >>> estimator = CostEstimator(network=WalrusNetwork(...))
    >>> request = parse_estimate_request("1048576", "5")
    >>> report = await estimator.estimate(request)
    >>> report.total_cost
    600000000

Tests:
    - tests/unit/test_estimator.py
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation

from walrus_gateway.core.errors import InvalidEpochError, InvalidSizeError, UpstreamQuoteError
from walrus_gateway.core.units import DEFAULT_UNITS_PER_TOKEN, to_fiat, to_native_unit
from walrus_gateway.network.base import CostQuote, NetworkError, StorageNetwork
from walrus_gateway.network.pricing import PriceFeed

logger = logging.getLogger(__name__)

DEFAULT_EPOCHS = 3

# Walrus sizes are u64 and epochs u32 on chain.
MAX_BLOB_SIZE = 2**64 - 1
MAX_EPOCHS = 2**32 - 1

MISSING_SIZE_MESSAGE = "fileSize query parameter is required (in bytes)"
INVALID_SIZE_MESSAGE = "size must be a positive number"
INVALID_EPOCHS_MESSAGE = "epochs must be a positive integer"


@dataclass(frozen=True)
class EstimateRequest:
    """Validated estimation input.

    Attributes:
        size: Payload size in bytes (positive)
        epochs: Storage duration in epochs (positive)
    """

    size: int
    epochs: int = DEFAULT_EPOCHS


@dataclass(frozen=True)
class CostReport:
    """Result of a cost estimate.

    Attributes:
        size: Payload size in bytes
        epochs: Storage duration in epochs
        storage_cost: Quoted storage cost in smallest units
        write_cost: Quoted write cost in smallest units
        total_cost: storage_cost + write_cost, exact
        total_cost_native: total_cost in display tokens
        total_cost_fiat: total in fiat, None when no rate was available
        fiat_currency: Currency code of total_cost_fiat
    """

    size: int
    epochs: int
    storage_cost: int
    write_cost: int
    total_cost: int
    total_cost_native: Decimal
    total_cost_fiat: Decimal | None = None
    fiat_currency: str | None = None


def _parse_number(raw: str) -> Decimal | None:
    """Parse a finite decimal, or return None."""
    try:
        value = Decimal(raw.strip())
    except InvalidOperation:
        return None
    if not value.is_finite():
        return None
    return value


def parse_size(raw: str | None) -> int:
    """Parse a payload size in bytes.

    Raises:
        InvalidSizeError: If absent, non-numeric, fractional or not positive.
    """
    if raw is None:
        raise InvalidSizeError(MISSING_SIZE_MESSAGE)

    value = _parse_number(raw)
    if value is None or value <= 0 or value > MAX_BLOB_SIZE:
        raise InvalidSizeError(INVALID_SIZE_MESSAGE)
    if value != value.to_integral_value():
        raise InvalidSizeError(INVALID_SIZE_MESSAGE)
    return int(value)


def parse_epochs(raw: str | None, default: int = DEFAULT_EPOCHS) -> int:
    """Parse an epoch count, falling back to ``default`` when omitted.

    Raises:
        InvalidEpochError: If present but not a positive integer.
    """
    if raw is None or raw.strip() == "":
        return default

    value = _parse_number(raw)
    if value is None or value <= 0 or value > MAX_EPOCHS:
        raise InvalidEpochError(INVALID_EPOCHS_MESSAGE)
    if value != value.to_integral_value():
        raise InvalidEpochError(INVALID_EPOCHS_MESSAGE)
    return int(value)


def parse_estimate_request(
    file_size: str | None,
    epochs: str | None,
    default_epochs: int = DEFAULT_EPOCHS,
) -> EstimateRequest:
    """Parse and validate raw query parameters.

    Size is checked before epochs, so a request with both wrong reports
    the size error.

    Args:
        file_size: Raw ``fileSize`` parameter.
        epochs: Raw ``epochs`` parameter.
        default_epochs: Epochs used when ``epochs`` is omitted.

    Returns:
        EstimateRequest.

    Raises:
        InvalidSizeError: For a missing or invalid size.
        InvalidEpochError: For an invalid epoch count.
    """
    size = parse_size(file_size)
    return EstimateRequest(size=size, epochs=parse_epochs(epochs, default_epochs))


def _check_quote(quote: CostQuote) -> None:
    for name in ("storage_cost", "write_cost"):
        value = getattr(quote, name, None)
        if isinstance(value, bool) or not isinstance(value, int) or value < 0:
            raise UpstreamQuoteError(f"malformed quote: {name}={value!r}")


class CostEstimator:
    """Produces cost reports from network quotes.

    Attributes:
        network: Storage network providing quotes
        units_per_token: Smallest units per display token
        price_feed: Optional fiat exchange-rate source
        timeout: Budget for one quote, in seconds
        default_epochs: Epochs used when the caller omits them
    """

    def __init__(
        self,
        network: StorageNetwork,
        units_per_token: int = DEFAULT_UNITS_PER_TOKEN,
        price_feed: PriceFeed | None = None,
        timeout: float = 30.0,
        default_epochs: int = DEFAULT_EPOCHS,
    ) -> None:
        self.network = network
        self.units_per_token = units_per_token
        self.price_feed = price_feed
        self.timeout = timeout
        self.default_epochs = default_epochs

    async def _quote(self, request: EstimateRequest) -> CostQuote:
        try:
            quote = await asyncio.wait_for(
                self.network.quote_cost(request.size, request.epochs),
                timeout=self.timeout,
            )
        except asyncio.TimeoutError as e:
            raise UpstreamQuoteError(timed_out=True) from e
        except NetworkError as e:
            raise UpstreamQuoteError() from e

        if not isinstance(quote, CostQuote):
            raise UpstreamQuoteError(f"malformed quote: {quote!r}")
        _check_quote(quote)
        return quote

    async def _fiat_rate(self) -> Decimal | None:
        if self.price_feed is None:
            return None
        try:
            rate = await self.price_feed.get_rate()
        except Exception as e:
            logger.warning(f"[ESTIMATE] Price feed failed, omitting fiat total: {e}")
            return None

        if rate is None:
            return None
        if not isinstance(rate, Decimal) or not rate.is_finite() or rate < 0:
            logger.warning(f"[ESTIMATE] Unusable fiat rate {rate!r}, omitting fiat total")
            return None
        return rate

    async def estimate(self, request: EstimateRequest) -> CostReport:
        """Estimate the cost of storing a payload.

        Args:
            request: Validated size and epochs.

        Returns:
            CostReport with exact integer totals.

        Raises:
            UpstreamQuoteError: If the quote fails, times out or is malformed.
        """
        quote = await self._quote(request)
        total = quote.storage_cost + quote.write_cost
        native = to_native_unit(total, self.units_per_token)

        rate = await self._fiat_rate()
        fiat = to_fiat(native, rate) if rate is not None else None

        logger.info(
            f"[ESTIMATE] size={request.size} epochs={request.epochs} "
            f"storage={quote.storage_cost} write={quote.write_cost} total={total}"
        )
        return CostReport(
            size=request.size,
            epochs=request.epochs,
            storage_cost=quote.storage_cost,
            write_cost=quote.write_cost,
            total_cost=total,
            total_cost_native=native,
            total_cost_fiat=fiat,
            fiat_currency=self.price_feed.currency if fiat is not None else None,
        )

    async def estimate_raw(self, file_size: str | None, epochs: str | None) -> CostReport:
        """Validate raw parameters, then estimate."""
        request = parse_estimate_request(file_size, epochs, self.default_epochs)
        return await self.estimate(request)
