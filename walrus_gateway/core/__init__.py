"""Gateway core: unit conversion, cost estimation and blob proxying."""

from walrus_gateway.core.errors import (
    DownloadError,
    GatewayError,
    InvalidEpochError,
    InvalidRequestError,
    InvalidSizeError,
    NotFoundError,
    PayloadTooLargeError,
    UploadError,
    UpstreamError,
    UpstreamQuoteError,
)
from walrus_gateway.core.estimator import (
    DEFAULT_EPOCHS,
    CostEstimator,
    CostReport,
    EstimateRequest,
    parse_epochs,
    parse_estimate_request,
)
from walrus_gateway.core.gateway import BlobGateway, UploadResult
from walrus_gateway.core.units import DEFAULT_UNITS_PER_TOKEN, format_native, to_fiat, to_native_unit

__all__ = [
    "DEFAULT_EPOCHS",
    "DEFAULT_UNITS_PER_TOKEN",
    "BlobGateway",
    "CostEstimator",
    "CostReport",
    "DownloadError",
    "EstimateRequest",
    "GatewayError",
    "InvalidEpochError",
    "InvalidRequestError",
    "InvalidSizeError",
    "NotFoundError",
    "PayloadTooLargeError",
    "UploadError",
    "UploadResult",
    "UpstreamError",
    "UpstreamQuoteError",
    "format_native",
    "parse_epochs",
    "parse_estimate_request",
    "to_fiat",
    "to_native_unit",
]
