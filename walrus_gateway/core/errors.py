"""Gateway error taxonomy.

Every error carries the HTTP status it maps to and a caller-safe message.
Upstream failures keep the original exception as ``__cause__`` for
logging; the message never includes upstream text.

Tests:
    - tests/unit/test_errors.py
"""

from __future__ import annotations

__all__ = [
    "GatewayError",
    "InvalidRequestError",
    "InvalidSizeError",
    "InvalidEpochError",
    "PayloadTooLargeError",
    "NotFoundError",
    "UpstreamError",
    "UpstreamQuoteError",
    "UploadError",
    "DownloadError",
]


class GatewayError(Exception):
    """Base exception for gateway errors.

    Attributes:
        message: Message safe to return to the caller
        status_code: HTTP status the error maps to
    """

    status_code: int = 500
    default_message: str = "Internal server error"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class InvalidRequestError(GatewayError):
    """Caller input was rejected before any network call."""

    status_code = 400
    default_message = "Invalid request"


class InvalidSizeError(InvalidRequestError):
    """File size missing, non-numeric or not positive."""

    default_message = "size must be a positive number"


class InvalidEpochError(InvalidRequestError):
    """Epoch count is not a positive integer."""

    default_message = "epochs must be a positive integer"


class PayloadTooLargeError(InvalidRequestError):
    """Upload exceeds the configured size limit."""

    status_code = 413
    default_message = "file exceeds maximum upload size"


class NotFoundError(GatewayError):
    """The network holds no blob for the identifier."""

    status_code = 404
    default_message = "blob not found"


class UpstreamError(GatewayError):
    """The storage network failed or did not answer in time.

    Attributes:
        timed_out: True when the failure was a timeout (maps to 504)
    """

    status_code = 502
    default_message = "Storage network request failed"

    def __init__(self, message: str | None = None, timed_out: bool = False) -> None:
        super().__init__(message)
        self.timed_out = timed_out
        if timed_out:
            self.status_code = 504


class UpstreamQuoteError(UpstreamError):
    """The cost quote could not be obtained."""

    default_message = "failed to fetch storage cost quote"


class UploadError(UpstreamError):
    """The blob write failed."""

    default_message = "failed to upload blob"


class DownloadError(UpstreamError):
    """The blob read failed for a reason other than absence."""

    default_message = "failed to read blob"
