"""Storage endpoints: cost estimate, blob write and blob read.

Endpoints:
    GET  /storage-cost    - Quote the cost of storing a file
    POST /write           - Upload a file as a blob
    GET  /read/{blob_id}  - Download a blob's original bytes

Errors raised here are ``GatewayError`` subclasses; the handlers in
``walrus_gateway.main`` turn them into ``{"error": ...}`` responses.
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile
from fastapi.responses import JSONResponse, Response

from walrus_gateway.api.dependencies import get_app_settings, get_estimator, get_gateway
from walrus_gateway.config import Settings
from walrus_gateway.core.errors import InvalidRequestError, PayloadTooLargeError
from walrus_gateway.core.estimator import CostEstimator, parse_epochs
from walrus_gateway.core.gateway import BlobGateway
from walrus_gateway.schemas import CostEstimateResponse, ErrorResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["storage"])


@router.get(
    "/storage-cost",
    response_model=CostEstimateResponse,
    responses={400: {"model": ErrorResponse}, 502: {"model": ErrorResponse}},
)
async def get_storage_cost(
    file_size: str | None = Query(default=None, alias="fileSize", description="Size in bytes"),
    epochs: str | None = Query(default=None, description="Storage duration in epochs"),
    estimator: CostEstimator = Depends(get_estimator),
) -> JSONResponse:
    """Estimate the cost of storing a file of ``fileSize`` bytes.

    Parameters arrive as raw strings and are validated in one step before
    the network is contacted.
    """
    report = await estimator.estimate_raw(file_size, epochs)
    body = CostEstimateResponse.from_report(report)
    return JSONResponse(content=body.model_dump(by_alias=True, exclude_none=True))


@router.post(
    "/write",
    responses={400: {"model": ErrorResponse}, 413: {"model": ErrorResponse}, 502: {"model": ErrorResponse}},
)
async def write_blob(
    file: UploadFile | None = File(default=None),
    epochs: str | None = Form(default=None),
    gateway: BlobGateway = Depends(get_gateway),
    settings: Settings = Depends(get_app_settings),
) -> dict[str, Any]:
    """Upload the multipart ``file`` field and return the write receipt."""
    if file is None:
        raise InvalidRequestError("file form field is required")
    epoch_count = parse_epochs(epochs, gateway.default_epochs)

    data = await file.read(settings.MAX_UPLOAD_BYTES + 1)
    if len(data) > settings.MAX_UPLOAD_BYTES:
        raise PayloadTooLargeError()
    if not data:
        raise InvalidRequestError("file must not be empty")

    result = await gateway.upload(data, file.filename or "blob", epochs=epoch_count)
    return result.receipt


@router.get(
    "/read/{blob_id}",
    response_class=Response,
    responses={404: {"model": ErrorResponse}, 502: {"model": ErrorResponse}},
)
async def read_blob(
    blob_id: str,
    gateway: BlobGateway = Depends(get_gateway),
) -> Response:
    """Return the original bytes of a blob."""
    data = await gateway.download(blob_id)
    return Response(content=data, media_type="application/octet-stream")
