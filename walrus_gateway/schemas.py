"""API response schemas.

Cost integers cross the HTTP boundary as strings so clients never parse
them into doubles; the token and fiat renderings are display values and
go out as JSON numbers.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from walrus_gateway.core.estimator import CostReport


class MessageResponse(BaseModel):
    """Service banner."""

    message: str


class ErrorResponse(BaseModel):
    """Error response model."""

    error: str


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    version: str
    network: str
    signer_address: str = Field(serialization_alias="signerAddress")


class CostEstimateResponse(BaseModel):
    """Response of ``GET /storage-cost``."""

    file_size_bytes: int = Field(serialization_alias="fileSizeBytes")
    epochs: int
    storage_cost: str = Field(serialization_alias="storageCost")
    write_cost: str = Field(serialization_alias="writeCost")
    total_cost: str = Field(serialization_alias="totalCost")
    total_cost_in_sui: float = Field(serialization_alias="totalCostInSui")
    total_cost_in_usd: float | None = Field(default=None, serialization_alias="totalCostInUsd")

    @classmethod
    def from_report(cls, report: CostReport) -> "CostEstimateResponse":
        """Shape a CostReport for the wire."""
        return cls(
            file_size_bytes=report.size,
            epochs=report.epochs,
            storage_cost=str(report.storage_cost),
            write_cost=str(report.write_cost),
            total_cost=str(report.total_cost),
            total_cost_in_sui=float(report.total_cost_native),
            total_cost_in_usd=(
                float(report.total_cost_fiat) if report.total_cost_fiat is not None else None
            ),
        )
