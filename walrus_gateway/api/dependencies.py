"""FastAPI dependencies resolving the process-wide collaborators.

``create_app`` builds the estimator, gateway and settings once and stores
them on ``app.state``; endpoints receive them through these functions so
tests can inject stubs.
"""

from __future__ import annotations

from fastapi import Request

from walrus_gateway.config import Settings
from walrus_gateway.core.estimator import CostEstimator
from walrus_gateway.core.gateway import BlobGateway


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_estimator(request: Request) -> CostEstimator:
    return request.app.state.estimator


def get_gateway(request: Request) -> BlobGateway:
    return request.app.state.gateway
