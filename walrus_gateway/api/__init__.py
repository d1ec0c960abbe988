"""HTTP API routes."""

from walrus_gateway.api.storage import router

__all__ = ["router"]
