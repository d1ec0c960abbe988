"""FastAPI application for the Walrus Gateway.

This module builds the application: it loads settings, the signer and the
network client once, wires them into the estimator and gateway, and maps
gateway errors to JSON responses.

Run with:
    uvicorn walrus_gateway.main:create_app --factory

Examples:
    >>> # Estimate the cost of a 1 MiB file for 5 epochs
    >>> curl "http://localhost:8000/storage-cost?fileSize=1048576&epochs=5"

    >>> # Upload and read back
    >>> curl -F file=@photo.jpg http://localhost:8000/write
    >>> curl -o photo.jpg http://localhost:8000/read/<blobId>

Tests:
    - tests/unit/test_main.py
    - tests/integration/test_api_storage.py
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from walrus_gateway import __version__
from walrus_gateway.api import router as storage_router
from walrus_gateway.config import Settings, get_settings
from walrus_gateway.core.errors import GatewayError, UpstreamError
from walrus_gateway.core.estimator import CostEstimator
from walrus_gateway.core.gateway import BlobGateway
from walrus_gateway.network.base import StorageNetwork
from walrus_gateway.network.pricing import CoinGeckoPriceFeed, PriceFeed, StaticPriceFeed
from walrus_gateway.network.signer import SuiKeypair
from walrus_gateway.network.walrus import WalrusNetwork
from walrus_gateway.schemas import HealthResponse, MessageResponse

logger = logging.getLogger(__name__)

BANNER = "Walrus Gateway: storage cost estimates, blob uploads and reads"


def configure_logging(settings: Settings) -> None:
    """Configure root logging once for the process."""
    logging.basicConfig(
        level=settings.LOG_LEVEL,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def build_price_feed(settings: Settings) -> PriceFeed | None:
    """Pick the exchange-rate source from settings.

    A static FIAT_RATE wins over the live feed; with neither, fiat totals
    are omitted.
    """
    if settings.FIAT_RATE is not None:
        return StaticPriceFeed(settings.FIAT_RATE)
    if settings.PRICE_FEED_ENABLED:
        return CoinGeckoPriceFeed(
            coin_id=settings.PRICE_FEED_COIN_ID,
            base_url=settings.PRICE_FEED_URL,
            timeout=settings.UPSTREAM_TIMEOUT_SECONDS,
            cache_seconds=settings.PRICE_FEED_CACHE_SECONDS,
        )
    return None


def build_network(settings: Settings, keypair: SuiKeypair) -> WalrusNetwork:
    """Create the Walrus client for the configured network."""
    return WalrusNetwork(
        rpc_url=settings.rpc_url,
        publisher_url=settings.publisher_url,
        aggregator_url=settings.aggregator_url,
        system_object_id=settings.system_object_id,
        owner_address=keypair.address if settings.UPLOAD_SEND_TO_SIGNER else None,
        timeout=max(settings.UPSTREAM_TIMEOUT_SECONDS, settings.UPLOAD_TIMEOUT_SECONDS),
    )


def create_app(
    settings: Settings | None = None,
    network: StorageNetwork | None = None,
    price_feed: PriceFeed | None = None,
    keypair: SuiKeypair | None = None,
) -> FastAPI:
    """Build the FastAPI application.

    Collaborators default to the production ones derived from settings;
    tests pass stubs instead.

    Raises:
        pydantic.ValidationError: If settings cannot be loaded (e.g. no
            SUI_SECRET_KEY).
        ValueError: If SUI_SECRET_KEY is not a valid Ed25519 key.
    """
    settings = settings or get_settings()
    configure_logging(settings)

    keypair = keypair or SuiKeypair.from_secret_key(settings.SUI_SECRET_KEY)
    network = network or build_network(settings, keypair)
    if price_feed is None:
        price_feed = build_price_feed(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan manager.

        Closes upstream HTTP clients on shutdown.
        """
        logger.info(
            f"Starting Walrus Gateway v{__version__} on {settings.SUI_NETWORK.value} "
            f"as {keypair.address}"
        )
        yield
        logger.info("Shutting down Walrus Gateway")
        await network.close()
        if price_feed is not None:
            await price_feed.close()

    app = FastAPI(
        title="Walrus Gateway",
        description="Storage cost estimates and blob proxying for Walrus",
        version=__version__,
        lifespan=lifespan,
        docs_url="/docs" if settings.DEBUG else None,
        redoc_url="/redoc" if settings.DEBUG else None,
    )

    app.state.settings = settings
    app.state.keypair = keypair
    app.state.network = network
    app.state.estimator = CostEstimator(
        network=network,
        units_per_token=settings.UNITS_PER_TOKEN,
        price_feed=price_feed,
        timeout=settings.UPSTREAM_TIMEOUT_SECONDS,
        default_epochs=settings.DEFAULT_EPOCHS,
    )
    app.state.gateway = BlobGateway(
        network=network,
        default_epochs=settings.DEFAULT_EPOCHS,
        deletable=settings.UPLOAD_DELETABLE,
        upload_timeout=settings.UPLOAD_TIMEOUT_SECONDS,
        download_timeout=settings.UPSTREAM_TIMEOUT_SECONDS,
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"] if settings.DEBUG else settings.CORS_ORIGINS,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(storage_router)

    # Exception handlers
    @app.exception_handler(GatewayError)
    async def gateway_exception_handler(request: Request, exc: GatewayError):
        """Render gateway errors as ``{"error": message}``."""
        if isinstance(exc, UpstreamError):
            logger.error(
                f"{request.method} {request.url.path}: {exc.message} "
                f"(cause: {exc.__cause__!r})"
            )
        return JSONResponse(status_code=exc.status_code, content={"error": exc.message})

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        """Handle HTTP exceptions with consistent response format."""
        return JSONResponse(status_code=exc.status_code, content={"error": exc.detail})

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        """Handle unexpected exceptions."""
        logger.exception(f"Unexpected error: {exc}")
        content = {"error": "Internal server error"}
        if settings.DEBUG:
            content["detail"] = str(exc)
        return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content=content)

    @app.get("/", response_model=MessageResponse, tags=["Root"])
    async def root() -> MessageResponse:
        """Service banner."""
        return MessageResponse(message=BANNER)

    @app.get("/health", tags=["Health"])
    async def health_check() -> JSONResponse:
        """Report version, network and signer address."""
        body = HealthResponse(
            status="healthy",
            version=__version__,
            network=settings.SUI_NETWORK.value,
            signer_address=keypair.address,
        )
        return JSONResponse(content=body.model_dump(by_alias=True))

    return app


def run() -> None:
    """Serve the application with uvicorn using HOST and PORT from settings."""
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "walrus_gateway.main:create_app",
        factory=True,
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
    )


# Entry point for development
if __name__ == "__main__":
    run()
