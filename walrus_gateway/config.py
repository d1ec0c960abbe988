"""Application configuration with Pydantic Settings.

This module provides centralized configuration management using pydantic-settings.
Settings are loaded from environment variables and .env files.

Examples:
    >>> from walrus_gateway.config import get_settings
    >>> settings = get_settings()
    >>> settings.SUI_NETWORK
    <SuiNetwork.TESTNET: 'testnet'>

    >>> settings.get_network_config()["aggregator_url"]
    'https://aggregator.walrus-testnet.walrus.space'

Tests:
    - tests/unit/test_config.py::TestSettings
    - tests/unit/test_config.py::TestNetworkConfig
"""

from decimal import Decimal
from enum import Enum
from functools import lru_cache
from typing import Any

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from walrus_gateway.core.units import DEFAULT_UNITS_PER_TOKEN


class SuiNetwork(str, Enum):
    """Supported Sui / Walrus networks."""

    TESTNET = "testnet"
    MAINNET = "mainnet"


class Environment(str, Enum):
    """Application environment."""

    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"


# Per-network endpoints. Mainnet has no public publisher, so one must be
# configured explicitly via WALRUS_PUBLISHER_URL.
NETWORK_CONFIGS: dict[SuiNetwork, dict[str, Any]] = {
    SuiNetwork.TESTNET: {
        "rpc_url": "https://fullnode.testnet.sui.io:443",
        "publisher_url": "https://publisher.walrus-testnet.walrus.space",
        "aggregator_url": "https://aggregator.walrus-testnet.walrus.space",
        "system_object_id": "0x6c2547cbbc38025cf3adac45f63cb0a8d12ecf777cdc75a4971612bf97fdf6af",
    },
    SuiNetwork.MAINNET: {
        "rpc_url": "https://fullnode.mainnet.sui.io:443",
        "publisher_url": None,
        "aggregator_url": "https://aggregator.walrus-mainnet.walrus.space",
        "system_object_id": "0x2134d52768ea07e8c43570ef975eb3e4c27a39fa6396bef985b5abc58d03ddd2",
    },
}


class Settings(BaseSettings):
    """Application settings.

    Settings are loaded from environment variables and .env file.
    SUI_SECRET_KEY is required; the service refuses to start without it.

    Attributes:
        SUI_SECRET_KEY: Signer key (Bech32 suiprivkey or base64)
        SUI_NETWORK: Network selector (testnet or mainnet)
        PORT: Listening port
        UNITS_PER_TOKEN: Smallest units per display token
        DEFAULT_EPOCHS: Storage duration used when the caller omits epochs
        FIAT_RATE: Static token to USD exchange rate (optional)
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # Signer and network
    SUI_SECRET_KEY: str = Field(
        description="Sui signer secret key (suiprivkey Bech32 or base64)",
    )
    SUI_NETWORK: SuiNetwork = Field(
        default=SuiNetwork.TESTNET,
        description="Sui / Walrus network",
    )
    SUI_RPC_URL: str | None = Field(
        default=None,
        description="Override for the Sui fullnode JSON-RPC URL",
    )
    WALRUS_PUBLISHER_URL: str | None = Field(
        default=None,
        description="Override for the Walrus publisher URL",
    )
    WALRUS_AGGREGATOR_URL: str | None = Field(
        default=None,
        description="Override for the Walrus aggregator URL",
    )
    WALRUS_SYSTEM_OBJECT_ID: str | None = Field(
        default=None,
        description="Override for the Walrus system object ID",
    )

    # Server
    HOST: str = Field(default="0.0.0.0", description="Listening host")
    PORT: int = Field(default=8000, ge=1, le=65535, description="Listening port")
    CORS_ORIGINS: list[str] = Field(
        default_factory=list,
        description="Allowed CORS origins outside debug mode",
    )

    # Pricing
    UNITS_PER_TOKEN: int = Field(
        default=DEFAULT_UNITS_PER_TOKEN,
        gt=0,
        description="Smallest indivisible units per display token",
    )
    FIAT_RATE: Decimal | None = Field(
        default=None,
        ge=0,
        description="Static token to USD exchange rate",
    )
    PRICE_FEED_ENABLED: bool = Field(
        default=False,
        description="Fetch the exchange rate from CoinGecko when FIAT_RATE is unset",
    )
    PRICE_FEED_URL: str = Field(
        default="https://api.coingecko.com/api/v3",
        description="CoinGecko API base URL",
    )
    PRICE_FEED_COIN_ID: str = Field(
        default="sui",
        description="CoinGecko coin id to price",
    )
    PRICE_FEED_CACHE_SECONDS: float = Field(
        default=60.0,
        ge=0,
        description="How long a fetched rate is reused",
    )

    # Upload policy
    DEFAULT_EPOCHS: int = Field(
        default=3,
        ge=1,
        description="Epochs used when the caller does not supply one",
    )
    UPLOAD_DELETABLE: bool = Field(
        default=True,
        description="Store blobs as deletable",
    )
    UPLOAD_SEND_TO_SIGNER: bool = Field(
        default=True,
        description="Transfer the created blob object to the signer address",
    )
    MAX_UPLOAD_BYTES: int = Field(
        default=10 * 1024 * 1024,
        gt=0,
        description="Largest accepted upload in bytes",
    )

    # Timeouts
    UPSTREAM_TIMEOUT_SECONDS: float = Field(
        default=30.0,
        gt=0,
        description="Timeout for cost quotes and reads",
    )
    UPLOAD_TIMEOUT_SECONDS: float = Field(
        default=120.0,
        gt=0,
        description="Timeout for blob writes",
    )

    # Application Settings
    ENVIRONMENT: Environment = Field(
        default=Environment.DEVELOPMENT,
        description="Application environment",
    )
    DEBUG: bool = Field(
        default=False,
        description="Enable debug mode",
    )
    LOG_LEVEL: str = Field(
        default="INFO",
        description="Root log level",
    )

    @field_validator("SUI_SECRET_KEY")
    @classmethod
    def validate_secret_key(cls, v: str) -> str:
        """Reject blank secret keys."""
        v = v.strip()
        if not v:
            raise ValueError("SUI_SECRET_KEY is set but empty")
        return v

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Normalize and validate the log level name."""
        level = v.upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"Unknown LOG_LEVEL: {v}")
        return level

    @model_validator(mode="after")
    def validate_publisher(self) -> "Settings":
        """Ensure a publisher is reachable for the selected network."""
        if not self.publisher_url:
            raise ValueError(
                f"WALRUS_PUBLISHER_URL is required on {self.SUI_NETWORK.value}"
            )
        return self

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.ENVIRONMENT == Environment.PRODUCTION

    @property
    def rpc_url(self) -> str:
        """Sui fullnode URL for the selected network."""
        return self.SUI_RPC_URL or NETWORK_CONFIGS[self.SUI_NETWORK]["rpc_url"]

    @property
    def publisher_url(self) -> str | None:
        """Walrus publisher URL for the selected network."""
        return self.WALRUS_PUBLISHER_URL or NETWORK_CONFIGS[self.SUI_NETWORK]["publisher_url"]

    @property
    def aggregator_url(self) -> str:
        """Walrus aggregator URL for the selected network."""
        return self.WALRUS_AGGREGATOR_URL or NETWORK_CONFIGS[self.SUI_NETWORK]["aggregator_url"]

    @property
    def system_object_id(self) -> str:
        """Walrus system object ID for the selected network."""
        return self.WALRUS_SYSTEM_OBJECT_ID or NETWORK_CONFIGS[self.SUI_NETWORK]["system_object_id"]

    def get_network_config(self) -> dict[str, Any]:
        """Get the resolved network endpoints.

        Returns:
            dict: RPC, publisher, aggregator and system object settings.
        """
        return {
            "network": self.SUI_NETWORK.value,
            "rpc_url": self.rpc_url,
            "publisher_url": self.publisher_url,
            "aggregator_url": self.aggregator_url,
            "system_object_id": self.system_object_id,
        }


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance.

    Returns:
        Settings: The application settings.

    Raises:
        pydantic.ValidationError: If SUI_SECRET_KEY is missing or invalid.
    """
    return Settings()
