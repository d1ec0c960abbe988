"""Storage network clients.

Exports the network abstraction, the Walrus implementation, the signer
and fiat price feeds.
"""

from walrus_gateway.network.base import BlobNotFound, CostQuote, NetworkError, StorageNetwork
from walrus_gateway.network.pricing import CoinGeckoPriceFeed, PriceFeed, StaticPriceFeed
from walrus_gateway.network.signer import SuiKeypair
from walrus_gateway.network.walrus import SystemPricing, WalrusNetwork, extract_blob_id

__all__ = [
    "BlobNotFound",
    "CoinGeckoPriceFeed",
    "CostQuote",
    "NetworkError",
    "PriceFeed",
    "StaticPriceFeed",
    "StorageNetwork",
    "SuiKeypair",
    "SystemPricing",
    "WalrusNetwork",
    "extract_blob_id",
]
