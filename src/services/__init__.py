"""Service layer for the ShipRelay proxy.

Provides the ShipRelay API client with its token cache, the Shopify
fulfillment clients, and the cancellation pipeline that links them.
"""

from src.services.fulfillment_cancellation import (
    CancellationResult,
    FulfillmentCanceller,
)
from src.services.shiprelay_client import ShipRelayClient, UpstreamResponse
from src.services.token_cache import CachedToken, ShipRelayTokenCache

__all__ = [
    "CachedToken",
    "CancellationResult",
    "FulfillmentCanceller",
    "ShipRelayClient",
    "ShipRelayTokenCache",
    "UpstreamResponse",
]
