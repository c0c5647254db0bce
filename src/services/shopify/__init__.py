"""Shopify Admin API clients used for fulfillment cancellation."""

from src.cli.config import ShopifyConfig
from src.services.shopify.base import ShopifyFulfillmentClient, ShopifyOrder
from src.services.shopify.graphql import ShopifyGraphQLClient
from src.services.shopify.rest import ShopifyRestClient


def build_shopify_client(http, config: ShopifyConfig) -> ShopifyFulfillmentClient:
    """Build the client for the configured API revision.

    Args:
        http: Shared httpx.AsyncClient.
        config: Shopify settings; ``api_mode`` selects the revision.

    Returns:
        A REST or GraphQL client. The two are never mixed in one process.
    """
    if config.api_mode == "graphql":
        return ShopifyGraphQLClient(http, config)
    return ShopifyRestClient(http, config)


__all__ = [
    "ShopifyFulfillmentClient",
    "ShopifyGraphQLClient",
    "ShopifyOrder",
    "ShopifyRestClient",
    "build_shopify_client",
]
