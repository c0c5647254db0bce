"""Abstract base class for Shopify fulfillment clients.

The Admin API exposes fulfillment cancellation through two incompatible
revisions (REST fulfillments, GraphQL fulfillment orders). Each revision
implements this interface; exactly one is active per process.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field

from src.cli.config import ShopifyConfig

USER_AGENT = "ShipRelay-Integration/1.0"


@dataclass
class ShopifyOrder:
    """Order located by name.

    Attributes:
        id: Platform order id (numeric id for REST, GID for GraphQL).
        name: Order name, e.g. "#2002".
        fulfillment_ids: Cancellable fulfillment (order) ids when the
            lookup already returned them; None when they must be fetched.
    """

    id: str
    name: str = ""
    fulfillment_ids: list[str] | None = field(default=None)


class ShopifyFulfillmentClient(ABC):
    """Interface for locating orders and cancelling their fulfillments.

    Implementations raise ShopifyAPIError on non-2xx answers or API-level
    errors so the caller can stop the remaining steps.
    """

    def __init__(self, http, config: ShopifyConfig) -> None:
        """Initialize client.

        Args:
            http: Shared httpx.AsyncClient.
            config: Shopify credentials and API settings.
        """
        self._http = http
        self._config = config

    @property
    @abstractmethod
    def api_mode(self) -> str:
        """Return the API revision identifier ('rest' or 'graphql')."""
        ...

    def _get_base_url(self) -> str:
        """Construct the Shopify Admin API base URL."""
        return f"{self._config.store_url}/admin/api/{self._config.api_version}"

    def _get_headers(self) -> dict[str, str]:
        """Construct HTTP headers for Admin API requests."""
        return {
            "X-Shopify-Access-Token": self._config.access_token,
            "Content-Type": "application/json",
            "User-Agent": USER_AGENT,
        }

    @abstractmethod
    async def find_order(self, order_number: str) -> ShopifyOrder | None:
        """Find an order by exact name.

        Args:
            order_number: Order number without the leading '#'.

        Returns:
            The first matching order, or None when nothing matches.
        """
        ...

    @abstractmethod
    async def list_cancellable_fulfillments(self, order: ShopifyOrder) -> list[str]:
        """Return ids of fulfillments not already cancelled or being cancelled."""
        ...

    @abstractmethod
    async def cancel_fulfillment(self, order: ShopifyOrder, fulfillment_id: str) -> None:
        """Cancel one fulfillment.

        Raises:
            ShopifyAPIError: If Shopify rejects the cancellation.
        """
        ...
