"""Shopify REST Admin API fulfillment client.

Locates orders with the orders-by-name query, lists their fulfillments,
and cancels them through the fulfillment cancel action.
"""

import logging

from src.services.errors import ShopifyAPIError
from src.services.shopify.base import ShopifyFulfillmentClient, ShopifyOrder

logger = logging.getLogger(__name__)

CANCELLED_STATUSES = frozenset({"cancelled"})


class ShopifyRestClient(ShopifyFulfillmentClient):
    """REST revision: orders.json, fulfillments.json, fulfillments/{id}/cancel.json.

    Example:
        client = ShopifyRestClient(http, config.shopify)
        order = await client.find_order("2002")
        for fulfillment_id in await client.list_cancellable_fulfillments(order):
            await client.cancel_fulfillment(order, fulfillment_id)
    """

    @property
    def api_mode(self) -> str:
        return "rest"

    async def _get_json(self, url: str, params: dict | None = None) -> dict:
        response = await self._http.get(url, headers=self._get_headers(), params=params)
        if not response.is_success:
            raise ShopifyAPIError(
                message="Shopify request failed",
                status_code=response.status_code,
                url=url,
                details=response.text,
            )
        try:
            body = response.json()
        except ValueError as e:
            raise ShopifyAPIError(
                message="Shopify returned a non-JSON body",
                status_code=response.status_code,
                url=url,
                details=response.text,
            ) from e
        if not isinstance(body, dict):
            raise ShopifyAPIError(
                message="Unexpected Shopify response shape",
                status_code=response.status_code,
                url=url,
                details=body,
            )
        return body

    async def find_order(self, order_number: str) -> ShopifyOrder | None:
        """Find an order by name (any status)."""
        data = await self._get_json(
            f"{self._get_base_url()}/orders.json",
            params={"name": order_number, "status": "any"},
        )
        orders = data.get("orders") or []
        if not isinstance(orders, list):
            raise ShopifyAPIError(message="Unexpected orders payload", details=orders)
        if not orders:
            return None
        order = orders[0]
        if not isinstance(order, dict) or order.get("id") is None:
            raise ShopifyAPIError(message="Order lookup returned an order without an id", details=order)
        return ShopifyOrder(id=str(order["id"]), name=order.get("name") or "")

    async def list_cancellable_fulfillments(self, order: ShopifyOrder) -> list[str]:
        """Fetch the order's fulfillments and drop cancelled ones."""
        data = await self._get_json(
            f"{self._get_base_url()}/orders/{order.id}/fulfillments.json"
        )
        fulfillments = data.get("fulfillments") or []
        if not isinstance(fulfillments, list):
            raise ShopifyAPIError(message="Unexpected fulfillments payload", details=fulfillments)
        return [
            str(f["id"])
            for f in fulfillments
            if isinstance(f, dict)
            and f.get("id") is not None
            and f.get("status") not in CANCELLED_STATUSES
        ]

    async def cancel_fulfillment(self, order: ShopifyOrder, fulfillment_id: str) -> None:
        """Cancel a fulfillment without notifying the customer."""
        url = (
            f"{self._get_base_url()}/orders/{order.id}"
            f"/fulfillments/{fulfillment_id}/cancel.json"
        )
        response = await self._http.post(
            url,
            headers=self._get_headers(),
            json={"fulfillment": {"notify_customer": False, "reason": "other"}},
        )
        if not response.is_success:
            raise ShopifyAPIError(
                message=f"Failed to cancel fulfillment {fulfillment_id}",
                status_code=response.status_code,
                url=url,
                details=response.text,
            )
