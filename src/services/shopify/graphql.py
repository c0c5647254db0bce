"""Shopify GraphQL Admin API fulfillment client.

One query locates the order by name together with its fulfillment
orders; each open fulfillment order then gets a cancellation request.
"""

import logging
from typing import Any

from src.services.errors import ShopifyAPIError
from src.services.shopify.base import ShopifyFulfillmentClient, ShopifyOrder

logger = logging.getLogger(__name__)

ORDER_BY_NAME_QUERY = """
query OrderByName($query: String!) {
  orders(first: 1, query: $query) {
    edges {
      node {
        id
        name
        fulfillmentOrders(first: 50) {
          edges {
            node {
              id
              status
              requestStatus
            }
          }
        }
      }
    }
  }
}
"""

SUBMIT_CANCELLATION_MUTATION = """
mutation SubmitCancellation($id: ID!, $message: String) {
  fulfillmentOrderSubmitCancellationRequest(id: $id, message: $message) {
    fulfillmentOrder {
      id
      status
      requestStatus
    }
    userErrors {
      field
      message
    }
  }
}
"""

CANCELLED_STATUSES = frozenset({"CANCELLED"})
CANCELLATION_REQUEST_STATUSES = frozenset(
    {"CANCELLATION_REQUESTED", "CANCELLATION_ACCEPTED"}
)


def _as_dict(value: Any) -> dict:
    return value if isinstance(value, dict) else {}


def _edge_nodes(connection: Any) -> list[dict]:
    """Return the ``node`` objects of a connection, skipping malformed edges."""
    edges = _as_dict(connection).get("edges")
    if not isinstance(edges, list):
        return []
    return [
        edge["node"]
        for edge in edges
        if isinstance(edge, dict) and isinstance(edge.get("node"), dict)
    ]


def _is_cancellable(node: dict) -> bool:
    return (
        node.get("status") not in CANCELLED_STATUSES
        and node.get("requestStatus") not in CANCELLATION_REQUEST_STATUSES
    )


class ShopifyGraphQLClient(ShopifyFulfillmentClient):
    """GraphQL revision: orders query + fulfillmentOrderSubmitCancellationRequest."""

    @property
    def api_mode(self) -> str:
        return "graphql"

    async def _execute(self, query: str, variables: dict[str, Any]) -> dict:
        """POST a GraphQL document and return its ``data`` member.

        Raises:
            ShopifyAPIError: On non-2xx status, a body that is not a JSON
                object, or top-level GraphQL errors.
        """
        url = f"{self._get_base_url()}/graphql.json"
        response = await self._http.post(
            url,
            headers=self._get_headers(),
            json={"query": query, "variables": variables},
        )
        if not response.is_success:
            raise ShopifyAPIError(
                message="Shopify GraphQL request failed",
                status_code=response.status_code,
                url=url,
                details=response.text,
            )
        try:
            body = response.json()
        except ValueError as e:
            raise ShopifyAPIError(
                message="Shopify GraphQL returned a non-JSON body",
                status_code=response.status_code,
                url=url,
                details=response.text,
            ) from e
        if not isinstance(body, dict):
            raise ShopifyAPIError(
                message="Unexpected Shopify GraphQL response shape",
                status_code=response.status_code,
                url=url,
                details=body,
            )
        if body.get("errors"):
            raise ShopifyAPIError(
                message="Shopify GraphQL returned errors",
                status_code=response.status_code,
                url=url,
                details=body["errors"],
            )
        return _as_dict(body.get("data"))

    async def find_order(self, order_number: str) -> ShopifyOrder | None:
        """Find an order by name, including its cancellable fulfillment orders."""
        data = await self._execute(
            ORDER_BY_NAME_QUERY, {"query": f"name:{order_number}"}
        )
        nodes = _edge_nodes(data.get("orders"))
        if not nodes:
            return None
        node = nodes[0]
        if not node.get("id"):
            raise ShopifyAPIError(message="Order lookup returned an order without an id", details=node)
        return ShopifyOrder(
            id=node["id"],
            name=node.get("name") or "",
            fulfillment_ids=[
                fo["id"]
                for fo in _edge_nodes(node.get("fulfillmentOrders"))
                if fo.get("id") and _is_cancellable(fo)
            ],
        )

    async def list_cancellable_fulfillments(self, order: ShopifyOrder) -> list[str]:
        """Fulfillment orders come back with the order lookup."""
        return list(order.fulfillment_ids or [])

    async def cancel_fulfillment(self, order: ShopifyOrder, fulfillment_id: str) -> None:
        """Submit a cancellation request for one fulfillment order."""
        data = await self._execute(
            SUBMIT_CANCELLATION_MUTATION,
            {"id": fulfillment_id, "message": self._config.cancellation_message},
        )
        result = _as_dict(data.get("fulfillmentOrderSubmitCancellationRequest"))
        user_errors = result.get("userErrors") or []
        if user_errors:
            raise ShopifyAPIError(
                message=f"Cancellation request rejected for {fulfillment_id}",
                details=user_errors,
            )
