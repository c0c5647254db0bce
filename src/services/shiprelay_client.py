"""ShipRelay shipment API client.

Wraps the shipment endpoints the support widget needs: search by order
reference, fetch by id, hold/release/archive, and product lookup. Every
call attaches the bearer token from ShipRelayTokenCache.

Example:
    client = ShipRelayClient(http, base_url, token_cache)
    payload = await client.search_by_order_ref("#1001")
    shipments = payload["data"]  # most recently updated first
"""

import json
import logging
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any

import httpx

from src.errors import (
    NotFoundError,
    UpstreamAPIError,
    UpstreamProtocolError,
    ValidationError,
)
from src.services.token_cache import ShipRelayTokenCache

logger = logging.getLogger(__name__)

_OLDEST = datetime.min.replace(tzinfo=UTC)


@dataclass
class UpstreamResponse:
    """Status and decoded JSON body of a pass-through ShipRelay call."""

    status_code: int
    body: Any

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300


def _parse_timestamp(value: Any) -> datetime:
    """Parse an ``updated_at`` value; missing or malformed sorts oldest."""
    if not isinstance(value, str) or not value:
        return _OLDEST
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return _OLDEST
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=UTC)
    return parsed


def sort_by_updated_at(shipments: list[dict]) -> list[dict]:
    """Return shipments ordered by ``updated_at``, most recent first.

    The sort is stable, so shipments with equal timestamps keep their
    upstream order.
    """
    return sorted(
        shipments,
        key=lambda s: _parse_timestamp(s.get("updated_at") if isinstance(s, dict) else None),
        reverse=True,
    )


def _unwrap(body: Any) -> Any:
    """ShipRelay wraps single resources in ``{"data": ...}``."""
    if isinstance(body, dict) and body.get("data") is not None:
        return body["data"]
    return body


class ShipRelayClient:
    """Async client for the ShipRelay v2 shipment API."""

    def __init__(
        self,
        http: httpx.AsyncClient,
        base_url: str,
        token_cache: ShipRelayTokenCache,
    ) -> None:
        """Initialize client.

        Args:
            http: Shared async HTTP client.
            base_url: ShipRelay API base URL (e.g. .../api/v2).
            token_cache: Source of bearer tokens.
        """
        self._http = http
        self._base_url = base_url.rstrip("/")
        self._token_cache = token_cache

    async def _headers(self) -> dict[str, str]:
        token = await self._token_cache.get_token()
        return {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {token}",
        }

    async def search_by_order_ref(self, order_ref: Any) -> Any:
        """Search shipments for an order reference.

        Args:
            order_ref: Order reference, e.g. "#1001". Surrounding
                whitespace is trimmed before the upstream call.

        Returns:
            The upstream payload with ``data`` sorted by ``updated_at``
            descending.

        Raises:
            ValidationError: If order_ref is not a non-empty string.
            NotFoundError: If ShipRelay answers 404.
            UpstreamAPIError: For any other non-2xx answer.
        """
        if not isinstance(order_ref, str) or not order_ref.strip():
            raise ValidationError(
                "Missing or invalid order_ref parameter",
                details="order_ref must be a non-empty string",
            )
        order_ref = order_ref.strip()

        response = await self._http.get(
            f"{self._base_url}/shipments",
            params={"order_ref": order_ref},
            headers=await self._headers(),
        )
        if not response.is_success:
            logger.error(
                "ShipRelay API error: %s - %s", response.status_code, response.text
            )
            if response.status_code == 404:
                raise NotFoundError("Shipment", order_ref, code="E-3002")
            raise UpstreamAPIError(response.status_code)

        try:
            payload = response.json()
        except ValueError as e:
            raise UpstreamProtocolError(response.text) from e

        if isinstance(payload, dict) and isinstance(payload.get("data"), list):
            payload["data"] = sort_by_updated_at(payload["data"])
            count = len(payload["data"])
        else:
            count = 0
        logger.info("Found %d shipment(s) for order ref: %s", count, order_ref)
        return payload

    async def fetch_by_id(self, shipment_id: str) -> dict | None:
        """Fetch a single shipment.

        Args:
            shipment_id: ShipRelay shipment id.

        Returns:
            The shipment dict, or None when ShipRelay does not return one.
        """
        response = await self._http.get(
            f"{self._base_url}/shipments/{shipment_id}",
            headers=await self._headers(),
        )
        if not response.is_success:
            logger.warning(
                "Could not fetch shipment %s: %s", shipment_id, response.status_code
            )
            return None
        try:
            shipment = _unwrap(response.json())
        except ValueError:
            logger.warning("Shipment %s returned a non-JSON body", shipment_id)
            return None
        return shipment if isinstance(shipment, dict) else None

    async def _status_action(self, method: str, shipment_id: str, action: str) -> UpstreamResponse:
        """Send an empty-body status transition and pass the answer through.

        Raises:
            UpstreamProtocolError: If the response body is not JSON.
        """
        response = await self._http.request(
            method,
            f"{self._base_url}/shipments/{shipment_id}/{action}",
            json={},
            headers=await self._headers(),
        )
        text = response.text
        try:
            body = json.loads(text)
        except ValueError as e:
            logger.error(
                "ShipRelay %s failed with non-JSON response: %s", action, text
            )
            raise UpstreamProtocolError(text) from e
        logger.info(
            "ShipRelay %s of shipment %s returned %s",
            action, shipment_id, response.status_code,
        )
        return UpstreamResponse(status_code=response.status_code, body=body)

    async def hold(self, shipment_id: str) -> UpstreamResponse:
        """Put a shipment on hold."""
        return await self._status_action("PUT", shipment_id, "hold")

    async def release(self, shipment_id: str) -> UpstreamResponse:
        """Release a held shipment."""
        return await self._status_action("PUT", shipment_id, "release")

    async def archive(self, shipment_id: str) -> UpstreamResponse:
        """Archive a shipment.

        Not guarded by shipment status: archiving an inactive shipment is
        forwarded and ShipRelay decides.
        """
        return await self._status_action("PATCH", shipment_id, "archive")

    async def fetch_product(self, product_id: Any) -> Any:
        """Fetch a product.

        Args:
            product_id: Numeric product id (int or digit string).

        Returns:
            The decoded product payload (normally a dict).

        Raises:
            ValidationError: If product_id is not numeric.
            NotFoundError: If ShipRelay answers 404.
            UpstreamAPIError: For any other non-2xx answer.
        """
        product_id = str(product_id).strip() if product_id is not None else ""
        if not (product_id.isascii() and product_id.isdigit()):
            raise ValidationError(
                "Invalid product id",
                details="product id must be numeric",
                code="E-2002",
            )

        response = await self._http.get(
            f"{self._base_url}/products/{product_id}",
            headers=await self._headers(),
        )
        if response.status_code == 404:
            raise NotFoundError("Product", product_id, code="E-3003")
        if not response.is_success:
            logger.error(
                "ShipRelay product %s error: %s", product_id, response.status_code
            )
            raise UpstreamAPIError(response.status_code)
        try:
            return _unwrap(response.json())
        except ValueError as e:
            raise UpstreamProtocolError(response.text) from e
