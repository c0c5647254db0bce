"""Shopify fulfillment cancellation after a ShipRelay archive.

Once a shipment is archived in ShipRelay, the matching Shopify order's
open fulfillments are cancelled so the two systems agree. The archive
has already succeeded at that point, so this step never raises: every
failure is logged and the archive response is returned unchanged.

Steps (each depends on the previous one succeeding):
1. Strip the leading '#' from the shipment's order_ref.
2. Look up the Shopify order by exact name.
3. List its fulfillments that are not already cancelled.
4. Cancel each one independently.
"""

import logging
from dataclasses import dataclass, field

import httpx

from src.services.errors import ShopifyAPIError
from src.services.shopify import ShopifyFulfillmentClient

logger = logging.getLogger(__name__)

ORDER_REF_MARKER = "#"


def normalize_order_number(order_ref: str) -> str:
    """Return the order number for an order_ref ("#2002" -> "2002")."""
    order_ref = order_ref.strip()
    if order_ref.startswith(ORDER_REF_MARKER):
        return order_ref[len(ORDER_REF_MARKER):]
    return order_ref


@dataclass
class CancellationResult:
    """Outcome of one cancellation run, for logging and tests."""

    order_number: str | None = None
    order_id: str | None = None
    cancelled: list[str] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)
    skipped_reason: str | None = None
    error: str | None = None


class FulfillmentCanceller:
    """Cancels Shopify fulfillments for archived ShipRelay shipments."""

    def __init__(self, shopify: ShopifyFulfillmentClient | None) -> None:
        """Initialize canceller.

        Args:
            shopify: Client for the configured API revision, or None when
                Shopify credentials are not configured.
        """
        self._shopify = shopify

    @property
    def enabled(self) -> bool:
        return self._shopify is not None

    async def cancel_for_shipment(self, shipment: dict | None) -> CancellationResult:
        """Cancel the Shopify fulfillments that belong to a shipment.

        Args:
            shipment: The ShipRelay shipment fetched before archiving.

        Returns:
            CancellationResult describing what happened. Never raises.
        """
        if self._shopify is None:
            logger.info("Skipping Shopify fulfillment cancellation - missing credentials")
            return CancellationResult(skipped_reason="missing_credentials")

        order_ref = (shipment or {}).get("order_ref")
        if not isinstance(order_ref, str) or not order_ref.strip():
            logger.info("Skipping Shopify fulfillment cancellation - missing order reference")
            return CancellationResult(skipped_reason="missing_order_ref")

        result = CancellationResult(order_number=normalize_order_number(order_ref))
        try:
            await self._run(self._shopify, result)
        except (ShopifyAPIError, httpx.HTTPError, ValueError) as e:
            result.error = str(e)
            details = getattr(e, "details", None)
            logger.error(
                "Error cancelling Shopify fulfillment for order #%s: %s%s",
                result.order_number,
                e,
                f" ({details})" if details else "",
            )
        except Exception as e:
            # The archive already succeeded; nothing here may fail the request.
            result.error = str(e) or type(e).__name__
            logger.exception(
                "Unexpected error cancelling Shopify fulfillment for order #%s",
                result.order_number,
            )
        return result

    async def _run(self, shopify: ShopifyFulfillmentClient, result: CancellationResult) -> None:
        order = await shopify.find_order(result.order_number)
        if order is None:
            logger.info("No Shopify order found for order name #%s", result.order_number)
            result.skipped_reason = "order_not_found"
            return

        result.order_id = order.id
        logger.info(
            "Found Shopify order %s for order #%s", order.id, result.order_number
        )

        fulfillment_ids = await shopify.list_cancellable_fulfillments(order)
        if not fulfillment_ids:
            logger.info("Shopify order %s has no active fulfillments", order.id)
            return

        for fulfillment_id in fulfillment_ids:
            try:
                await shopify.cancel_fulfillment(order, fulfillment_id)
            except (ShopifyAPIError, httpx.HTTPError, ValueError) as e:
                result.failed.append(fulfillment_id)
                logger.error(
                    "Failed to cancel Shopify fulfillment %s: %s (%s)",
                    fulfillment_id, e, getattr(e, "details", ""),
                )
                continue
            except Exception:
                result.failed.append(fulfillment_id)
                logger.exception("Unexpected error cancelling Shopify fulfillment %s", fulfillment_id)
                continue
            result.cancelled.append(fulfillment_id)
            logger.info(
                "Cancelled Shopify fulfillment %s for order %s", fulfillment_id, order.id
            )
