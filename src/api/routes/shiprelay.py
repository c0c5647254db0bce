"""FastAPI routes proxying the ShipRelay shipment API.

Mounted under /api/shiprelay. Each endpoint is a stateless
request -> response pass-through; domain errors raised by the client
propagate to the app-level handler in src.api.main.

Architecture:
    Widget -> FastAPI -> ShipRelayClient -> ShipRelay API
                      -> FulfillmentCanceller -> Shopify Admin API (archive only)
"""

import logging

import httpx
from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse

from src.api.schemas import ErrorResponse, PingResponse
from src.errors import UpstreamUnavailableError
from src.services.fulfillment_cancellation import FulfillmentCanceller
from src.services.provider import get_fulfillment_canceller, get_shiprelay_client
from src.services.shiprelay_client import ShipRelayClient, UpstreamResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["shiprelay"])

_ERROR_RESPONSES = {
    400: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
}


def _passthrough(upstream: UpstreamResponse) -> JSONResponse:
    return JSONResponse(status_code=upstream.status_code, content=upstream.body)


@router.get("/shipment/ping", response_model=PingResponse)
def ping() -> PingResponse:
    """Wake-up ping sent by the widget before the first search."""
    return PingResponse(status="awake")


@router.get("/shipment", responses=_ERROR_RESPONSES)
async def search_shipments(
    order_ref: str | None = Query(None, description="Order reference, e.g. #1001"),
    client: ShipRelayClient = Depends(get_shiprelay_client),
) -> JSONResponse:
    """Search shipments by order reference, most recently updated first."""
    try:
        return JSONResponse(content=await client.search_by_order_ref(order_ref))
    except httpx.HTTPError as e:
        logger.error("ShipRelay error: %s", e)
        raise UpstreamUnavailableError("Failed to fetch shipment", details=str(e)) from e


@router.get("/product/{product_id}", responses=_ERROR_RESPONSES)
async def get_product(
    product_id: str,
    client: ShipRelayClient = Depends(get_shiprelay_client),
) -> JSONResponse:
    """Fetch product details for item enrichment."""
    try:
        return JSONResponse(content=await client.fetch_product(product_id))
    except httpx.HTTPError as e:
        logger.error("Error fetching product %s: %s", product_id, e)
        raise UpstreamUnavailableError("Failed to fetch product", details=str(e)) from e


@router.put("/shipment/{shipment_id}/hold", responses={500: {"model": ErrorResponse}})
async def hold_shipment(
    shipment_id: str,
    client: ShipRelayClient = Depends(get_shiprelay_client),
) -> JSONResponse:
    """Put a shipment on hold; ShipRelay's status and body are passed through."""
    try:
        return _passthrough(await client.hold(shipment_id))
    except httpx.HTTPError as e:
        logger.error("Error holding shipment %s: %s", shipment_id, e)
        raise UpstreamUnavailableError("Failed to hold shipment") from e


@router.put("/shipment/{shipment_id}/release", responses={500: {"model": ErrorResponse}})
async def release_shipment(
    shipment_id: str,
    client: ShipRelayClient = Depends(get_shiprelay_client),
) -> JSONResponse:
    """Release a held shipment; ShipRelay's status and body are passed through."""
    try:
        return _passthrough(await client.release(shipment_id))
    except httpx.HTTPError as e:
        logger.error("Error releasing shipment %s: %s", shipment_id, e)
        raise UpstreamUnavailableError("Failed to release shipment") from e


@router.patch("/shipment/{shipment_id}/archive", responses={500: {"model": ErrorResponse}})
async def archive_shipment(
    shipment_id: str,
    client: ShipRelayClient = Depends(get_shiprelay_client),
    canceller: FulfillmentCanceller = Depends(get_fulfillment_canceller),
) -> JSONResponse:
    """Archive a shipment, then cancel its Shopify fulfillments.

    The shipment is fetched first so its order_ref is known after the
    archive. Cancellation runs only when the archive succeeded and never
    changes this endpoint's response.
    """
    try:
        shipment = await client.fetch_by_id(shipment_id)
        upstream = await client.archive(shipment_id)
    except httpx.HTTPError as e:
        logger.error("Error archiving shipment %s: %s", shipment_id, e)
        raise UpstreamUnavailableError("Failed to archive shipment") from e

    if upstream.ok:
        result = await canceller.cancel_for_shipment(shipment)
        logger.info(
            "Fulfillment sync for shipment %s: cancelled=%s failed=%s skipped=%s",
            shipment_id,
            result.cancelled,
            result.failed,
            result.skipped_reason,
        )
    return _passthrough(upstream)
