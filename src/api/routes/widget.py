"""FastAPI routes serving the support-desk widget.

The page is rendered once; the shipment list is fetched as an HTML
fragment so archive actions can re-render it after success.
"""

import logging

import httpx
from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import HTMLResponse

from src.errors import NotFoundError, UpstreamUnavailableError
from src.services.provider import get_shiprelay_client
from src.services.shiprelay_client import ShipRelayClient
from src.widget.render import load_products, render_shipment_list, render_widget_page

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/widget", tags=["widget"])


@router.get("", response_class=HTMLResponse)
def widget_page(request: Request) -> HTMLResponse:
    """Render the widget shell (search form + script)."""
    api_base = request.url.path.rsplit("/widget", 1)[0]
    return HTMLResponse(render_widget_page(api_base))


@router.get("/shipments", response_class=HTMLResponse)
async def widget_shipments(
    order_ref: str | None = Query(None),
    client: ShipRelayClient = Depends(get_shiprelay_client),
) -> HTMLResponse:
    """Render shipment cards for an order reference.

    A 404 from ShipRelay renders the empty state; validation and other
    upstream errors propagate to the JSON error handler.
    """
    try:
        payload = await client.search_by_order_ref(order_ref)
    except NotFoundError:
        return HTMLResponse(render_shipment_list([]))
    except httpx.HTTPError as e:
        logger.error("Widget search failed: %s", e)
        raise UpstreamUnavailableError("Failed to fetch shipment", details=str(e)) from e

    shipments = []
    if isinstance(payload, dict):
        shipments = payload.get("data") or []
    products = await load_products(shipments, client)
    return HTMLResponse(render_shipment_list(shipments, products))
