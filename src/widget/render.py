"""Server-side rendering of the support widget.

Builds view models from ShipRelay shipment dicts (status colour,
permissions, address, item labels) and renders them with Jinja2.
Item labels are enriched with product names looked up through the
ShipRelay client; a failed lookup only degrades the label.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any
from urllib.parse import urlencode

import httpx
from jinja2 import Environment, FileSystemLoader, select_autoescape

from src.errors import DomainError
from src.services.shiprelay_client import ShipRelayClient
from src.widget.status import (
    can_archive_shipment,
    can_edit_shipment,
    get_status_color,
)

logger = logging.getLogger(__name__)

TEMPLATES_DIR = Path(__file__).parent / "templates"
SHIPRELAY_CONSOLE_URL = "https://console.shiprelay.com/admin/requests"

_env = Environment(
    loader=FileSystemLoader(TEMPLATES_DIR),
    autoescape=select_autoescape(["html"]),
    trim_blocks=True,
    lstrip_blocks=True,
)


@dataclass
class ItemView:
    quantity: Any
    label: str


@dataclass
class ShipmentView:
    """Everything a shipment card template needs."""

    index: int
    id: Any
    status: str
    status_color: str
    can_archive: bool
    can_edit: bool
    name: str
    email: str
    address_lines: list[str]
    updated: str
    tracking_number: str | None
    edit_link: str | None
    items: list[ItemView] = field(default_factory=list)


def format_address(address: dict | None) -> list[str]:
    """Return display lines for a shipping address, skipping empty parts."""
    if not address:
        return []
    street = address.get("address1") or ""
    if address.get("address2"):
        street = f"{street}, {address['address2']}" if street else address["address2"]
    city = address.get("city") or ""
    region_zip = " ".join(
        part for part in (address.get("region") or "", address.get("zip") or "") if part
    )
    locality = ", ".join(part for part in (city, region_zip) if part)
    lines = [address.get("name") or "", street, locality, address.get("country") or ""]
    return [line for line in lines if line.strip()]


def format_updated(value: Any) -> str:
    """Render ``updated_at`` as a date, or '--' when missing or malformed."""
    if not isinstance(value, str) or not value:
        return "--"
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00")).strftime("%m/%d/%Y")
    except ValueError:
        return "--"


def shiprelay_edit_link(shipment: dict) -> str:
    """Link to the shipment's edit page in the ShipRelay console."""
    status = shipment.get("status") or ""
    query = urlencode({
        "cursor": shipment.get("id", ""),
        "order": shipment.get("order_ref", ""),
        "caller": "terminal",
        "focus": status,
    })
    return f"{SHIPRELAY_CONSOLE_URL}/{status}/{shipment.get('source_order_id', '')}/edit?{query}"


def item_product_id(item: dict) -> str | None:
    """The product id of a line item: product_id, else id, else sku."""
    for key in ("product_id", "id", "sku"):
        value = item.get(key)
        if value not in (None, ""):
            return str(value)
    return None


def _money(value: Any) -> str:
    try:
        return f"{float(value or 0):.2f}"
    except (TypeError, ValueError):
        return "0.00"


def item_label(item: dict, product: dict | None) -> str:
    """Label for a line item, e.g. "Blue Mug - $12.50"."""
    price = _money(item.get("sub_total"))
    product_id = item_product_id(item)
    if product_id is None:
        return f"Unknown Product - ${price}"
    if product:
        name = product.get("name") or product.get("sku") or f"Product {product_id}"
        return f"{name} - ${price}"
    return f"Product {product_id} - ${price}"


async def load_products(
    shipments: list[dict], client: ShipRelayClient
) -> dict[str, dict | None]:
    """Look up every distinct product referenced by the shipments' items.

    Returns:
        Mapping of product id to product dict, or None when the lookup
        failed (non-numeric id, not found, upstream or transport error).
    """
    products: dict[str, dict | None] = {}
    for shipment in shipments:
        for item in shipment.get("items") or []:
            product_id = item_product_id(item)
            if product_id is None or product_id in products:
                continue
            try:
                product = await client.fetch_product(product_id)
            except (DomainError, httpx.HTTPError) as e:
                logger.info("No product details for %s: %s", product_id, e)
                products[product_id] = None
                continue
            products[product_id] = product if isinstance(product, dict) else None
    return products


def build_shipment_view(
    shipment: dict, index: int, products: dict[str, dict | None] | None = None
) -> ShipmentView:
    """Build the card view model for one shipment."""
    products = products or {}
    status = shipment.get("status")
    address = shipment.get("address") or {}
    can_edit = can_edit_shipment(status)
    tracking = shipment.get("tracking") or {}
    return ShipmentView(
        index=index,
        id=shipment.get("id"),
        status=status or "--",
        status_color=get_status_color(status),
        can_archive=can_archive_shipment(status),
        can_edit=can_edit,
        name=address.get("name") or "--",
        email=address.get("email") or "--",
        address_lines=format_address(address),
        updated=format_updated(shipment.get("updated_at")),
        tracking_number=tracking.get("tracking_number") if isinstance(tracking, dict) else None,
        edit_link=shiprelay_edit_link(shipment) if can_edit else None,
        items=[
            ItemView(
                quantity=item.get("quantity"),
                label=item_label(item, products.get(item_product_id(item) or "")),
            )
            for item in shipment.get("items") or []
        ],
    )


def render_shipment_list(shipments: list[dict], products: dict[str, dict | None] | None = None) -> str:
    """Render the list of shipment cards (or the empty state) as HTML."""
    views = [build_shipment_view(s, i, products) for i, s in enumerate(shipments)]
    return _env.get_template("shipment_list.html").render(shipments=views)


def render_widget_page(api_base: str) -> str:
    """Render the full widget page.

    Args:
        api_base: URL prefix of the proxy routes, e.g. "/api/shiprelay".
    """
    return _env.get_template("widget.html").render(api_base=api_base.rstrip("/"))
