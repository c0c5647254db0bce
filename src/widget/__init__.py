"""Support-desk widget: status tables and server-side HTML rendering."""

from src.widget.status import (
    can_archive_shipment,
    can_edit_shipment,
    get_status_color,
)

__all__ = [
    "can_archive_shipment",
    "can_edit_shipment",
    "get_status_color",
]
