"""Static shipment status tables used by the support widget.

ShipRelay statuses: queued, held, requested, processing, shipped,
returned, inactive. Lookups are case-insensitive.
"""

DEFAULT_STATUS_COLOR = "#6b7280"  # gray

STATUS_COLORS: dict[str, str] = {
    "queued": "#f59e0b",  # amber
    "held": "#ef4444",  # red
    "requested": "#3b82f6",  # blue
    "processing": "#8b5cf6",  # purple
    "shipped": "#10b981",  # green
    "returned": "#f97316",  # orange
    "inactive": "#6b7280",  # gray
}

# Archived shipments become inactive.
NON_ARCHIVABLE_STATUSES = frozenset({"inactive"})

# ShipRelay only allows edits before fulfillment starts.
EDITABLE_STATUSES = frozenset({"queued", "held"})


def _normalize(status: str | None) -> str:
    return status.lower() if isinstance(status, str) else ""


def get_status_color(status: str | None) -> str:
    """Return the card colour for a status; unknown statuses are gray."""
    return STATUS_COLORS.get(_normalize(status), DEFAULT_STATUS_COLOR)


def can_archive_shipment(status: str | None) -> bool:
    """Every shipment except an inactive one can be archived."""
    return _normalize(status) not in NON_ARCHIVABLE_STATUSES


def can_edit_shipment(status: str | None) -> bool:
    """Only queued and held shipments can be edited in the ShipRelay console."""
    return _normalize(status) in EDITABLE_STATUSES
