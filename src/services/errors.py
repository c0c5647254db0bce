"""Shared service-layer error types.

Provides error dataclasses used across service modules (Shopify clients,
fulfillment cancellation). Centralised here to avoid circular imports
between service modules.
"""

from dataclasses import dataclass


@dataclass
class ShopifyAPIError(Exception):
    """Error from the Shopify Admin API.

    Attributes:
        message: Human-readable error message
        status_code: HTTP status of the failing call, if any
        url: Request URL of the failing call
        details: Raw response text or GraphQL error list
    """

    message: str
    status_code: int | None = None
    url: str = ""
    details: object = None

    def __str__(self) -> str:
        """Return formatted error message."""
        if self.status_code is not None:
            return f"[{self.status_code}] {self.message}"
        return self.message
