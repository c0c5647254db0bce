"""Typed domain exceptions for API error mapping.

These exceptions carry the HTTP status they map to and an E-XXXX code
from the registry, so routes can let them propagate and the app-level
exception handler renders a consistent body.

Usage:
    # In service layer
    raise NotFoundError("Product", product_id, code="E-3003")

    # Rendered by the handler in src.api.main as
    # {"error": ..., "error_code": "E-3003", "details": ...}
"""

from typing import Any

from src.errors.registry import format_message


class DomainError(Exception):
    """Base exception for all domain errors."""

    status_code: int = 500
    code: str = "E-4001"

    def __init__(self, message: str, details: Any = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details

    def to_payload(self) -> dict[str, Any]:
        """Build the JSON error body for this exception."""
        payload: dict[str, Any] = {
            "error": self.message,
            "error_code": self.code,
        }
        if self.details is not None:
            payload["details"] = self.details
        return payload


class ValidationError(DomainError):
    """Bad caller input. Maps to HTTP 400."""

    status_code = 400

    def __init__(self, message: str, details: Any = None, code: str = "E-2001") -> None:
        super().__init__(message, details)
        self.code = code


class NotFoundError(DomainError):
    """Resource was not found upstream. Maps to HTTP 404."""

    status_code = 404

    def __init__(self, resource_type: str, identifier: str, code: str = "E-3002") -> None:
        super().__init__(
            "ShipRelay API error",
            details=format_message(code, order_ref=identifier, product_id=identifier),
        )
        self.resource_type = resource_type
        self.identifier = identifier
        self.code = code

    def to_payload(self) -> dict[str, Any]:
        payload = super().to_payload()
        payload["status"] = self.status_code
        return payload


class UpstreamAuthError(DomainError):
    """ShipRelay login failed. Maps to HTTP 500, the caller cannot fix it."""

    code = "E-5001"

    def __init__(self, upstream_status: int | None, body: str) -> None:
        super().__init__(
            format_message(self.code, status=upstream_status),
            details=body,
        )
        self.upstream_status = upstream_status
        self.body = body

    def __str__(self) -> str:
        return f"{self.message} - {self.body}"


class UpstreamAPIError(DomainError):
    """Non-2xx response from ShipRelay. The upstream status is passed through."""

    code = "E-3001"

    def __init__(self, upstream_status: int, details: str = "API request failed") -> None:
        super().__init__("ShipRelay API error", details=details)
        self.status_code = upstream_status
        self.upstream_status = upstream_status

    def to_payload(self) -> dict[str, Any]:
        payload = super().to_payload()
        payload["status"] = self.upstream_status
        return payload


class UpstreamProtocolError(DomainError):
    """Non-JSON body where JSON was expected. Maps to HTTP 500 with the raw text."""

    code = "E-3004"

    def __init__(self, raw: str) -> None:
        super().__init__(format_message(self.code))
        self.raw = raw

    def to_payload(self) -> dict[str, Any]:
        payload = super().to_payload()
        payload["raw"] = self.raw
        return payload


class UpstreamUnavailableError(DomainError):
    """Transport failure talking to ShipRelay. Maps to HTTP 500."""

    code = "E-4001"

    def __init__(self, action: str, details: Any = None) -> None:
        super().__init__(format_message(self.code, action=action), details=details)
