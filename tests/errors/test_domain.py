"""Tests for domain exceptions and their JSON payloads."""

from src.errors import (
    DomainError,
    NotFoundError,
    UpstreamAPIError,
    UpstreamAuthError,
    UpstreamProtocolError,
    UpstreamUnavailableError,
    ValidationError,
)


def test_validation_error_payload():
    exc = ValidationError("Missing or invalid order_ref parameter", details="must be a string")

    assert exc.status_code == 400
    assert exc.to_payload() == {
        "error": "Missing or invalid order_ref parameter",
        "error_code": "E-2001",
        "details": "must be a string",
    }


def test_details_omitted_when_absent():
    assert "details" not in DomainError("boom").to_payload()


def test_not_found_formats_identifier():
    exc = NotFoundError("Shipment", "#1001")

    assert exc.status_code == 404
    assert exc.to_payload() == {
        "error": "ShipRelay API error",
        "error_code": "E-3002",
        "details": "No shipments found for order reference '#1001'",
        "status": 404,
    }


def test_upstream_api_error_takes_upstream_status():
    exc = UpstreamAPIError(429)
    assert exc.status_code == 429
    assert exc.to_payload()["status"] == 429
    assert isinstance(exc, DomainError)


def test_auth_error_is_internal():
    exc = UpstreamAuthError(403, "Forbidden")

    assert exc.status_code == 500
    assert exc.code == "E-5001"
    assert str(exc) == "Failed to login to ShipRelay: 403 - Forbidden"


def test_protocol_error_carries_raw_body():
    payload = UpstreamProtocolError("Service Unavailable").to_payload()
    assert payload == {
        "error": "Invalid response from ShipRelay",
        "error_code": "E-3004",
        "raw": "Service Unavailable",
    }


def test_unavailable_error_uses_action_as_message():
    exc = UpstreamUnavailableError("Failed to archive shipment")
    assert exc.status_code == 500
    assert exc.to_payload() == {
        "error": "Failed to archive shipment",
        "error_code": "E-4001",
    }
