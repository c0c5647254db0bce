"""Tests for the widget page and its shipment-list fragment."""

import httpx
from fastapi.testclient import TestClient

from src.errors import NotFoundError, ValidationError

PREFIX = "/api/shiprelay/widget"


class TestWidgetPage:
    def test_page_targets_proxy_routes(self, client: TestClient):
        resp = client.get(PREFIX)

        assert resp.status_code == 200
        assert resp.headers["content-type"].startswith("text/html")
        assert '"/api/shiprelay"' in resp.text
        assert 'id="orderInput"' in resp.text

    def test_failed_fetch_falls_back_to_empty_state(self, client: TestClient):
        resp = client.get(PREFIX)

        assert "response.ok" in resp.text
        assert "container.innerHTML = EMPTY_STATE" in resp.text
        assert "No shipments found for that Order Reference Number" in resp.text


class TestWidgetShipments:
    """Tests for GET /widget/shipments."""

    def test_renders_cards_most_recent_first(
        self, client: TestClient, shiprelay_client, sample_shipments
    ):
        shiprelay_client.search_by_order_ref.return_value = {
            "data": [sample_shipments[1], sample_shipments[2], sample_shipments[0]],
        }

        resp = client.get(f"{PREFIX}/shipments", params={"order_ref": "#1001"})

        assert resp.status_code == 200
        html = resp.text
        assert html.count('class="shipment-card"') == 3
        assert html.index(">queued<") < html.index(">inactive<") < html.index(">shipped<")
        # inactive shipment has no archive button
        assert html.count('class="archive-btn"') == 2
        assert "Already archived" in html
        assert 'data-shipment-id="12"' in html
        assert 'data-shipment-id="13"' not in html

    def test_not_found_renders_empty_state(self, client: TestClient, shiprelay_client):
        shiprelay_client.search_by_order_ref.side_effect = NotFoundError("Shipment", "#9999")

        resp = client.get(f"{PREFIX}/shipments", params={"order_ref": "#9999"})

        assert resp.status_code == 200
        assert "No shipments found for that Order Reference Number" in resp.text

    def test_items_labelled_with_product_names(self, client: TestClient, shiprelay_client):
        shiprelay_client.search_by_order_ref.return_value = {
            "data": [
                {
                    "id": 1,
                    "status": "queued",
                    "items": [
                        {"product_id": 7, "quantity": 2, "sub_total": "25"},
                        {"product_id": 8, "quantity": 1, "sub_total": 5},
                    ],
                }
            ],
        }
        shiprelay_client.fetch_product.side_effect = [
            {"id": 7, "name": "Blue Mug"},
            NotFoundError("Product", "8", code="E-3003"),
        ]

        resp = client.get(f"{PREFIX}/shipments", params={"order_ref": "#1001"})

        assert resp.status_code == 200
        assert "Blue Mug - $25.00" in resp.text
        assert "Product 8 - $5.00" in resp.text

    def test_invalid_order_ref_is_json_400(self, client: TestClient, shiprelay_client):
        shiprelay_client.search_by_order_ref.side_effect = ValidationError(
            "Missing or invalid order_ref parameter"
        )

        resp = client.get(f"{PREFIX}/shipments")

        assert resp.status_code == 400
        assert resp.json()["error_code"] == "E-2001"

    def test_transport_failure_is_500(self, client: TestClient, shiprelay_client):
        shiprelay_client.search_by_order_ref.side_effect = httpx.ConnectError("refused")

        resp = client.get(f"{PREFIX}/shipments", params={"order_ref": "#1001"})

        assert resp.status_code == 500
