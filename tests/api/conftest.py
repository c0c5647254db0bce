"""Pytest fixtures for API tests.

The ShipRelay client and fulfillment canceller are replaced through
FastAPI dependency overrides; configuration is pinned so the lifespan
never reads the developer's environment.
"""

from collections.abc import Generator
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient

from src.api.main import app
from src.cli.config import RelayConfig
from src.services.fulfillment_cancellation import CancellationResult
from src.services.provider import get_fulfillment_canceller, get_shiprelay_client
from src.services.shiprelay_client import ShipRelayClient, UpstreamResponse


@pytest.fixture
def shiprelay_client() -> MagicMock:
    """ShipRelayClient double with benign defaults."""
    client = MagicMock(spec=ShipRelayClient)
    client.search_by_order_ref = AsyncMock(return_value={"data": []})
    client.fetch_by_id = AsyncMock(return_value={"id": 42, "order_ref": "#2002"})
    client.fetch_product = AsyncMock(return_value={"id": 7, "name": "Blue Mug"})
    client.hold = AsyncMock(return_value=UpstreamResponse(200, {"status": "held"}))
    client.release = AsyncMock(return_value=UpstreamResponse(200, {"status": "queued"}))
    client.archive = AsyncMock(return_value=UpstreamResponse(200, {"status": "inactive"}))
    return client


@pytest.fixture
def canceller() -> MagicMock:
    """FulfillmentCanceller double that reports a no-op run."""
    mock = MagicMock()
    mock.cancel_for_shipment = AsyncMock(return_value=CancellationResult())
    return mock


@pytest.fixture
def client(
    monkeypatch, relay_config: RelayConfig, shiprelay_client: MagicMock, canceller: MagicMock
) -> Generator[TestClient, None, None]:
    """Create a TestClient with overridden client dependencies.

    Yields:
        TestClient configured for testing.
    """
    monkeypatch.setattr("src.api.main.get_config", lambda: relay_config)
    app.dependency_overrides[get_shiprelay_client] = lambda: shiprelay_client
    app.dependency_overrides[get_fulfillment_canceller] = lambda: canceller
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
