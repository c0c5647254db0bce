"""Root-level pytest fixtures for all tests.

Provides shared fixtures:
- Configuration objects with and without credentials
- Sample ShipRelay shipment payloads
- Environment isolation for config loading
"""

import os

import pytest

from src.cli.config import RelayConfig, ShipRelayConfig, ShopifyConfig

_CONFIG_ENV_VARS = (
    "SHIPRELAY_EMAIL",
    "SHIPRELAY_PASSWORD",
    "SHOPIFY_ACCESS_TOKEN",
    "SHOPIFY_SHOP_DOMAIN",
    "PORT",
)


# ============================================================================
# Pytest Markers
# ============================================================================


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "integration: marks tests requiring external services"
    )


# ============================================================================
# Environment Fixtures
# ============================================================================


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    """Remove every config-related env var and run from an empty directory."""
    for var in _CONFIG_ENV_VARS:
        monkeypatch.delenv(var, raising=False)
    for var in list(os.environ):
        if var.startswith("SHIPRELAY_PROXY_"):
            monkeypatch.delenv(var, raising=False)
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("HOME", str(tmp_path))
    return tmp_path


# ============================================================================
# Config Fixtures
# ============================================================================


@pytest.fixture
def relay_config() -> RelayConfig:
    """Fully configured proxy settings (ShipRelay + Shopify REST)."""
    return RelayConfig(
        shiprelay=ShipRelayConfig(email="agent@example.com", password="hunter22"),
        shopify=ShopifyConfig(access_token="shpat_test", shop_domain="acme"),
    )


@pytest.fixture
def unconfigured_config() -> RelayConfig:
    """Defaults only: no credentials anywhere."""
    return RelayConfig()


# ============================================================================
# Payload Fixtures
# ============================================================================


@pytest.fixture
def sample_shipments() -> list[dict]:
    """Three shipments for order #1001 in upstream (unsorted) order."""
    return [
        {
            "id": 11,
            "order_ref": "#1001",
            "status": "shipped",
            "updated_at": "2024-01-01T00:00:00Z",
            "address": {"name": "Ada Lovelace", "email": "ada@example.com"},
            "items": [],
        },
        {
            "id": 12,
            "order_ref": "#1001",
            "status": "queued",
            "updated_at": "2024-02-01T00:00:00Z",
            "address": {"name": "Ada Lovelace", "email": "ada@example.com"},
            "items": [],
        },
        {
            "id": 13,
            "order_ref": "#1001",
            "status": "inactive",
            "updated_at": "2024-01-15T00:00:00Z",
            "address": {"name": "Ada Lovelace", "email": "ada@example.com"},
            "items": [],
        },
    ]
