"""Centralized client provider: single owner of process-global singletons.

API routes obtain the ShipRelay client and the fulfillment canceller
from HERE (as FastAPI dependencies). This module owns the shared
httpx.AsyncClient, the one token cache, and their shutdown.
Never instantiate ShipRelayTokenCache elsewhere: a second cache would
mean a second login.
"""

import logging
from datetime import timedelta

import httpx

from src.cli.config import RelayConfig, load_config
from src.services.fulfillment_cancellation import FulfillmentCanceller
from src.services.shiprelay_client import ShipRelayClient
from src.services.shopify import build_shopify_client
from src.services.token_cache import ShipRelayTokenCache

logger = logging.getLogger(__name__)

_config: RelayConfig | None = None
_http: httpx.AsyncClient | None = None
_shiprelay_client: ShipRelayClient | None = None
_canceller: FulfillmentCanceller | None = None


def get_config() -> RelayConfig:
    """Get or load the process-global configuration."""
    global _config
    if _config is None:
        _config = load_config()
    return _config


def _get_http() -> httpx.AsyncClient:
    global _http
    if _http is None:
        _http = httpx.AsyncClient()
    return _http


def get_shiprelay_client() -> ShipRelayClient:
    """Get or create the process-global ShipRelayClient.

    Returns:
        The shared ShipRelayClient, backed by the single token cache.
    """
    global _shiprelay_client
    if _shiprelay_client is None:
        cfg = get_config().shiprelay
        if not cfg.is_configured:
            logger.warning("ShipRelay credentials are not configured; logins will fail")
        http = _get_http()
        token_cache = ShipRelayTokenCache(
            http,
            base_url=cfg.base_url,
            email=cfg.email,
            password=cfg.password,
            ttl=timedelta(seconds=cfg.token_ttl_seconds),
        )
        _shiprelay_client = ShipRelayClient(http, cfg.base_url, token_cache)
        logger.info("ShipRelayClient singleton initialized")
    return _shiprelay_client


def get_fulfillment_canceller() -> FulfillmentCanceller:
    """Get or create the process-global FulfillmentCanceller.

    When Shopify credentials are missing the canceller is built without
    a client and every run is skipped.
    """
    global _canceller
    if _canceller is None:
        cfg = get_config().shopify
        shopify = build_shopify_client(_get_http(), cfg) if cfg.is_configured else None
        _canceller = FulfillmentCanceller(shopify)
        logger.info(
            "FulfillmentCanceller initialized (shopify=%s)",
            cfg.api_mode if shopify else "disabled",
        )
    return _canceller


async def shutdown_clients() -> None:
    """Shutdown hook: close the shared HTTP client. Call from FastAPI lifespan."""
    global _config, _http, _shiprelay_client, _canceller
    if _http is not None:
        try:
            await _http.aclose()
        except httpx.HTTPError as e:
            logger.warning("Failed to close HTTP client: %s", e)
    _http = None
    _shiprelay_client = None
    _canceller = None
    _config = None
