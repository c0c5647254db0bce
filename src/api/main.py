"""FastAPI application for the ShipRelay support proxy.

Provides the main application instance with routers, middleware,
and exception handlers configured.
"""

import logging
import os
import sys
import time as _time
from contextlib import asynccontextmanager
from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as _pkg_version

from fastapi import FastAPI, Request

# Configure logging to stdout for uvicorn to capture
logging.basicConfig(
    level=logging.INFO,
    format="%(levelname)s:%(name)s:%(message)s",
    handlers=[logging.StreamHandler(sys.stdout)],
)
# Ensure our application loggers are captured
logging.getLogger("src").setLevel(logging.INFO)
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from src.api.routes import shiprelay, widget
from src.api.schemas import HealthResponse
from src.errors import DomainError
from src.services.provider import get_config, shutdown_clients

logger = logging.getLogger(__name__)

API_PREFIX = "/api/shiprelay"

# Module-level state for health endpoint
_startup_time: float = 0.0


def _parse_allowed_origins() -> list[str]:
    """Parse comma-separated CORS allowlist from ALLOWED_ORIGINS env var."""
    raw = os.environ.get("ALLOWED_ORIGINS", "").strip()
    if not raw:
        return []
    return [origin.strip() for origin in raw.split(",") if origin.strip()]


def _package_version() -> str:
    try:
        return _pkg_version("shiprelay-proxy")
    except PackageNotFoundError:
        return "unknown"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Async lifespan: configuration check on startup, client cleanup on shutdown."""
    global _startup_time

    # --- Startup ---
    _startup_time = _time.time()
    cfg = get_config()
    logging.getLogger("src").setLevel(cfg.server.log_level.upper())
    if not cfg.shiprelay.is_configured:
        logger.warning(
            "ShipRelay credentials missing. Set SHIPRELAY_EMAIL and SHIPRELAY_PASSWORD."
        )
    if not cfg.shopify.is_configured:
        logger.info("Shopify credentials not set; fulfillment cancellation disabled.")

    yield

    # --- Shutdown ---
    await shutdown_clients()


app = FastAPI(
    title="ShipRelay Proxy API",
    description="Shipment lookup, hold/release and archive for support agents",
    version="1.0.0",
    lifespan=lifespan,
)

# CORS allowlist is env-driven. If unset, CORS is disabled (same-origin only).
allowed_origins = _parse_allowed_origins()
if allowed_origins:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=allowed_origins,
        allow_credentials=False,
        allow_methods=["GET", "PUT", "PATCH", "OPTIONS"],
        allow_headers=["Content-Type"],
    )


@app.exception_handler(DomainError)
async def domain_error_handler(request: Request, exc: DomainError) -> JSONResponse:
    """Render DomainError subclasses with their status code and error body.

    Args:
        request: The incoming request.
        exc: The DomainError exception.

    Returns:
        JSONResponse with error details.
    """
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc)
    else:
        logger.warning("%s %s rejected: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=exc.status_code, content=exc.to_payload())


# Include routers
app.include_router(shiprelay.router, prefix=API_PREFIX)
app.include_router(widget.router, prefix=API_PREFIX)


@app.get("/health", response_model=HealthResponse)
def health_check() -> HealthResponse:
    """Liveness check with version and uptime."""
    uptime = int(_time.time() - _startup_time) if _startup_time else 0
    return HealthResponse(status="healthy", version=_package_version(), uptime_seconds=uptime)


@app.get("/readyz")
def readiness_check() -> dict:
    """Configuration-aware readiness check.

    ShipRelay credentials are required; Shopify credentials only enable
    fulfillment cancellation, so their absence is reported but does not
    degrade readiness.
    """
    cfg = get_config()
    checks: dict[str, dict[str, str]] = {}
    status = "ready"

    if cfg.shiprelay.is_configured:
        checks["shiprelay_credentials"] = {"status": "configured"}
    else:
        checks["shiprelay_credentials"] = {"status": "degraded"}
        status = "degraded"

    if cfg.shopify.is_configured:
        checks["shopify_credentials"] = {
            "status": "configured",
            "api_mode": cfg.shopify.api_mode,
        }
    else:
        checks["shopify_credentials"] = {"status": "disabled"}

    return {"status": status, "checks": checks}


@app.get("/api")
def api_root() -> dict:
    """API root with links to docs.

    Returns:
        Dictionary with API info and links.
    """
    return {
        "name": "ShipRelay Proxy API",
        "version": "1.0.0",
        "docs": "/docs",
        "widget": f"{API_PREFIX}/widget",
    }
