"""YAML configuration loader with env var resolution and Pydantic validation.

Loads config from (priority order):
1. --config <path> CLI flag (or SHIPRELAY_PROXY_CONFIG_PATH)
2. ./shiprelay-proxy.yaml (working directory)
3. ~/.shiprelay-proxy/config.yaml (user home)

When no file is found the defaults are used, so a deployment can be
configured purely from the environment.

Environment variables override YAML: SHIPRELAY_PROXY_<SECTION>_<KEY>.
The plain deployment variables (SHIPRELAY_EMAIL, SHIPRELAY_PASSWORD,
SHOPIFY_ACCESS_TOKEN, SHOPIFY_SHOP_DOMAIN, PORT) are honoured too.
${VAR} references in YAML values resolve from environment at load time.
"""

import logging
import os
import re
from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, field_validator

logger = logging.getLogger(__name__)

_ENV_VAR_PATTERN = re.compile(r"\$\{([^}]+)\}")

ENV_PREFIX = "SHIPRELAY_PROXY_"

# Flat deployment variables -> (section, field)
_LEGACY_ENV_VARS: dict[str, tuple[str, str]] = {
    "SHIPRELAY_EMAIL": ("shiprelay", "email"),
    "SHIPRELAY_PASSWORD": ("shiprelay", "password"),
    "SHOPIFY_ACCESS_TOKEN": ("shopify", "access_token"),
    "SHOPIFY_SHOP_DOMAIN": ("shopify", "shop_domain"),
    "PORT": ("server", "port"),
}


def resolve_env_vars(value: str) -> str:
    """Resolve ${VAR} references in a string from environment variables.

    Args:
        value: String potentially containing ${VAR} references.

    Returns:
        String with all ${VAR} references replaced by their env values.
        Missing env vars resolve to empty string.
    """
    def _replace(match: re.Match) -> str:
        return os.environ.get(match.group(1), "")

    return _ENV_VAR_PATTERN.sub(_replace, value)


def _resolve_env_vars_recursive(data: Any) -> Any:
    """Recursively resolve ${VAR} references in a nested data structure.

    Args:
        data: Dict, list, or scalar value to process.

    Returns:
        Same structure with all string values resolved.
    """
    if isinstance(data, str):
        return resolve_env_vars(data)
    elif isinstance(data, dict):
        return {k: _resolve_env_vars_recursive(v) for k, v in data.items()}
    elif isinstance(data, list):
        return [_resolve_env_vars_recursive(item) for item in data]
    return data


class ServerConfig(BaseModel):
    """Configuration for the proxy HTTP server."""

    host: str = "0.0.0.0"
    port: int = 3001
    log_level: Literal["critical", "error", "warning", "info", "debug"] = "info"


class ShipRelayConfig(BaseModel):
    """ShipRelay API credentials and endpoint."""

    email: str = ""
    password: str = ""
    base_url: str = "https://console.shiprelay.com/api/v2"
    # Provider tokens live ~60 minutes; refresh well before that.
    token_ttl_seconds: int = 50 * 60

    @field_validator("base_url")
    @classmethod
    def strip_trailing_slash(cls, value: str) -> str:
        """Normalize base URL so paths can be appended with '/'."""
        return value.rstrip("/")

    @property
    def is_configured(self) -> bool:
        """True when both login credentials are present."""
        return bool(self.email and self.password)


class ShopifyConfig(BaseModel):
    """Shopify Admin API credentials used for fulfillment cancellation."""

    access_token: str = ""
    shop_domain: str = ""
    api_version: str = "2025-01"
    api_mode: Literal["rest", "graphql"] = "rest"
    cancellation_message: str = "Shipment archived in ShipRelay"

    @property
    def is_configured(self) -> bool:
        """True when both the access token and shop domain are present."""
        return bool(self.access_token and self.shop_domain)

    @property
    def store_url(self) -> str:
        """Return the shop's base URL.

        A bare store id ("acme") expands to https://acme.myshopify.com;
        a host or full URL is reduced to its host, so a pasted admin URL
        such as https://acme.myshopify.com/admin still works.
        """
        domain = self.shop_domain.strip()
        domain = domain.replace("https://", "").replace("http://", "")
        domain = domain.split("/", 1)[0]
        if "." not in domain:
            domain = f"{domain}.myshopify.com"
        return f"https://{domain}"


class RelayConfig(BaseModel):
    """Top-level configuration for the ShipRelay proxy."""

    server: ServerConfig = ServerConfig()
    shiprelay: ShipRelayConfig = ShipRelayConfig()
    shopify: ShopifyConfig = ShopifyConfig()


def _find_config_file() -> Path | None:
    """Search for config file in standard locations.

    Returns:
        Path to config file if found, None otherwise.
    """
    candidates = [
        Path.cwd() / "shiprelay-proxy.yaml",
        Path.cwd() / "shiprelay-proxy.yml",
        Path.home() / ".shiprelay-proxy" / "config.yaml",
        Path.home() / ".shiprelay-proxy" / "config.yml",
    ]
    for candidate in candidates:
        if candidate.exists():
            return candidate
    return None


def _coerce(value: str) -> Any:
    """Coerce an env var string to int, bool, or keep as string."""
    try:
        return int(value)
    except ValueError:
        if value.lower() in ("true", "false"):
            return value.lower() == "true"
        return value


def _set_field(data: dict[str, Any], section: str, field: str, value: Any) -> None:
    if not isinstance(data.get(section), dict):
        data[section] = {}
    data[section][field] = value


def _apply_env_overrides(data: dict[str, Any]) -> dict[str, Any]:
    """Apply env var overrides to config data.

    Flat deployment variables are applied first so that the more
    specific SHIPRELAY_PROXY_<SECTION>_<KEY> form wins when both are set.
    String fields (email, password, tokens) are never coerced.

    Args:
        data: Parsed YAML config dict.

    Returns:
        Config dict with env var overrides applied.
    """
    for env_key, (section, field) in _LEGACY_ENV_VARS.items():
        value = os.environ.get(env_key)
        if value:
            _set_field(data, section, field, _coerce(value) if field == "port" else value)

    for key, value in os.environ.items():
        if not key.startswith(ENV_PREFIX) or key == f"{ENV_PREFIX}CONFIG_PATH":
            continue
        suffix = key[len(ENV_PREFIX):].lower()  # e.g. "shopify_api_mode"
        for section in RelayConfig.model_fields:
            section_prefix = section + "_"
            if suffix.startswith(section_prefix) and len(suffix) > len(section_prefix):
                field = suffix[len(section_prefix):]
                section_model = RelayConfig.model_fields[section].annotation
                field_info = section_model.model_fields.get(field)
                if field_info is not None and field_info.annotation is str:
                    _set_field(data, section, field, value)
                else:
                    _set_field(data, section, field, _coerce(value))
                break
    return data


def load_config(config_path: str | None = None) -> RelayConfig:
    """Load proxy configuration from YAML file with env var resolution.

    Args:
        config_path: Explicit path to config file. If None, uses
            SHIPRELAY_PROXY_CONFIG_PATH or searches standard locations
            (cwd, then ~/.shiprelay-proxy/).

    Returns:
        Parsed and validated RelayConfig. Defaults plus environment
        overrides when no config file exists.

    Raises:
        FileNotFoundError: If an explicit config path does not exist.
    """
    config_path = config_path or os.environ.get(f"{ENV_PREFIX}CONFIG_PATH")
    raw_data: dict[str, Any] = {}

    if config_path:
        path: Path | None = Path(config_path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")
    else:
        path = _find_config_file()

    if path is not None:
        logger.info("Loading config from %s", path)
        with open(path) as f:
            raw_data = yaml.safe_load(f) or {}

    # Resolve ${VAR} references
    data = _resolve_env_vars_recursive(raw_data)

    # Apply environment overrides
    data = _apply_env_overrides(data)

    # Validate with Pydantic
    return RelayConfig(**data)
