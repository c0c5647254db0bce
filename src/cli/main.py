"""ShipRelay proxy CLI.

Usage:
    shiprelay-proxy serve              Start the proxy server
    shiprelay-proxy config show        Print the resolved configuration
    shiprelay-proxy config validate    Validate a config file
"""

import os
from typing import Optional

import typer
import yaml
from pydantic import ValidationError as PydanticValidationError
from rich.console import Console

from src.cli.config import ENV_PREFIX, load_config

app = typer.Typer(
    name="shiprelay-proxy",
    help="ShipRelay support proxy: shipment lookup and archive for support agents",
    no_args_is_help=True,
)
config_app = typer.Typer(help="Configuration management")
app.add_typer(config_app, name="config")

console = Console()

# --- Global state ---
_config_path: str | None = None


def _mask(secret: str) -> str:
    if not secret:
        return "[red](not set)[/red]"
    return "****" + secret[-4:] if len(secret) > 8 else "****"


@app.callback()
def main(
    config: Optional[str] = typer.Option(
        None, "--config", help="Path to shiprelay-proxy.yaml config file"
    ),
):
    """ShipRelay support proxy."""
    global _config_path
    _config_path = config


@app.command()
def serve(
    host: Optional[str] = typer.Option(None, "--host", help="Bind address"),
    port: Optional[int] = typer.Option(None, "--port", help="Bind port"),
):
    """Start the proxy server (FastAPI via uvicorn)."""
    import uvicorn

    cfg = load_config(config_path=_config_path)
    final_host = host or cfg.server.host
    final_port = port or cfg.server.port

    # Propagate config path to the app's lifespan via env var so the
    # server loads the same config as the CLI.
    if _config_path:
        os.environ[f"{ENV_PREFIX}CONFIG_PATH"] = str(_config_path)

    console.print(f"[bold]Starting ShipRelay proxy on {final_host}:{final_port}[/bold]")
    uvicorn.run(
        "src.api.main:app",
        host=final_host,
        port=final_port,
        workers=1,
        log_level=cfg.server.log_level,
        lifespan="on",
    )


@config_app.command("show")
def config_show():
    """Print the resolved configuration with secrets masked."""
    try:
        cfg = load_config(config_path=_config_path)
    except (FileNotFoundError, yaml.YAMLError, PydanticValidationError) as e:
        console.print(f"[red]Config error:[/red] {e}")
        raise typer.Exit(1)

    console.print("[bold]server[/bold]")
    console.print(f"  host: {cfg.server.host}")
    console.print(f"  port: {cfg.server.port}")
    console.print(f"  log_level: {cfg.server.log_level}")
    console.print("[bold]shiprelay[/bold]")
    console.print(f"  base_url: {cfg.shiprelay.base_url}")
    console.print(f"  email: {cfg.shiprelay.email or '[red](not set)[/red]'}")
    console.print(f"  password: {_mask(cfg.shiprelay.password)}")
    console.print(f"  token_ttl_seconds: {cfg.shiprelay.token_ttl_seconds}")
    console.print("[bold]shopify[/bold]")
    if cfg.shopify.is_configured:
        console.print(f"  store_url: {cfg.shopify.store_url}")
    else:
        console.print("  [yellow]not configured, fulfillment cancellation disabled[/yellow]")
    console.print(f"  access_token: {_mask(cfg.shopify.access_token)}")
    console.print(f"  api_version: {cfg.shopify.api_version}")
    console.print(f"  api_mode: {cfg.shopify.api_mode}")


@config_app.command("validate")
def config_validate(
    config_file: str = typer.Argument(..., help="Path to config file"),
):
    """Validate a config file without starting the server."""
    try:
        cfg = load_config(config_path=config_file)
    except FileNotFoundError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)
    except (yaml.YAMLError, PydanticValidationError) as e:
        console.print(f"[red]Invalid config:[/red] {e}")
        raise typer.Exit(1)

    console.print(f"[green]Config valid:[/green] {config_file}")
    if not cfg.shiprelay.is_configured:
        console.print("[yellow]Warning:[/yellow] ShipRelay email/password are not set")


if __name__ == "__main__":
    app()
