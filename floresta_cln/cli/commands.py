"""CLI commands for floresta-cln.

`run` starts the plugin on stdio (what lightningd executes); `call` and
`methods` are for poking at a florestad without a lightningd in front of it.
"""

import asyncio
import json
from pathlib import Path
from typing import Any, Optional

import typer
from rich.console import Console
from rich.table import Table

from floresta_cln import __version__
from floresta_cln.backend.client import BackendRpcClient
from floresta_cln.cli.shared.logging_utils import configure_logging
from floresta_cln.config.loader import get_config_path, load_config, save_config
from floresta_cln.config.schema import Config
from floresta_cln.plugin.host import PluginHost
from floresta_cln.plugin.registry import build_registry
from floresta_cln.utils.exceptions import BridgeError

app = typer.Typer(
    name="floresta-cln",
    help="Core Lightning Bitcoin backend plugin backed by florestad",
    no_args_is_help=True,
)

console = Console()
err_console = Console(stderr=True)


def _load(config_path: Optional[Path], rpc_url: Optional[str], timeout: Optional[float]) -> Config:
    try:
        config = load_config(config_path)
        return config.with_backend_overrides(url=rpc_url, timeout_seconds=timeout)
    except ValueError as exc:
        err_console.print(f"[red]{exc}[/red]")
        raise typer.Exit(2) from exc


def version_callback(value: bool) -> None:
    if value:
        console.print(f"floresta-cln v{__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    version: bool = typer.Option(
        None, "--version", "-v", callback=version_callback, is_eager=True
    ),
) -> None:
    """floresta-cln - Core Lightning backend plugin for Floresta."""


@app.command()
def run(
    config_path: Optional[Path] = typer.Option(None, "--config", "-c", help="Config JSON file"),
    rpc_url: Optional[str] = typer.Option(None, "--rpc-url", help="florestad JSON-RPC URL"),
    timeout: Optional[float] = typer.Option(None, "--timeout", help="Per-call timeout in seconds"),
) -> None:
    """Serve lightningd over stdin/stdout."""
    config = _load(config_path, rpc_url, timeout)
    run_plugin(config)


@app.command()
def call(
    method: str = typer.Argument(..., help="Plugin method, e.g. getchaininfo"),
    params: str = typer.Argument("{}", help="Params as a JSON object or array"),
    config_path: Optional[Path] = typer.Option(None, "--config", "-c", help="Config JSON file"),
    rpc_url: Optional[str] = typer.Option(None, "--rpc-url", help="florestad JSON-RPC URL"),
    timeout: Optional[float] = typer.Option(None, "--timeout", help="Per-call timeout in seconds"),
) -> None:
    """Run one plugin method against florestad and print the result."""
    try:
        parsed = json.loads(params)
    except json.JSONDecodeError as exc:
        err_console.print(f"[red]params is not valid JSON: {exc}[/red]")
        raise typer.Exit(2) from exc
    if not isinstance(parsed, (dict, list)):
        err_console.print("[red]params must be a JSON object or array[/red]")
        raise typer.Exit(2)

    config = _load(config_path, rpc_url, timeout)
    configure_logging(config.logging)
    try:
        result = asyncio.run(_call_once(config, method, parsed))
    except BridgeError as exc:
        err_console.print(f"[red]{exc}[/red]")
        raise typer.Exit(1) from exc
    console.print_json(data=result)


async def _call_once(config: Config, method: str, params: Any) -> dict[str, Any]:
    async with BackendRpcClient(config.backend) as client:
        return await build_registry().bind(client).dispatch(method, params)


@app.command()
def methods() -> None:
    """List the methods registered with lightningd."""
    table = Table(title="floresta-cln methods")
    table.add_column("Method", style="cyan")
    table.add_column("Usage")
    table.add_column("Description")
    for entry in build_registry().manifest_entries():
        table.add_row(entry["name"], entry["usage"], entry["description"])
    console.print(table)


@app.command("init-config")
def init_config(
    config_path: Optional[Path] = typer.Option(None, "--config", "-c", help="Where to write the file"),
    force: bool = typer.Option(False, "--force", help="Overwrite an existing file"),
) -> None:
    """Write a config file with default values."""
    path = config_path or get_config_path()
    if path.exists() and not force:
        err_console.print(f"[yellow]{path} already exists, use --force to overwrite[/yellow]")
        raise typer.Exit(1)
    written = save_config(Config(), path)
    console.print(f"[green]✓[/green] Wrote {written}")


def run_plugin(config: Config) -> None:
    """Configure logging and serve lightningd until it shuts us down."""
    configure_logging(config.logging, stderr=not config.logging.forward_to_host)
    host = PluginHost(config)
    if config.logging.forward_to_host:
        host.attach_log_sink(config.logging.level)
    asyncio.run(host.run())


def plugin_main() -> None:
    """Console entry used by lightningd, which starts plugins without arguments."""
    config = load_config()
    run_plugin(config)


def main() -> None:
    app()
