# route_failover/cli.py
"""
CLI entry point for route-failover.

Available commands:
  route-failover serve [--config router.yaml] [--host H] [--port N]
  route-failover route "message" [--config router.yaml]
  route-failover addkey NAME KEY        | listkeys   | deletekey ID
  route-failover addmodel NAME DISPLAY  | listmodels | deletemodel ID
  route-failover enablekey/disablekey ID, enablemodel/disablemodel ID

The key and model commands edit the shared registry and therefore need
redis_url (config file or ROUTE_FAILOVER_REDIS_URL).
"""

from __future__ import annotations

import asyncio
from typing import Any, Awaitable, Callable, Optional, TypeVar

import typer
import uvicorn
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from .config import RouterConfig
from .constants import DEFAULT_HOST, DEFAULT_PORT
from .exceptions import AllAttemptsFailed, RouterError
from .logging_config import configure_logging
from .models import Credential, ModelSpec
from .registry.base import AbstractRegistry
from .registry.redis import RedisRegistry
from .router import FailoverRouter

app = typer.Typer(
    name="route-failover",
    help="Priority-ordered failover across API keys and models.",
    add_completion=False,
)
console = Console()

T = TypeVar("T")

ConfigOption = typer.Option(None, "--config", "-c", help="Path to router.yaml")


def _load_config(config_path: Optional[str]) -> RouterConfig:
    if config_path:
        return RouterConfig.from_yaml(config_path)
    return RouterConfig.from_env()


def _with_registry(config_path: Optional[str], action: Callable[[AbstractRegistry], Awaitable[T]]) -> T:
    """Run *action* against the shared Redis registry, then close it."""
    cfg = _load_config(config_path)
    if not cfg.redis_url:
        console.print("[red]✗ redis_url is not configured; nothing to administer.[/red]")
        raise typer.Exit(1)

    async def _run() -> T:
        registry = RedisRegistry(cfg.redis_url)
        try:
            return await action(registry)
        finally:
            await registry.close()

    try:
        return asyncio.run(_run())
    except RouterError as exc:
        console.print(f"[red]✗ {exc}[/red]")
        raise typer.Exit(1)


def _keys_table(credentials: list[Credential]) -> Table:
    table = Table(title="API Keys", show_lines=True)
    table.add_column("ID", style="dim", no_wrap=True)
    table.add_column("Name", style="bold cyan")
    table.add_column("Key")
    table.add_column("Priority", justify="right")
    table.add_column("Status")
    for c in credentials:
        table.add_row(
            c.id,
            c.key_name,
            c.masked_key,
            str(c.priority),
            "[green]ACTIVE[/green]" if c.is_active else "[red]INACTIVE[/red]",
        )
    return table


def _models_table(models: list[ModelSpec]) -> Table:
    table = Table(title="Models", show_lines=True)
    table.add_column("ID", style="dim", no_wrap=True)
    table.add_column("Model", style="bold cyan")
    table.add_column("Display Name")
    table.add_column("Priority", justify="right")
    table.add_column("Status")
    for m in models:
        table.add_row(
            m.id,
            m.model_name,
            m.display_name,
            str(m.priority),
            "[green]ACTIVE[/green]" if m.is_active else "[red]INACTIVE[/red]",
        )
    return table


# ----------------------------------------------------------------------
# Serving and routing
# ----------------------------------------------------------------------


@app.command()
def serve(
    config: Optional[str] = ConfigOption,
    host: str = typer.Option(DEFAULT_HOST, "--host", help="Bind address"),
    port: int = typer.Option(DEFAULT_PORT, "--port", "-p", help="Bind port"),
) -> None:
    """Serve the routing endpoint over HTTP."""
    from .server import create_app

    cfg = _load_config(config)
    configure_logging(cfg.log_level)
    uvicorn.run(create_app(config=cfg), host=host, port=port, log_level=cfg.log_level.lower())


@app.command()
def route(
    message: str = typer.Argument(..., help="Message to send"),
    config: Optional[str] = ConfigOption,
) -> None:
    """Dispatch one message and print the answer."""
    cfg = _load_config(config)
    configure_logging(cfg.log_level)

    async def _run() -> Any:
        async with FailoverRouter(cfg) as router:
            return await router.route(message)

    try:
        result = asyncio.run(_run())
    except AllAttemptsFailed as exc:
        console.print(f"[red]✗ {exc.public_error}[/red]\n  last error: {escape(exc.last_error or '')}")
        raise typer.Exit(1)
    except RouterError as exc:
        console.print(f"[red]✗ {exc.public_error}[/red]")
        raise typer.Exit(1)

    console.print(result.response, markup=False)
    console.print(
        f"[dim]model: {result.model_display_name} ({result.model_used}) · key: {result.key_used}[/dim]"
    )


# ----------------------------------------------------------------------
# API keys
# ----------------------------------------------------------------------


@app.command()
def addkey(
    name: str = typer.Argument(..., help="Label for the key"),
    key: str = typer.Argument(..., help="The secret"),
    config: Optional[str] = ConfigOption,
) -> None:
    """Add an API key after all existing ones."""
    credential = _with_registry(config, lambda r: r.add_credential(name, key))
    console.print(f"[green]✓ API key '{escape(credential.key_name)}' added with priority {credential.priority}[/green]")


@app.command()
def listkeys(config: Optional[str] = ConfigOption) -> None:
    """List API keys in priority order."""
    credentials = _with_registry(config, lambda r: r.list_credentials())
    if not credentials:
        console.print("No API keys configured.")
        return
    console.print(_keys_table(credentials))


@app.command()
def deletekey(
    credential_id: str = typer.Argument(..., help="Key id (see listkeys)"),
    config: Optional[str] = ConfigOption,
) -> None:
    """Delete an API key by id."""
    if not _with_registry(config, lambda r: r.delete_credential(credential_id)):
        console.print(f"[red]✗ No API key with id {credential_id}[/red]")
        raise typer.Exit(1)
    console.print("[green]✓ API key deleted successfully[/green]")


def _set_key_active(credential_id: str, active: bool, config: Optional[str]) -> None:
    if not _with_registry(config, lambda r: r.set_credential_active(credential_id, active)):
        console.print(f"[red]✗ No API key with id {credential_id}[/red]")
        raise typer.Exit(1)
    console.print(f"[green]✓ API key {'enabled' if active else 'disabled'}[/green]")


@app.command()
def enablekey(credential_id: str = typer.Argument(...), config: Optional[str] = ConfigOption) -> None:
    """Put an API key back into rotation."""
    _set_key_active(credential_id, True, config)


@app.command()
def disablekey(credential_id: str = typer.Argument(...), config: Optional[str] = ConfigOption) -> None:
    """Take an API key out of rotation without deleting it."""
    _set_key_active(credential_id, False, config)


# ----------------------------------------------------------------------
# Models
# ----------------------------------------------------------------------


@app.command()
def addmodel(
    model_name: str = typer.Argument(..., help="Upstream identifier, e.g. openai/gpt-4o-mini"),
    display_name: str = typer.Argument(..., help="Human-readable label"),
    config: Optional[str] = ConfigOption,
) -> None:
    """Add a model after all existing ones."""
    model = _with_registry(config, lambda r: r.add_model(model_name, display_name))
    console.print(f"[green]✓ Model '{escape(model.display_name)}' added with priority {model.priority}[/green]")


@app.command()
def listmodels(config: Optional[str] = ConfigOption) -> None:
    """List models in priority order."""
    models = _with_registry(config, lambda r: r.list_models())
    if not models:
        console.print("No models configured.")
        return
    console.print(_models_table(models))


@app.command()
def deletemodel(
    model_id: str = typer.Argument(..., help="Model id (see listmodels)"),
    config: Optional[str] = ConfigOption,
) -> None:
    """Delete a model by id."""
    if not _with_registry(config, lambda r: r.delete_model(model_id)):
        console.print(f"[red]✗ No model with id {model_id}[/red]")
        raise typer.Exit(1)
    console.print("[green]✓ Model deleted successfully[/green]")


def _set_model_active(model_id: str, active: bool, config: Optional[str]) -> None:
    if not _with_registry(config, lambda r: r.set_model_active(model_id, active)):
        console.print(f"[red]✗ No model with id {model_id}[/red]")
        raise typer.Exit(1)
    console.print(f"[green]✓ Model {'enabled' if active else 'disabled'}[/green]")


@app.command()
def enablemodel(model_id: str = typer.Argument(...), config: Optional[str] = ConfigOption) -> None:
    """Put a model back into rotation."""
    _set_model_active(model_id, True, config)


@app.command()
def disablemodel(model_id: str = typer.Argument(...), config: Optional[str] = ConfigOption) -> None:
    """Take a model out of rotation without deleting it."""
    _set_model_active(model_id, False, config)


if __name__ == "__main__":  # pragma: no cover
    app()
