"""CLI commands: inspect routes, call them in-process, show settings."""

from __future__ import annotations

import asyncio
import json
from collections.abc import Iterable
from pathlib import Path

import typer
from rich.table import Table

from routekit import __logo__
from routekit.config.loader import get_config_path, load_config, save_config
from routekit.config.schema import PipelineSettings
from routekit.core.errors import MiddlewareError
from routekit.core.models import HttpRequest
from routekit.core.response import RecordingWriter
from routekit.utils.helpers import configure_logging, parse_pairs

from .core import app, console, load_pipeline


def _names(items: Iterable[object]) -> str:
    return ", ".join(type(item).__name__ for item in items) or "-"


@app.command()
def routes(
    app_spec: str = typer.Option(..., "--app", "-a", help="module:attr of a pipeline or factory"),
) -> None:
    """List registered routes and the components applied to each."""
    configure_logging("WARNING")
    pipeline = load_pipeline(app_spec)

    table = Table(title=f"{__logo__} routes")
    table.add_column("Method", style="cyan")
    table.add_column("Path", no_wrap=True)
    table.add_column("Handler")
    table.add_column("Params")
    table.add_column("Guards")
    table.add_column("Interceptors")
    table.add_column("Filters")
    table.add_column("Metadata", style="dim")

    for binding in pipeline.registry:
        plan = pipeline.plan_for(binding)
        params = ", ".join(f"{p.name}:{p.source}" for p in binding.params) or "-"
        filters = [f for scope in plan.filter_scopes for f in scope]
        table.add_row(
            binding.method,
            binding.path,
            binding.name,
            params,
            repr(plan.guards),
            repr(plan.interceptors),
            _names(filters),
            json.dumps(binding.metadata.as_dict(), default=str) if list(binding.metadata) else "-",
        )
    console.print(table)


@app.command()
def call(
    method: str = typer.Argument(..., help="HTTP method"),
    path: str = typer.Argument(..., help="Request path, e.g. /cats/1"),
    app_spec: str = typer.Option(..., "--app", "-a", help="module:attr of a pipeline or factory"),
    header: list[str] | None = typer.Option(None, "--header", "-H", help="Header as key=value (repeatable)"),
    query: list[str] | None = typer.Option(None, "--query", "-q", help="Query value as key=value (repeatable)"),
    body: str | None = typer.Option(None, "--body", "-d", help="JSON request body"),
    verbose: bool = typer.Option(False, "--verbose", help="Show pipeline logs"),
) -> None:
    """Run one request through the pipeline in-process and print the response."""
    configure_logging("DEBUG" if verbose else "WARNING")
    pipeline = load_pipeline(app_spec)

    try:
        request = HttpRequest(
            method=method,
            path=path,
            headers=parse_pairs(header),
            query=parse_pairs(query),
            body=json.loads(body) if body else None,
        )
    except (ValueError, json.JSONDecodeError) as e:
        console.print(f"[red]Invalid request:[/red] {e}")
        raise typer.Exit(2) from e

    writer = RecordingWriter()
    try:
        result = asyncio.run(pipeline.handle(request, writer))
    except MiddlewareError as e:
        console.print(f"[red]Middleware failure:[/red] {e}")
        raise typer.Exit(1) from e

    color = "green" if result.status_code < 400 else "red"
    console.print(f"[{color}]{result.status_code}[/{color}] {request.method} {request.path}")
    for name, value in result.headers.items():
        console.print(f"[dim]{name}: {value}[/dim]")
    console.print_json(json.dumps(result.body, default=str))
    if result.status_code >= 400:
        raise typer.Exit(1)


@app.command()
def config(
    config_path: Path | None = typer.Option(None, "--config", "-c", help="Config file (default ./routekit.json)"),
    init: bool = typer.Option(False, "--init", help="Write a default config file"),
) -> None:
    """Show effective pipeline settings."""
    path = config_path or get_config_path()
    if init:
        if path.exists():
            console.print(f"[yellow]Config already exists at {path}[/yellow]")
            raise typer.Exit(1)
        save_config(PipelineSettings(), path)
        console.print(f"[green]✓[/green] Created config at {path}")
        return

    settings = load_config(path)
    table = Table(title=f"{__logo__} settings ({path if path.exists() else 'defaults'})")
    table.add_column("Setting", style="cyan")
    table.add_column("Value")
    for key, value in settings.model_dump().items():
        table.add_row(key, json.dumps(value))
    console.print(table)
