"""Shared CLI application context and setup helpers."""

from __future__ import annotations

import typer
from rich.console import Console

from routekit import __logo__, __version__
from routekit.core.pipeline import RequestPipeline
from routekit.utils.helpers import import_object

app = typer.Typer(
    name="routekit",
    help=f"{__logo__} routekit - request pipeline toolkit",
    no_args_is_help=True,
)

console = Console()


def version_callback(value: bool) -> None:
    if value:
        console.print(f"{__logo__} routekit v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(None, "--version", "-v", callback=version_callback, is_eager=True),
) -> None:
    """routekit - request pipeline toolkit."""


def load_pipeline(spec: str) -> RequestPipeline:
    """Resolve ``--app``: a pipeline object or a zero-argument factory returning one."""
    try:
        target = import_object(spec)
    except (ImportError, AttributeError, ValueError) as e:
        console.print(f"[red]Cannot load {spec}:[/red] {e}")
        raise typer.Exit(1) from e

    if not isinstance(target, RequestPipeline) and callable(target):
        target = target()
    if not isinstance(target, RequestPipeline):
        console.print(f"[red]{spec} is not a RequestPipeline (got {type(target).__name__})[/red]")
        raise typer.Exit(1)
    return target
