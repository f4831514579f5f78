"""CLI module for routekit."""

from routekit.cli import commands as _commands  # noqa: F401  registers commands
from routekit.cli.core import app

__all__ = ["app"]
