"""Utility functions for routekit."""

from routekit.utils.helpers import configure_logging, import_object, parse_pairs

__all__ = ["configure_logging", "import_object", "parse_pairs"]
