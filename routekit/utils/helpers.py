"""Utility functions for routekit."""

from __future__ import annotations

import importlib
import sys
from typing import Any

from loguru import logger


def configure_logging(level: str = "INFO") -> None:
    """Replace loguru's default sink with one at ``level``."""
    logger.remove()
    logger.add(sys.stderr, level=level.upper())


def import_object(spec: str) -> Any:
    """Resolve ``package.module:attr`` (``attr`` may be dotted)."""
    module_name, sep, attr_path = spec.partition(":")
    if not sep or not module_name or not attr_path:
        raise ValueError(f"expected 'module:attribute', got {spec!r}")
    obj: Any = importlib.import_module(module_name)
    for part in attr_path.split("."):
        obj = getattr(obj, part)
    return obj


def parse_pairs(items: list[str] | None) -> dict[str, str]:
    """Parse repeated ``key=value`` CLI options."""
    out: dict[str, str] = {}
    for item in items or []:
        key, sep, value = item.partition("=")
        if not sep or not key.strip():
            raise ValueError(f"expected key=value, got {item!r}")
        out[key.strip()] = value
    return out
