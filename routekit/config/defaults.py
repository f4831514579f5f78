"""Centralized defaults shared by the settings schema and stage constructors."""

from __future__ import annotations

from typing import Any

DEFAULT_TIMEOUT_MS = 5000

DEFAULT_CACHE: dict[str, Any] = {
    "enabled": False,
    "populate": True,
    "ttl_seconds": 60,
    "max_entries": 1024,
}
