"""Configuration loading utilities."""

import json
import os
from pathlib import Path
from typing import Any

from loguru import logger

from routekit.config.schema import PipelineSettings


def get_config_path() -> Path:
    """Get the default configuration file path."""
    return Path.cwd() / "routekit.json"


def load_config(config_path: Path | None = None) -> PipelineSettings:
    """
    Load settings from a camelCase JSON file; environment fills unset fields.

    Args:
        config_path: Optional path to config file. Uses default if not provided.

    Returns:
        Loaded settings. Defaults (plus environment) when the file is missing
        or invalid.
    """
    path = config_path or get_config_path()

    if path.exists():
        try:
            with open(path) as f:
                raw = json.load(f)
            if not isinstance(raw, dict):
                raise ValueError("top-level JSON value must be an object")
            return PipelineSettings(**convert_keys(raw))
        except (json.JSONDecodeError, ValueError) as e:
            logger.warning("Failed to load config from {}: {}; using defaults", path, e)

    return PipelineSettings()


def save_config(config: PipelineSettings, config_path: Path | None = None) -> Path:
    """
    Save settings as camelCase JSON.

    Args:
        config: Settings to save.
        config_path: Optional path to save to. Uses default if not provided.
    """
    path = config_path or get_config_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    _atomic_write_config(path, config)
    return path


def _atomic_write_config(path: Path, config: PipelineSettings) -> None:
    data = convert_to_camel(config.model_dump())
    tmp_path = path.with_suffix(path.suffix + ".tmp")
    with open(tmp_path, "w") as f:
        json.dump(data, f, indent=2)
        f.write("\n")
    os.replace(tmp_path, path)


def convert_keys(data: Any) -> Any:
    """Convert camelCase keys to snake_case for Pydantic."""
    if isinstance(data, dict):
        return {camel_to_snake(k): convert_keys(v) for k, v in data.items()}
    if isinstance(data, list):
        return [convert_keys(item) for item in data]
    return data


def convert_to_camel(data: Any) -> Any:
    """Convert snake_case keys to camelCase."""
    if isinstance(data, dict):
        return {snake_to_camel(k): convert_to_camel(v) for k, v in data.items()}
    if isinstance(data, list):
        return [convert_to_camel(item) for item in data]
    return data


def camel_to_snake(name: str) -> str:
    """Convert camelCase to snake_case."""
    result = []
    for i, char in enumerate(name):
        if char.isupper() and i > 0:
            result.append("_")
        result.append(char.lower())
    return "".join(result)


def snake_to_camel(name: str) -> str:
    """Convert snake_case to camelCase."""
    components = name.split("_")
    return components[0] + "".join(x.title() for x in components[1:])
