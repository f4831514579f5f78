"""Configuration module for routekit."""

from routekit.config.loader import get_config_path, load_config, save_config
from routekit.config.schema import CacheConfig, PipelineSettings

__all__ = ["CacheConfig", "PipelineSettings", "get_config_path", "load_config", "save_config"]
