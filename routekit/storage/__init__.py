"""Shared stores used by pipeline stages."""

from routekit.storage.cache import CachedValue, InMemoryCacheStore

__all__ = ["CachedValue", "InMemoryCacheStore"]
