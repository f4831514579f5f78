"""Response cache interceptor."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from loguru import logger

from routekit.core.context import ExecutionContext
from routekit.core.ports import CacheStore
from routekit.interceptors.chain import CallHandler

CACHE_KEY = "cache_key"
CACHE_TTL_KEY = "cache_ttl"
NO_CACHE_KEY = "no_cache"


def default_cache_key(context: ExecutionContext) -> str:
    request = context.request
    query = "&".join(f"{k}={v}" for k, v in sorted(request.query.items()))
    return f"{request.method} {request.path}?{query}"


class CacheInterceptor:
    """Serve cached payloads for ``GET`` routes without running the handler.

    On a hit the call is short-circuited.  On a miss the call proceeds; the
    result is stored only when ``populate`` is set, otherwise filling the
    store is left to whoever owns it.
    """

    def __init__(
        self,
        store: CacheStore,
        *,
        key_fn: Callable[[ExecutionContext], str] = default_cache_key,
        populate: bool = False,
        ttl_seconds: float | None = None,
    ) -> None:
        self._store = store
        self._key_fn = key_fn
        self._populate = populate
        self._ttl_seconds = ttl_seconds

    def cache_key(self, context: ExecutionContext) -> str | None:
        if context.request.method != "GET" or context.get_metadata(NO_CACHE_KEY):
            return None
        return context.get_metadata(CACHE_KEY) or self._key_fn(context)

    async def intercept(self, context: ExecutionContext, next: CallHandler) -> Any:
        key = self.cache_key(context)
        if key is None:
            return await next.handle()

        entry = self._store.get(key)
        if entry is not None:
            logger.debug("cache hit: {}", key)
            return entry.value

        result = await next.handle()
        if self._populate:
            ttl = context.get_metadata(CACHE_TTL_KEY, self._ttl_seconds)
            self._store.set(key, result, ttl)
        return result
