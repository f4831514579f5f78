"""Response envelope interceptor."""

from __future__ import annotations

from typing import Any

from routekit.core.context import ExecutionContext
from routekit.interceptors.chain import CallHandler


class TransformInterceptor:
    """Wrap every successful payload as ``{"data": payload}``."""

    def __init__(self, *, key: str = "data") -> None:
        self._key = key

    async def intercept(self, context: ExecutionContext, next: CallHandler) -> dict[str, Any]:
        del context
        return {self._key: await next.handle()}
