"""Request logging middleware."""

from __future__ import annotations

import time

from loguru import logger

from routekit.core.models import HttpRequest
from routekit.core.ports import MiddlewareNext
from routekit.core.response import ResponseHandle


class LoggerMiddleware:
    """Log every request on the way in and its status on the way out."""

    async def __call__(self, request: HttpRequest, response: ResponseHandle, next: MiddlewareNext) -> None:
        logger.info("Request... {} {}", request.method, request.url)
        started = time.perf_counter()
        await next()
        logger.info(
            "Response {} for {} {} in {}ms",
            response.status_code,
            request.method,
            request.path,
            round((time.perf_counter() - started) * 1000),
        )
