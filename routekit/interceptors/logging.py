"""Call timing interceptor."""

from __future__ import annotations

import time
from typing import Any

from loguru import logger

from routekit.core.context import ExecutionContext
from routekit.interceptors.chain import CallHandler
from routekit.telemetry.base import TelemetryPort


class LoggingInterceptor:
    """Log a start marker, then elapsed time once the inner stages settle.

    The value or error produced further in is re-emitted unchanged.
    """

    def __init__(self, *, telemetry: TelemetryPort | None = None) -> None:
        self._telemetry = telemetry

    async def intercept(self, context: ExecutionContext, next: CallHandler) -> Any:
        logger.info("Before... {} {} -> {}", context.request.method, context.request.path, context.handler_name)
        started = time.perf_counter()
        try:
            result = await next.handle()
        except Exception as exc:
            self._after(context, started, outcome=type(exc).__name__)
            raise
        self._after(context, started, outcome="ok")
        return result

    def _after(self, context: ExecutionContext, started: float, *, outcome: str) -> None:
        elapsed = time.perf_counter() - started
        logger.info("After... {}ms ({}, {})", round(elapsed * 1000), context.handler_name, outcome)
        if self._telemetry is not None:
            self._telemetry.timing(
                "handler_duration_seconds",
                elapsed,
                labels=(("handler", context.handler_name), ("outcome", outcome)),
            )
