"""Deadline interceptor.

The inner stages run as their own task and race a timer.  When the timer
wins the call fails with ``RequestTimeoutError`` and whatever the inner task
produces later is dropped here; it never reaches the response writer.
Stopping the in-flight handler is best-effort: with ``cancel_on_timeout`` the
task is cancelled, otherwise it runs to completion in the background.
"""

from __future__ import annotations

import asyncio
from typing import Any

from loguru import logger

from routekit.config.defaults import DEFAULT_TIMEOUT_MS
from routekit.core.context import ExecutionContext
from routekit.core.errors import RequestTimeoutError
from routekit.interceptors.chain import CallHandler


class TimeoutInterceptor:
    """Fail the call with ``RequestTimeout`` when it outlives ``timeout_ms``."""

    def __init__(self, timeout_ms: int = DEFAULT_TIMEOUT_MS, *, cancel_on_timeout: bool = True) -> None:
        if timeout_ms <= 0:
            raise ValueError("timeout_ms must be positive")
        self._timeout_ms = int(timeout_ms)
        self._cancel_on_timeout = cancel_on_timeout

    @property
    def timeout_ms(self) -> int:
        return self._timeout_ms

    async def intercept(self, context: ExecutionContext, next: CallHandler) -> Any:
        task = asyncio.ensure_future(next.handle())
        try:
            done, _ = await asyncio.wait({task}, timeout=self._timeout_ms / 1000)
        except asyncio.CancelledError:
            task.cancel()
            raise

        if task in done:
            # Re-raises the inner error unchanged.
            return task.result()

        task.add_done_callback(_discard_late_outcome)
        if self._cancel_on_timeout:
            task.cancel()
        logger.warning(
            "{} {} exceeded {}ms deadline ({})",
            context.request.method,
            context.request.path,
            self._timeout_ms,
            "cancelled" if self._cancel_on_timeout else "left running",
        )
        raise RequestTimeoutError()


def _discard_late_outcome(task: asyncio.Future[Any]) -> None:
    if task.cancelled():
        return
    exc = task.exception()
    if exc is not None:
        logger.debug("discarded late failure after timeout: {!r}", exc)
    else:
        logger.debug("discarded late result after timeout")
