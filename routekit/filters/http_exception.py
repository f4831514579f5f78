"""Minimal HTTP error body filter."""

from __future__ import annotations

from datetime import UTC, datetime

from routekit.core.context import ExecutionContext
from routekit.core.errors import StructuredError


class HttpExceptionFilter:
    """Respond to structured errors with ``{statusCode, timestamp, path}``."""

    def __init__(self, *catches: type[BaseException] | str) -> None:
        self.catches: tuple[type[BaseException] | str, ...] = catches or (StructuredError,)

    def catch(self, error: BaseException, context: ExecutionContext) -> None:
        status = error.status_code if isinstance(error, StructuredError) else 500
        context.response.write(
            status,
            {
                "statusCode": status,
                "timestamp": datetime.now(UTC).isoformat(),
                "path": context.request.path,
            },
        )
