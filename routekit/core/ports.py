"""Port interfaces for pipeline stages and their collaborators."""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Mapping
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from routekit.core.context import ExecutionContext
    from routekit.core.models import ArgumentMetadata, HttpRequest
    from routekit.core.response import ResponseHandle
    from routekit.interceptors.chain import CallHandler


class ResponseWriter(Protocol):
    """Transport response writer; called exactly once per call."""

    def write(self, status_code: int, body: Any, headers: Mapping[str, str] | None = None) -> None:
        """Emit status, JSON-serializable body and headers to the client."""


MiddlewareNext = Callable[[], Awaitable[None]]
"""Continuation passed to middleware; resolves when downstream stages finish."""


@runtime_checkable
class Middleware(Protocol):
    """Route-agnostic stage over the raw request and response.

    Implementations either ``await next()`` to proceed or write the response
    directly to short-circuit.
    """

    async def __call__(self, request: HttpRequest, response: ResponseHandle, next: MiddlewareNext) -> None: ...


@runtime_checkable
class Guard(Protocol):
    """Admission predicate evaluated before parameter processing."""

    def can_activate(self, context: ExecutionContext) -> bool | Awaitable[bool]: ...


@runtime_checkable
class PipeTransform(Protocol):
    """Per-parameter transform or validation stage."""

    def transform(self, value: Any, metadata: ArgumentMetadata) -> Any: ...


@runtime_checkable
class Interceptor(Protocol):
    """Onion wrapper around the pipe and handler stages."""

    async def intercept(self, context: ExecutionContext, next: CallHandler) -> Any: ...


@runtime_checkable
class ExceptionFilter(Protocol):
    """Scoped error-to-response translator.

    ``catches`` lists exception classes and/or error kinds; an empty tuple
    catches everything.
    """

    catches: tuple[type[BaseException] | str, ...]

    def catch(self, error: BaseException, context: ExecutionContext) -> None | Awaitable[None]: ...


class CacheEntry(Protocol):
    value: Any


class CacheStore(Protocol):
    """Key/value store shared by concurrent calls; operations are atomic per key."""

    def get(self, key: str) -> CacheEntry | None:
        """Return the entry for ``key`` or ``None`` on a miss."""

    def set(self, key: str, value: Any, ttl_seconds: float | None = None) -> None:
        """Store ``value`` under ``key``."""

    def delete(self, key: str) -> None:
        """Drop ``key`` if present."""
