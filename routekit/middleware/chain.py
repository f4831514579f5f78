"""Middleware chain over the raw request and response.

Each stage calls ``await next()`` to pass through, or writes the response
itself to short-circuit.  The runner is the outermost layer of the pipeline
and sits outside the exception boundary: a stage that raises aborts the call
with ``MiddlewareError``.

Usage::

    consumer = MiddlewareConsumer()
    consumer.apply(LoggerMiddleware()).for_routes(RouteSpec("cats", method="GET"))
    consumer.apply(RequestIdMiddleware())
    chain = consumer.build()
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass

from routekit.core.errors import MiddlewareError
from routekit.core.models import HttpRequest
from routekit.core.ports import Middleware
from routekit.core.registry import match_segments, split_path
from routekit.core.response import ResponseHandle


@dataclass(frozen=True, slots=True)
class RouteSpec:
    """Path pattern plus method used to scope middleware."""

    path: str
    method: str = "*"

    def matches(self, request: HttpRequest) -> bool:
        if self.method not in ("*", request.method):
            return False
        return match_segments(_pattern(self.path), split_path(request.path)) is not None


def _pattern(path: str) -> tuple[str, ...]:
    # "cats*" is accepted as shorthand for "cats/*"
    segments = list(split_path(path))
    if segments and segments[-1] != "*" and segments[-1].endswith("*"):
        segments[-1] = segments[-1][:-1]
        segments.append("*")
    return tuple(segments)


@dataclass(frozen=True, slots=True)
class MiddlewareBinding:
    """One middleware and the routes it applies to (all routes when empty)."""

    middleware: Middleware
    routes: tuple[RouteSpec, ...] = ()
    exclude: tuple[RouteSpec, ...] = ()

    def applies_to(self, request: HttpRequest) -> bool:
        if any(spec.matches(request) for spec in self.exclude):
            return False
        if not self.routes:
            return True
        return any(spec.matches(request) for spec in self.routes)


class _ApplyBuilder:
    """Fluent scope builder returned by ``MiddlewareConsumer.apply``."""

    def __init__(self, consumer: MiddlewareConsumer, middleware: tuple[Middleware, ...]) -> None:
        self._consumer = consumer
        self._middleware = middleware
        self._exclude: tuple[RouteSpec, ...] = ()
        self._indices = consumer._add(middleware)

    def exclude(self, *routes: RouteSpec | str) -> _ApplyBuilder:
        self._exclude = tuple(_spec(r) for r in routes)
        self._rebind(())
        return self

    def for_routes(self, *routes: RouteSpec | str) -> MiddlewareConsumer:
        self._rebind(tuple(_spec(r) for r in routes))
        return self._consumer

    def _rebind(self, routes: tuple[RouteSpec, ...]) -> None:
        for index, mw in zip(self._indices, self._middleware, strict=True):
            self._consumer._bindings[index] = MiddlewareBinding(mw, routes, self._exclude)


def _spec(route: RouteSpec | str) -> RouteSpec:
    return route if isinstance(route, RouteSpec) else RouteSpec(route)


class MiddlewareConsumer:
    """Collects middleware registrations in order."""

    def __init__(self) -> None:
        self._bindings: list[MiddlewareBinding] = []

    def apply(self, *middleware: Middleware) -> _ApplyBuilder:
        if not middleware:
            raise ValueError("apply() requires at least one middleware")
        return _ApplyBuilder(self, middleware)

    def _add(self, middleware: tuple[Middleware, ...]) -> list[int]:
        start = len(self._bindings)
        self._bindings.extend(MiddlewareBinding(mw) for mw in middleware)
        return list(range(start, len(self._bindings)))

    def build(self) -> MiddlewareChain:
        return MiddlewareChain(self._bindings)


class MiddlewareChain:
    """Ordered middleware in front of a terminal stage."""

    __slots__ = ("_bindings",)

    def __init__(self, bindings: Sequence[MiddlewareBinding | Middleware] = ()) -> None:
        self._bindings = tuple(b if isinstance(b, MiddlewareBinding) else MiddlewareBinding(b) for b in bindings)

    async def run(
        self,
        request: HttpRequest,
        response: ResponseHandle,
        terminal: Callable[[], Awaitable[None]],
    ) -> None:
        """Run applicable stages, then ``terminal`` unless a stage short-circuits."""
        layers = [b.middleware for b in self._bindings if b.applies_to(request)]
        await self._execute(layers, 0, request, response, terminal)
        if not response.sent:
            raise MiddlewareError("chain", "call ended without a response")

    async def _execute(
        self,
        layers: list[Middleware],
        index: int,
        request: HttpRequest,
        response: ResponseHandle,
        terminal: Callable[[], Awaitable[None]],
    ) -> None:
        if response.sent:
            return
        if index >= len(layers):
            await terminal()
            return

        layer = layers[index]
        name = _name(layer)
        called = False

        async def next() -> None:
            nonlocal called
            if called:
                raise RuntimeError(f"middleware {name} called next() more than once")
            called = True
            await self._execute(layers, index + 1, request, response, terminal)

        try:
            await layer(request, response, next)
        except MiddlewareError:
            raise
        except Exception as exc:
            raise MiddlewareError(name, f"{type(exc).__name__}: {exc}", cause=exc) from exc

        if not called and not response.sent:
            raise MiddlewareError(name, "neither called next() nor wrote a response")

    def __len__(self) -> int:
        return len(self._bindings)

    def __repr__(self) -> str:
        names = [_name(b.middleware) for b in self._bindings]
        return f"MiddlewareChain({' → '.join(names)})"


def _name(layer: object) -> str:
    return getattr(layer, "__name__", None) or type(layer).__name__
