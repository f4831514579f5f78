"""Explicit route registration.

Controllers and routes are declared as plain data at startup; the registry
resolves each one into a ``RouteBinding`` that carries the merged
controller/method component lists and the metadata bag.  Nothing is looked
up through reflection at call time.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator, Mapping
from dataclasses import dataclass, field
from typing import Any

from loguru import logger

from routekit.core.context import Metadata
from routekit.core.models import ParamSpec


@dataclass(frozen=True, slots=True, kw_only=True)
class RouteDefinition:
    """One handler and the components declared on it."""

    method: str
    path: str
    handler: Callable[..., Any]
    name: str | None = None
    params: tuple[ParamSpec, ...] = ()
    guards: tuple[Any, ...] = ()
    pipes: tuple[Any, ...] = ()
    interceptors: tuple[Any, ...] = ()
    filters: tuple[Any, ...] = ()
    metadata: Mapping[str, Any] = field(default_factory=dict)
    status_code: int | None = None


@dataclass(frozen=True, slots=True, kw_only=True)
class ControllerDefinition:
    """A group of routes sharing a path prefix and components."""

    name: str
    prefix: str = ""
    routes: tuple[RouteDefinition, ...] = ()
    guards: tuple[Any, ...] = ()
    pipes: tuple[Any, ...] = ()
    interceptors: tuple[Any, ...] = ()
    filters: tuple[Any, ...] = ()
    metadata: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True, slots=True, kw_only=True)
class RouteBinding:
    """Resolved route: full path, merged components, layered metadata."""

    method: str
    path: str
    handler: Callable[..., Any]
    name: str
    controller_name: str | None
    params: tuple[ParamSpec, ...]
    guards: tuple[Any, ...]
    pipes: tuple[Any, ...]
    interceptors: tuple[Any, ...]
    method_filters: tuple[Any, ...]
    controller_filters: tuple[Any, ...]
    metadata: Metadata
    status_code: int

    @property
    def segments(self) -> tuple[str, ...]:
        return split_path(self.path)

    def match(self, method: str, path: str) -> dict[str, str] | None:
        """Return path parameters when ``method``/``path`` hit this route."""
        if self.method not in ("*", method.upper()):
            return None
        return match_segments(self.segments, split_path(path))


def split_path(path: str) -> tuple[str, ...]:
    return tuple(part for part in path.strip("/").split("/") if part)


def join_path(*parts: str) -> str:
    segments = [seg for part in parts for seg in split_path(part)]
    return "/" + "/".join(segments)


def match_segments(pattern: tuple[str, ...], actual: tuple[str, ...]) -> dict[str, str] | None:
    """Match ``:name`` placeholders and a trailing ``*`` wildcard."""
    params: dict[str, str] = {}
    for index, seg in enumerate(pattern):
        if seg == "*":
            return params
        if index >= len(actual):
            return None
        if seg.startswith(":"):
            params[seg[1:]] = actual[index]
        elif seg != actual[index]:
            return None
    if len(actual) != len(pattern):
        return None
    return params


class RouteRegistry:
    """Ordered collection of route bindings keyed by handler identity."""

    __slots__ = ("_bindings", "_by_handler")

    def __init__(self, controllers: list[ControllerDefinition] | None = None) -> None:
        self._bindings: list[RouteBinding] = []
        self._by_handler: dict[Callable[..., Any], RouteBinding] = {}
        for controller in controllers or []:
            self.add_controller(controller)

    def add_controller(self, controller: ControllerDefinition) -> list[RouteBinding]:
        return [self._bind(route, controller) for route in controller.routes]

    def add_route(self, route: RouteDefinition) -> RouteBinding:
        return self._bind(route, None)

    def _bind(self, route: RouteDefinition, controller: ControllerDefinition | None) -> RouteBinding:
        method = route.method.upper()
        prefix = controller.prefix if controller is not None else ""
        path = join_path(prefix, route.path)
        for existing in self._bindings:
            if existing.method == method and existing.path == path:
                raise ValueError(f"duplicate route {method} {path}")

        binding = RouteBinding(
            method=method,
            path=path,
            handler=route.handler,
            name=route.name or getattr(route.handler, "__qualname__", repr(route.handler)),
            controller_name=controller.name if controller is not None else None,
            params=tuple(route.params),
            guards=(*(controller.guards if controller else ()), *route.guards),
            pipes=(*(controller.pipes if controller else ()), *route.pipes),
            interceptors=(*(controller.interceptors if controller else ()), *route.interceptors),
            method_filters=tuple(route.filters),
            controller_filters=tuple(controller.filters) if controller else (),
            metadata=Metadata(route.metadata, controller.metadata if controller else {}),
            status_code=route.status_code or (201 if method == "POST" else 200),
        )
        self._bindings.append(binding)
        self._by_handler[route.handler] = binding
        logger.debug("route registered: {} {} -> {}", binding.method, binding.path, binding.name)
        return binding

    def match(self, method: str, path: str) -> tuple[RouteBinding, dict[str, str]] | None:
        """First registered route matching the request wins."""
        for binding in self._bindings:
            params = binding.match(method, path)
            if params is not None:
                return binding, params
        return None

    def binding_for(self, handler: Callable[..., Any]) -> RouteBinding | None:
        return self._by_handler.get(handler)

    def get(self, key: str, handler: Callable[..., Any]) -> Any:
        """Metadata lookup by handler identity; ``None`` when absent."""
        binding = self._by_handler.get(handler)
        if binding is None:
            return None
        return binding.metadata.get(key)

    def __iter__(self) -> Iterator[RouteBinding]:
        return iter(self._bindings)

    def __len__(self) -> int:
        return len(self._bindings)
