from __future__ import annotations

from collections.abc import Callable
from typing import Any

import pytest

from routekit import (
    ControllerDefinition,
    GlobalComponents,
    HttpRequest,
    ParamSpec,
    PipelineResult,
    RecordingWriter,
    RequestPipeline,
    RouteDefinition,
    RouteRegistry,
)
from routekit.middleware import MiddlewareChain


class Recorder:
    """Side channel for observing stage order."""

    def __init__(self) -> None:
        self.events: list[str] = []

    def __call__(self, event: str) -> None:
        self.events.append(event)


@pytest.fixture
def recorder() -> Recorder:
    return Recorder()


@pytest.fixture
def single_route() -> Callable[..., RequestPipeline]:
    """Factory for a pipeline serving one route, with no implicit components."""

    def _build(
        handler: Callable[..., Any],
        *,
        method: str = "GET",
        path: str = "/items",
        params: tuple[ParamSpec, ...] = (),
        guards: tuple[Any, ...] = (),
        pipes: tuple[Any, ...] = (),
        interceptors: tuple[Any, ...] = (),
        filters: tuple[Any, ...] = (),
        metadata: dict[str, Any] | None = None,
        controller: dict[str, Any] | None = None,
        components: GlobalComponents | None = None,
        middleware: MiddlewareChain | None = None,
        telemetry: Any = None,
    ) -> RequestPipeline:
        route = RouteDefinition(
            method=method,
            path=path,
            handler=handler,
            params=params,
            guards=guards,
            pipes=pipes,
            interceptors=interceptors,
            filters=filters,
            metadata=metadata or {},
        )
        registry = RouteRegistry([ControllerDefinition(name="TestController", routes=(route,), **(controller or {}))])
        return RequestPipeline(registry, components=components, middleware=middleware, telemetry=telemetry)

    return _build


@pytest.fixture
def call() -> Callable[..., Any]:
    async def _call(
        pipeline: RequestPipeline,
        method: str,
        path: str,
        **kwargs: Any,
    ) -> tuple[PipelineResult, RecordingWriter]:
        writer = RecordingWriter()
        result = await pipeline.handle(HttpRequest(method=method, path=path, **kwargs), writer)
        return result, writer

    return _call
