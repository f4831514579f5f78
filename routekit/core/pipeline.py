"""Request pipeline orchestrator.

Composes the stages around one route handler invocation::

    middleware → route match → guards → interceptors(before) → pipes
        → handler → interceptors(after) → response | exception boundary

Guards run ahead of the interceptor onion, so an interceptor short-circuit
(a cache hit, say) never skips admission checks.  Pipes run inside the onion,
so interceptors observe pipe failures the same way they observe handler
failures.

Usage::

    pipeline = RequestPipeline(
        registry,
        middleware=consumer.build(),
        components=GlobalComponents(interceptors=[LoggingInterceptor()]),
    )
    result = await pipeline.handle(HttpRequest(method="GET", path="/cats"), writer)
"""

from __future__ import annotations

import inspect
import time
from dataclasses import dataclass, field
from typing import Any

from loguru import logger

from routekit.config.schema import PipelineSettings
from routekit.core.context import ExecutionContext
from routekit.core.errors import ForbiddenError, NotFoundError, UnauthorizedError
from routekit.core.models import HttpRequest, PipelineResult
from routekit.core.ports import ExceptionFilter, Guard, Interceptor, PipeTransform, ResponseWriter
from routekit.core.registry import RouteBinding, RouteRegistry
from routekit.core.response import ResponseHandle
from routekit.filters.boundary import ExceptionBoundary
from routekit.guards.chain import GuardChain
from routekit.interceptors.chain import InterceptorChain
from routekit.middleware.chain import MiddlewareChain
from routekit.pipes.chain import resolve_arguments
from routekit.telemetry.base import TelemetryPort


@dataclass(slots=True)
class GlobalComponents:
    """Components applied to every route, ahead of controller and method ones."""

    guards: list[Guard] = field(default_factory=list)
    pipes: list[PipeTransform] = field(default_factory=list)
    interceptors: list[Interceptor] = field(default_factory=list)
    filters: list[ExceptionFilter] = field(default_factory=list)


@dataclass(frozen=True, slots=True)
class RoutePlan:
    """Chains resolved once per route at pipeline construction."""

    binding: RouteBinding
    guards: GuardChain
    interceptors: InterceptorChain
    pipes: tuple[PipeTransform, ...]
    filter_scopes: tuple[tuple[ExceptionFilter, ...], ...]


@dataclass(slots=True)
class _CallOutcome:
    route: str = "unmatched"
    payload: Any = None
    error: BaseException | None = None


class RequestPipeline:
    """Runs one request through middleware and the route stages."""

    __slots__ = ("_registry", "_middleware", "_components", "_settings", "_telemetry", "_plans")

    def __init__(
        self,
        registry: RouteRegistry,
        *,
        middleware: MiddlewareChain | None = None,
        components: GlobalComponents | None = None,
        settings: PipelineSettings | None = None,
        telemetry: TelemetryPort | None = None,
    ) -> None:
        self._registry = registry
        self._middleware = middleware or MiddlewareChain()
        self._components = components or GlobalComponents()
        self._settings = settings or PipelineSettings()
        self._telemetry = telemetry
        self._plans: dict[RouteBinding, RoutePlan] = {
            binding: self._plan(binding) for binding in registry
        }

    @property
    def registry(self) -> RouteRegistry:
        return self._registry

    @property
    def settings(self) -> PipelineSettings:
        return self._settings

    @property
    def middleware(self) -> MiddlewareChain:
        return self._middleware

    @property
    def components(self) -> GlobalComponents:
        return self._components

    def plan_for(self, binding: RouteBinding) -> RoutePlan:
        return self._plans[binding]

    def _plan(self, binding: RouteBinding) -> RoutePlan:
        g = self._components
        return RoutePlan(
            binding=binding,
            guards=GuardChain([*g.guards, *binding.guards]),
            interceptors=InterceptorChain([*g.interceptors, *binding.interceptors]),
            pipes=(*g.pipes, *binding.pipes),
            filter_scopes=(binding.method_filters, binding.controller_filters, tuple(g.filters)),
        )

    # ── Call entry point ─────────────────────────────────────────────

    async def handle(self, request: HttpRequest, writer: ResponseWriter) -> PipelineResult:
        """Process one request; the writer is invoked exactly once.

        Raises ``MiddlewareError`` when a middleware stage fails; every other
        failure is answered through the exception boundary.
        """
        response = ResponseHandle(writer)
        outcome = _CallOutcome()
        started = time.perf_counter()

        async def dispatch() -> None:
            await self._dispatch(request, response, outcome)

        await self._middleware.run(request, response, dispatch)

        status = response.status_code or 500
        self._record(request, outcome.route, status, time.perf_counter() - started)
        return PipelineResult(
            status_code=status,
            body=response.body,
            headers=response.headers,
            payload=outcome.payload if outcome.error is None else None,
            error=outcome.error,
        )

    async def _dispatch(self, request: HttpRequest, response: ResponseHandle, outcome: _CallOutcome) -> None:
        matched = self._registry.match(request.method, request.path)
        if matched is None:
            context = ExecutionContext(request, response)
            boundary = ExceptionBoundary([tuple(self._components.filters)], telemetry=self._telemetry)
            outcome.error = NotFoundError(f"Cannot {request.method} {request.path}", path=request.path)
            await boundary.handle(outcome.error, context)
            return

        binding, params = matched
        request.params = params
        plan = self._plans[binding]
        context = ExecutionContext(request, response, binding, binding.metadata)
        boundary = ExceptionBoundary(plan.filter_scopes, telemetry=self._telemetry)

        outcome.route = _route_label(binding)
        admitted = False
        try:
            await plan.guards.check(context)
            admitted = True
            payload = await plan.interceptors.run(context, lambda: self._invoke(plan, context))
        except Exception as exc:
            denied = not admitted and isinstance(exc, (ForbiddenError, UnauthorizedError))
            if denied and self._telemetry is not None:
                self._telemetry.incr("guard_denied_total", labels=(("route", outcome.route),))
            outcome.error = exc
            await boundary.handle(exc, context)
            return

        outcome.payload = payload
        response.write(binding.status_code, payload)

    async def _invoke(self, plan: RoutePlan, context: ExecutionContext) -> Any:
        args = await resolve_arguments(context, plan.binding.params, plan.pipes)
        result = plan.binding.handler(**args)
        if inspect.isawaitable(result):
            result = await result
        return result

    def _record(self, request: HttpRequest, route: str, status: int, elapsed: float) -> None:
        logger.debug("{} {} -> {} in {:.1f}ms", request.method, request.path, status, elapsed * 1000)
        if self._telemetry is None:
            return
        self._telemetry.incr("requests_total", labels=(("route", route), ("status", str(status))))
        self._telemetry.timing("request_duration_seconds", elapsed, labels=(("route", route),))

    def __repr__(self) -> str:
        return f"RequestPipeline(routes={len(self._registry)}, middleware={len(self._middleware)})"


def _route_label(binding: RouteBinding) -> str:
    return f"{binding.method} {binding.path}"
