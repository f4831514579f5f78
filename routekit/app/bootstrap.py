"""Pipeline bootstrap: one configured ``RequestPipeline`` from settings."""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING

from loguru import logger

from routekit.config.schema import PipelineSettings
from routekit.core.pipeline import GlobalComponents, RequestPipeline
from routekit.interceptors import CacheInterceptor, LoggingInterceptor, TimeoutInterceptor, TransformInterceptor
from routekit.middleware import LoggerMiddleware, MiddlewareChain, MiddlewareConsumer
from routekit.storage import InMemoryCacheStore

if TYPE_CHECKING:
    from routekit.core.ports import CacheStore, ExceptionFilter, Guard, Interceptor, PipeTransform
    from routekit.core.registry import RouteRegistry
    from routekit.telemetry.base import TelemetryPort


def default_interceptors(
    settings: PipelineSettings,
    *,
    telemetry: TelemetryPort | None = None,
    cache_store: CacheStore | None = None,
) -> list[Interceptor]:
    """Global interceptors implied by ``settings``, outermost first.

    Logging sees the whole call, the envelope wraps whatever comes back
    (cached or fresh), and the deadline covers the cache lookup and handler.
    """
    interceptors: list[Interceptor] = []
    if settings.log_requests:
        interceptors.append(LoggingInterceptor(telemetry=telemetry))
    if settings.transform_responses:
        interceptors.append(TransformInterceptor())
    interceptors.append(TimeoutInterceptor(settings.timeout_ms, cancel_on_timeout=settings.cancel_on_timeout))
    if settings.cache.enabled:
        store = cache_store or InMemoryCacheStore(
            max_entries=settings.cache.max_entries,
            default_ttl_seconds=settings.cache.ttl_seconds,
        )
        interceptors.append(CacheInterceptor(store, populate=settings.cache.populate))
    return interceptors


def build_pipeline(
    registry: RouteRegistry,
    settings: PipelineSettings | None = None,
    *,
    middleware: MiddlewareChain | MiddlewareConsumer | None = None,
    guards: Sequence[Guard] = (),
    pipes: Sequence[PipeTransform] = (),
    interceptors: Sequence[Interceptor] | None = None,
    filters: Sequence[ExceptionFilter] = (),
    telemetry: TelemetryPort | None = None,
    cache_store: CacheStore | None = None,
) -> RequestPipeline:
    """Wire a pipeline from explicit components.

    ``interceptors=None`` installs the settings-driven defaults; pass a list
    (possibly empty) to take full control.  Without explicit middleware the
    request logger is applied to every route when ``log_requests`` is set.
    """
    settings = settings or PipelineSettings()

    if isinstance(middleware, MiddlewareConsumer):
        chain = middleware.build()
    elif middleware is not None:
        chain = middleware
    elif settings.log_requests:
        chain = MiddlewareChain([LoggerMiddleware()])
    else:
        chain = MiddlewareChain()

    if interceptors is None:
        interceptors = default_interceptors(settings, telemetry=telemetry, cache_store=cache_store)

    components = GlobalComponents(
        guards=list(guards),
        pipes=list(pipes),
        interceptors=list(interceptors),
        filters=list(filters),
    )
    pipeline = RequestPipeline(
        registry,
        middleware=chain,
        components=components,
        settings=settings,
        telemetry=telemetry,
    )
    logger.info(
        "pipeline ready: {} route(s), {} middleware, {} global interceptor(s), timeout={}ms",
        len(registry),
        len(chain),
        len(components.interceptors),
        settings.timeout_ms,
    )
    return pipeline
