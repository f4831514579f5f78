import asyncio
from types import SimpleNamespace

import pytest

from routekit import GlobalComponents
from routekit.interceptors import (
    CACHE_KEY,
    NO_CACHE_KEY,
    CacheInterceptor,
    CallHandler,
    DEFAULT_TIMEOUT_MS,
    LoggingInterceptor,
    TimeoutInterceptor,
    TransformInterceptor,
)
from routekit.storage import InMemoryCacheStore
from routekit.storage import cache as cache_module
from routekit.telemetry import InMemoryTelemetry


class Tracing:
    def __init__(self, name: str, recorder) -> None:
        self.name = name
        self.recorder = recorder

    async def intercept(self, context, next):
        self.recorder(f"{self.name}.before")
        result = await next.handle()
        self.recorder(f"{self.name}.after")
        return result


class ShortCircuit:
    def __init__(self, value) -> None:
        self.value = value

    async def intercept(self, context, next):
        return self.value


class Boom(Exception):
    pass


@pytest.mark.asyncio
async def test_interceptors_nest_as_onion(single_route, call, recorder) -> None:
    pipeline = single_route(
        lambda: recorder("handler") or "done",
        interceptors=(Tracing("B", recorder),),
        components=GlobalComponents(interceptors=[Tracing("A", recorder)]),
    )

    result, _ = await call(pipeline, "GET", "/items")

    assert result.body == "done"
    assert recorder.events == ["A.before", "B.before", "handler", "B.after", "A.after"]


@pytest.mark.asyncio
async def test_short_circuit_skips_handler_and_inner_interceptors(single_route, call, recorder) -> None:
    pipeline = single_route(
        lambda: recorder("handler"),
        interceptors=(Tracing("outer", recorder), ShortCircuit({"cached": True}), Tracing("inner", recorder)),
    )

    result, writer = await call(pipeline, "GET", "/items")

    assert result.body == {"cached": True}
    assert recorder.events == ["outer.before", "outer.after"]
    assert len(writer.writes) == 1


@pytest.mark.asyncio
async def test_transform_wraps_payload(single_route, call) -> None:
    pipeline = single_route(lambda: [], interceptors=(TransformInterceptor(),))

    result, _ = await call(pipeline, "GET", "/items")

    assert result.body == {"data": []}
    assert result.payload == {"data": []}


@pytest.mark.asyncio
async def test_call_handler_is_single_use() -> None:
    calls = []

    async def invoke():
        calls.append(1)
        return "x"

    handler = CallHandler(invoke)
    assert await handler.handle() == "x"
    assert handler.invoked
    with pytest.raises(RuntimeError):
        handler.handle()
    assert calls == [1]


@pytest.mark.asyncio
async def test_interceptor_calling_next_twice_fails_the_call(single_route, call) -> None:
    class Twice:
        async def intercept(self, context, next):
            await next.handle()
            return await next.handle()

    calls = []
    pipeline = single_route(lambda: calls.append(1), interceptors=(Twice(),))

    result, _ = await call(pipeline, "GET", "/items")

    assert result.status_code == 500
    assert calls == [1]


@pytest.mark.asyncio
async def test_logging_interceptor_reemits_errors(single_route, call) -> None:
    telemetry = InMemoryTelemetry()

    def handler():
        raise Boom("kaput")

    pipeline = single_route(handler, interceptors=(LoggingInterceptor(telemetry=telemetry),))

    result, _ = await call(pipeline, "GET", "/items")

    assert isinstance(result.error, Boom)
    assert result.status_code == 500
    assert result.body["message"] == "Internal server error"
    assert "kaput" not in str(result.body)
    labels = (("handler", handler.__qualname__), ("outcome", "Boom"))
    assert len(telemetry.get_timing_values("handler_duration_seconds", labels)) == 1


def test_timeout_defaults_and_rejects_non_positive() -> None:
    assert DEFAULT_TIMEOUT_MS == 5000
    assert TimeoutInterceptor().timeout_ms == 5000
    with pytest.raises(ValueError):
        TimeoutInterceptor(0)


@pytest.mark.asyncio
async def test_timeout_passes_fast_results_through(single_route, call) -> None:
    async def handler():
        await asyncio.sleep(0)
        return "fast"

    pipeline = single_route(handler, interceptors=(TimeoutInterceptor(500),))

    result, _ = await call(pipeline, "GET", "/items")

    assert result.status_code == 200
    assert result.body == "fast"


@pytest.mark.asyncio
async def test_timeout_fails_hanging_call_and_discards_late_result(single_route, call) -> None:
    finished = asyncio.Event()

    async def handler():
        await asyncio.sleep(0.1)
        finished.set()
        return "late"

    pipeline = single_route(handler, interceptors=(TimeoutInterceptor(10, cancel_on_timeout=False),))

    result, writer = await call(pipeline, "GET", "/items")
    await asyncio.wait_for(finished.wait(), timeout=1)
    await asyncio.sleep(0)

    assert result.status_code == 408
    assert result.body["error"] == "Request Timeout"
    assert writer.writes == [(408, result.body, {})]


@pytest.mark.asyncio
async def test_timeout_cancels_inner_task_by_default(single_route, call) -> None:
    cancelled = asyncio.Event()

    async def handler():
        try:
            await asyncio.sleep(1)
        except asyncio.CancelledError:
            cancelled.set()
            raise

    pipeline = single_route(handler, interceptors=(TimeoutInterceptor(10),))

    result, _ = await call(pipeline, "GET", "/items")
    await asyncio.wait_for(cancelled.wait(), timeout=1)

    assert result.status_code == 408


@pytest.mark.asyncio
async def test_timeout_passes_inner_errors_through_unchanged(single_route, call) -> None:
    async def handler():
        raise Boom("inner")

    pipeline = single_route(handler, interceptors=(TimeoutInterceptor(500),))

    result, _ = await call(pipeline, "GET", "/items")

    assert isinstance(result.error, Boom)
    assert result.status_code == 500


@pytest.mark.asyncio
async def test_cache_hit_skips_handler(single_route, call) -> None:
    store = InMemoryCacheStore()
    store.set("GET /items?", ["cached"])
    calls = []
    pipeline = single_route(lambda: calls.append(1) or ["fresh"], interceptors=(CacheInterceptor(store),))

    result, _ = await call(pipeline, "GET", "/items")

    assert result.body == ["cached"]
    assert calls == []


@pytest.mark.asyncio
async def test_cache_miss_runs_handler_and_populates(single_route, call) -> None:
    store = InMemoryCacheStore()
    calls = []
    pipeline = single_route(
        lambda: calls.append(1) or ["fresh"],
        interceptors=(CacheInterceptor(store, populate=True),),
    )

    first, _ = await call(pipeline, "GET", "/items")
    second, _ = await call(pipeline, "GET", "/items")

    assert first.body == second.body == ["fresh"]
    assert calls == [1]
    assert len(store) == 1


@pytest.mark.asyncio
async def test_cache_miss_without_populate_leaves_store_empty(single_route, call) -> None:
    store = InMemoryCacheStore()
    pipeline = single_route(lambda: "fresh", interceptors=(CacheInterceptor(store),))

    await call(pipeline, "GET", "/items")

    assert len(store) == 0


@pytest.mark.asyncio
async def test_cache_respects_metadata_key_and_opt_out(single_route, call) -> None:
    store = InMemoryCacheStore()
    store.set("items-v1", "from-key")
    keyed = single_route(lambda: "fresh", interceptors=(CacheInterceptor(store),), metadata={CACHE_KEY: "items-v1"})
    opted_out = single_route(
        lambda: "fresh",
        interceptors=(CacheInterceptor(store),),
        metadata={CACHE_KEY: "items-v1", NO_CACHE_KEY: True},
    )

    hit, _ = await call(keyed, "GET", "/items")
    skipped, _ = await call(opted_out, "GET", "/items")

    assert hit.body == "from-key"
    assert skipped.body == "fresh"


@pytest.mark.asyncio
async def test_cache_ignores_non_get_methods(single_route, call) -> None:
    store = InMemoryCacheStore()
    store.set("POST /items?", "stale")
    pipeline = single_route(lambda: "created", method="POST", interceptors=(CacheInterceptor(store, populate=True),))

    result, _ = await call(pipeline, "POST", "/items")

    assert result.body == "created"
    assert len(store) == 1


def test_cache_store_expires_and_evicts(monkeypatch) -> None:
    now = [100.0]
    monkeypatch.setattr(cache_module, "time", SimpleNamespace(monotonic=lambda: now[0]))
    store = InMemoryCacheStore(max_entries=2)

    store.set("a", 1, ttl_seconds=5)
    store.set("b", 2)
    store.set("c", 3)

    assert store.get("a") is None
    assert store.get("c").value == 3
    now[0] += 10
    assert store.get("b").value == 2
