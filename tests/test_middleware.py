import pytest

from routekit import ParamSpec, Principal
from routekit.core.errors import MiddlewareError
from routekit.core.models import HttpRequest
from routekit.middleware import (
    REQUEST_ID_HEADER,
    BearerAuthMiddleware,
    MiddlewareChain,
    MiddlewareConsumer,
    RequestIdMiddleware,
    RouteSpec,
)


def tracing(name: str, recorder):
    async def middleware(request, response, next):
        recorder(f"{name}.in")
        await next()
        recorder(f"{name}.out")

    middleware.__name__ = name
    return middleware


@pytest.mark.asyncio
async def test_middleware_runs_in_registration_order(single_route, call, recorder) -> None:
    chain = MiddlewareChain([tracing("first", recorder), tracing("second", recorder)])
    pipeline = single_route(lambda: recorder("handler") or "ok", middleware=chain)

    result, _ = await call(pipeline, "GET", "/items")

    assert result.body == "ok"
    assert recorder.events == ["first.in", "second.in", "handler", "second.out", "first.out"]


@pytest.mark.asyncio
async def test_middleware_can_short_circuit(single_route, call, recorder) -> None:
    async def gate(request, response, next):
        response.write(503, {"message": "maintenance"})

    chain = MiddlewareChain([gate, tracing("later", recorder)])
    pipeline = single_route(lambda: recorder("handler"), middleware=chain)

    result, writer = await call(pipeline, "GET", "/items")

    assert result.status_code == 503
    assert writer.writes == [(503, {"message": "maintenance"}, {})]
    assert recorder.events == []


@pytest.mark.asyncio
async def test_middleware_error_escapes_without_writing(single_route, call, recorder) -> None:
    async def broken(request, response, next):
        raise ValueError("bad header")

    pipeline = single_route(lambda: recorder("handler"), middleware=MiddlewareChain([broken]))

    with pytest.raises(MiddlewareError) as excinfo:
        await call(pipeline, "GET", "/items")

    assert excinfo.value.stage == "broken"
    assert isinstance(excinfo.value.__cause__, ValueError)
    assert recorder.events == []


@pytest.mark.asyncio
async def test_stage_that_neither_continues_nor_writes_fails(single_route, call) -> None:
    async def stuck(request, response, next):
        return None

    pipeline = single_route(lambda: "ok", middleware=MiddlewareChain([stuck]))

    with pytest.raises(MiddlewareError, match="neither called next"):
        await call(pipeline, "GET", "/items")


@pytest.mark.asyncio
async def test_request_id_is_visible_downstream(single_route, call) -> None:
    seen = []
    pipeline = single_route(
        lambda: seen.append(1) or "ok",
        middleware=MiddlewareChain([RequestIdMiddleware()]),
    )

    fresh, _ = await call(pipeline, "GET", "/items")
    reused, writer = await call(pipeline, "GET", "/items", headers={REQUEST_ID_HEADER: "abc-123"})
    replaced, _ = await call(pipeline, "GET", "/items", headers={REQUEST_ID_HEADER: "bad id!"})

    assert len(fresh.headers[REQUEST_ID_HEADER]) == 32
    assert reused.headers[REQUEST_ID_HEADER] == "abc-123"
    assert writer.last[2] == {REQUEST_ID_HEADER: "abc-123"}
    assert replaced.headers[REQUEST_ID_HEADER] != "bad id!"


@pytest.mark.asyncio
async def test_request_mutation_reaches_handler(single_route, call) -> None:
    async def tag(request, response, next):
        request.state["tenant"] = "acme"
        await next()

    pipeline = single_route(
        lambda tenant: tenant,
        params=(ParamSpec(name="tenant", source="custom", factory=lambda ctx: ctx.request.state["tenant"]),),
        middleware=MiddlewareChain([tag]),
    )

    result, _ = await call(pipeline, "GET", "/items")

    assert result.body == "acme"


@pytest.mark.asyncio
async def test_consumer_scopes_middleware_to_routes(single_route, call, recorder) -> None:
    consumer = MiddlewareConsumer()
    consumer.apply(tracing("scoped", recorder)).for_routes(RouteSpec("items", method="GET"))
    consumer.apply(tracing("all", recorder)).exclude(RouteSpec("items/:id")).for_routes()
    pipeline = single_route(lambda id: id, path="/items/:id", middleware=consumer.build())

    await call(pipeline, "GET", "/items/1")
    assert recorder.events == []

    chain = consumer.build()
    pipeline = single_route(lambda: "ok", middleware=chain)
    await call(pipeline, "GET", "/items")
    assert recorder.events == ["scoped.in", "all.in", "all.out", "scoped.out"]


def test_route_spec_wildcard_shorthand() -> None:
    spec = RouteSpec("cats*")

    assert spec.matches(HttpRequest(method="GET", path="/cats"))
    assert spec.matches(HttpRequest(method="POST", path="/cats/1/toys"))
    assert not spec.matches(HttpRequest(method="GET", path="/dogs"))
    assert not RouteSpec("cats", method="POST").matches(HttpRequest(method="GET", path="/cats"))


@pytest.mark.asyncio
async def test_bearer_auth_resolves_principal(single_route, call) -> None:
    alice = Principal(id="alice", roles=frozenset({"admin"}))
    seen = []
    pipeline = single_route(
        lambda user: seen.append(user) or "ok",
        params=(ParamSpec(name="user", source="custom", factory=lambda ctx: ctx.request.user),),
        middleware=MiddlewareChain([BearerAuthMiddleware({"secret": alice})]),
    )

    await call(pipeline, "GET", "/items", headers={"Authorization": "Bearer secret"})
    await call(pipeline, "GET", "/items", headers={"Authorization": "Bearer wrong"})
    await call(pipeline, "GET", "/items", headers={"Authorization": "Basic secret"})

    assert seen == [alice, None, None]
