"""Per-parameter pipe chain and handler argument resolution."""

from __future__ import annotations

import inspect
from collections.abc import Sequence
from typing import Any

from routekit.core.context import ExecutionContext
from routekit.core.models import ArgumentMetadata, ParamSpec
from routekit.core.ports import PipeTransform


class PipeChain:
    """Ordered transforms applied to one parameter value."""

    __slots__ = ("_pipes",)

    def __init__(self, pipes: Sequence[PipeTransform]) -> None:
        self._pipes = tuple(pipes)

    async def apply(self, value: Any, metadata: ArgumentMetadata) -> Any:
        for pipe in self._pipes:
            value = pipe.transform(value, metadata)
            if inspect.isawaitable(value):
                value = await value
        return value

    def __len__(self) -> int:
        return len(self._pipes)


def extract_raw(context: ExecutionContext, spec: ParamSpec) -> Any:
    """Pull the raw value for ``spec`` out of the request."""
    request = context.request
    key = spec.key
    match spec.source:
        case "body":
            if key is None:
                return request.body
            if isinstance(request.body, dict):
                return request.body.get(key)
            return None
        case "query":
            return request.query.get(key or spec.name)
        case "param":
            return request.params.get(key or spec.name)
        case "header":
            return request.header(key or spec.name)
        case "custom":
            if spec.factory is None:
                raise ValueError(f"custom parameter {spec.name!r} requires a factory")
            return spec.factory(context)
    raise ValueError(f"unknown parameter source {spec.source!r}")


async def resolve_arguments(
    context: ExecutionContext,
    params: Sequence[ParamSpec],
    pipes: Sequence[PipeTransform] = (),
) -> dict[str, Any]:
    """Build handler keyword arguments.

    Scope pipes (global, controller, method) run first for every parameter,
    then the parameter's own pipes.
    """
    args: dict[str, Any] = {}
    for spec in params:
        chain = PipeChain((*pipes, *spec.pipes))
        args[spec.name] = await chain.apply(extract_raw(context, spec), spec.argument_metadata())
    return args
