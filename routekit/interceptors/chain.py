"""Interceptor onion composition.

Interceptors are composed outermost-first: the first registered one sees the
call before everybody else and the result after everybody else.  Each one
receives a single-use ``CallHandler`` standing for "run the rest of the
chain".  Awaiting ``next.handle()`` proceeds; returning without calling it
short-circuits the handler and every interceptor nested further in.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Sequence
from typing import Any

from routekit.core.context import ExecutionContext
from routekit.core.ports import Interceptor

type Invoke = Callable[[], Awaitable[Any]]


class CallHandler:
    """Single-use token that runs the remaining inner stages."""

    __slots__ = ("_invoke", "_invoked")

    def __init__(self, invoke: Invoke) -> None:
        self._invoke = invoke
        self._invoked = False

    @property
    def invoked(self) -> bool:
        return self._invoked

    def handle(self) -> Awaitable[Any]:
        if self._invoked:
            raise RuntimeError("CallHandler.handle() may only be invoked once per call")
        self._invoked = True
        return self._invoke()


class InterceptorChain:
    """Ordered interceptors wrapped around an innermost invocation."""

    __slots__ = ("_interceptors",)

    def __init__(self, interceptors: Sequence[Interceptor]) -> None:
        self._interceptors = tuple(interceptors)

    async def run(self, context: ExecutionContext, invoke: Invoke) -> Any:
        return await self._execute(context, 0, invoke)

    async def _execute(self, context: ExecutionContext, index: int, invoke: Invoke) -> Any:
        if index >= len(self._interceptors):
            return await invoke()
        interceptor = self._interceptors[index]
        call_handler = CallHandler(lambda: self._execute(context, index + 1, invoke))
        return await interceptor.intercept(context, call_handler)

    def __len__(self) -> int:
        return len(self._interceptors)

    def __repr__(self) -> str:
        names = [type(i).__name__ for i in self._interceptors]
        return f"InterceptorChain({' → '.join(names)})"
