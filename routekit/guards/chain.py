"""Guard chain runner."""

from __future__ import annotations

import inspect
from collections.abc import Sequence

from loguru import logger

from routekit.core.context import ExecutionContext
from routekit.core.errors import ForbiddenError
from routekit.core.ports import Guard

FORBIDDEN_MESSAGE = "Forbidden resource"


class GuardChain:
    """Ordered admission predicates; stops at the first ``False``.

    A guard may also raise a ``StructuredError`` of its own (for example
    ``UnauthorizedError``) to replace the default forbidden outcome.
    """

    __slots__ = ("_guards",)

    def __init__(self, guards: Sequence[Guard]) -> None:
        self._guards = tuple(guards)

    async def check(self, context: ExecutionContext) -> None:
        for guard in self._guards:
            allowed = guard.can_activate(context)
            if inspect.isawaitable(allowed):
                allowed = await allowed
            if not allowed:
                logger.debug(
                    "guard {} denied {} {}",
                    type(guard).__name__,
                    context.request.method,
                    context.request.path,
                )
                raise ForbiddenError(FORBIDDEN_MESSAGE)

    def __len__(self) -> int:
        return len(self._guards)

    def __repr__(self) -> str:
        names = [type(g).__name__ for g in self._guards]
        return f"GuardChain({' → '.join(names)})"
