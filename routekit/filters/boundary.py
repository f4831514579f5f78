"""Exception boundary: the single point where errors become responses.

One boundary exists per call.  It walks the filter scopes from most to least
specific (method, controller, global), lets the first filter whose
``catches`` matches handle the error, and falls back to the default filter
when nothing matches or the chosen filter fails to respond.  It never
re-raises.
"""

from __future__ import annotations

import inspect
from collections.abc import Sequence
from enum import StrEnum

from loguru import logger

from routekit.core.context import ExecutionContext
from routekit.core.errors import GENERIC_ERROR_MESSAGE, InternalServerError, StructuredError
from routekit.core.ports import ExceptionFilter
from routekit.telemetry.base import TelemetryPort


class BoundaryState(StrEnum):
    IDLE = "idle"
    ERROR_CAUGHT = "error_caught"
    RESPONSE_EMITTED = "response_emitted"


def filter_matches(exception_filter: ExceptionFilter, error: BaseException) -> bool:
    catches = tuple(getattr(exception_filter, "catches", ()) or ())
    if not catches:
        return True
    for target in catches:
        if isinstance(target, str):
            if isinstance(error, StructuredError) and error.kind == target:
                return True
        elif isinstance(error, target):
            return True
    return False


class DefaultExceptionFilter:
    """Fallback translation for anything no scoped filter handled.

    Structured errors keep their status and default body, except that 5xx
    messages are replaced by the generic one.  Everything else becomes a
    generic 500; the original exception is logged, never sent.
    """

    catches: tuple[type[BaseException] | str, ...] = ()

    def catch(self, error: BaseException, context: ExecutionContext) -> None:
        request = context.request
        if not isinstance(error, StructuredError):
            logger.opt(exception=error).error(
                "unhandled error in {} {} ({})", request.method, request.path, context.handler_name
            )
            error = InternalServerError(cause=error)
        body = error.to_body(request.path)
        if error.status_code >= 500 and error.response is None:
            # server-side messages stay in the log
            if error.message != GENERIC_ERROR_MESSAGE:
                logger.error("{} in {} {}: {}", error.kind, request.method, request.path, error.message)
            body["message"] = GENERIC_ERROR_MESSAGE
        context.response.write(error.status_code, body)


class ExceptionBoundary:
    """Per-call state machine ``IDLE -> ERROR_CAUGHT -> RESPONSE_EMITTED``."""

    __slots__ = ("_scopes", "_default", "_telemetry", "state", "handled_by")

    def __init__(
        self,
        scopes: Sequence[Sequence[ExceptionFilter]],
        *,
        default: ExceptionFilter | None = None,
        telemetry: TelemetryPort | None = None,
    ) -> None:
        self._scopes = tuple(tuple(scope) for scope in scopes)
        self._default = default or DefaultExceptionFilter()
        self._telemetry = telemetry
        self.state = BoundaryState.IDLE
        self.handled_by: ExceptionFilter | None = None

    def select(self, error: BaseException) -> ExceptionFilter | None:
        for scope in self._scopes:
            for exception_filter in scope:
                if filter_matches(exception_filter, error):
                    return exception_filter
        return None

    async def handle(self, error: BaseException, context: ExecutionContext) -> None:
        if self.state is not BoundaryState.IDLE:
            raise RuntimeError(f"exception boundary already in state {self.state}")
        self.state = BoundaryState.ERROR_CAUGHT

        if self._telemetry is not None:
            kind = error.kind if isinstance(error, StructuredError) else "InternalServerError"
            self._telemetry.incr("errors_total", labels=(("kind", kind),))

        chosen = self.select(error)
        if chosen is not None:
            try:
                await _maybe_await(chosen.catch(error, context))
                self.handled_by = chosen
            except Exception as filter_error:
                logger.opt(exception=filter_error).error("exception filter {} failed", type(chosen).__name__)
                if not context.response.sent:
                    error = InternalServerError(cause=filter_error)

        if not context.response.sent:
            if chosen is not None and self.handled_by is chosen:
                logger.warning("exception filter {} did not write a response", type(chosen).__name__)
            await _maybe_await(self._default.catch(error, context))
            self.handled_by = self._default

        self.state = BoundaryState.RESPONSE_EMITTED


async def _maybe_await(value: object) -> None:
    if inspect.isawaitable(value):
        await value
