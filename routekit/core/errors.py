"""Structured error taxonomy shared by every pipeline stage.

Errors are raised at the point of failure (guard, pipe, handler or
interceptor), travel unchanged through the interceptor onion and are
consumed once by the exception boundary, which turns them into a response.
"""

from __future__ import annotations

from datetime import UTC, datetime
from enum import StrEnum
from typing import Any


class ErrorKind(StrEnum):
    """Built-in error categories."""

    BAD_REQUEST = "BadRequest"
    UNAUTHORIZED = "Unauthorized"
    FORBIDDEN = "Forbidden"
    NOT_FOUND = "NotFound"
    NOT_ACCEPTABLE = "NotAcceptable"
    REQUEST_TIMEOUT = "RequestTimeout"
    INTERNAL_SERVER_ERROR = "InternalServerError"


_STATUS_BY_KIND: dict[str, int] = {
    ErrorKind.BAD_REQUEST: 400,
    ErrorKind.UNAUTHORIZED: 401,
    ErrorKind.FORBIDDEN: 403,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.NOT_ACCEPTABLE: 406,
    ErrorKind.REQUEST_TIMEOUT: 408,
    ErrorKind.INTERNAL_SERVER_ERROR: 500,
}

_PHRASE_BY_KIND: dict[str, str] = {
    ErrorKind.BAD_REQUEST: "Bad Request",
    ErrorKind.UNAUTHORIZED: "Unauthorized",
    ErrorKind.FORBIDDEN: "Forbidden",
    ErrorKind.NOT_FOUND: "Not Found",
    ErrorKind.NOT_ACCEPTABLE: "Not Acceptable",
    ErrorKind.REQUEST_TIMEOUT: "Request Timeout",
    ErrorKind.INTERNAL_SERVER_ERROR: "Internal Server Error",
}

GENERIC_ERROR_MESSAGE = "Internal server error"


class StructuredError(Exception):
    """Uniform error carrying kind, HTTP status, message and optional cause.

    Application code may declare its own kinds by passing an arbitrary
    ``kind`` string together with an explicit ``status_code``.  A custom
    ``response`` mapping replaces the default body, mirroring how an
    ``HttpException`` can be built from an object payload.
    """

    default_kind: str = ErrorKind.INTERNAL_SERVER_ERROR

    def __init__(
        self,
        message: str | None = None,
        *,
        kind: str | None = None,
        status_code: int | None = None,
        cause: BaseException | None = None,
        response: dict[str, Any] | None = None,
        path: str | None = None,
    ) -> None:
        self.kind = str(kind or self.default_kind)
        if status_code is None:
            status_code = _STATUS_BY_KIND.get(self.kind)
        if status_code is None:
            raise ValueError(f"status_code is required for custom error kind {self.kind!r}")
        self.status_code = int(status_code)
        self.message = message or _PHRASE_BY_KIND.get(self.kind, self.kind)
        self.cause = cause
        self.response = dict(response) if response is not None else None
        self.timestamp = datetime.now(UTC)
        self.path = path
        super().__init__(self.message)
        if cause is not None:
            self.__cause__ = cause

    @property
    def phrase(self) -> str:
        return _PHRASE_BY_KIND.get(self.kind, self.kind)

    def to_body(self, path: str | None = None) -> dict[str, Any]:
        """Default JSON body; never includes ``cause``."""
        if self.response is not None:
            return dict(self.response)
        return {
            "statusCode": self.status_code,
            "error": self.phrase,
            "message": self.message,
            "timestamp": self.timestamp.isoformat(),
            "path": path if path is not None else self.path,
        }

    def __repr__(self) -> str:
        return f"{type(self).__name__}(kind={self.kind!r}, status_code={self.status_code}, message={self.message!r})"


class BadRequestError(StructuredError):
    """Pipe validation or transform failure."""

    default_kind = ErrorKind.BAD_REQUEST

    def __init__(
        self,
        message: str | None = None,
        *,
        violations: tuple[str, ...] | list[str] = (),
        **kwargs: Any,
    ) -> None:
        super().__init__(message, **kwargs)
        self.violations = tuple(violations)

    def to_body(self, path: str | None = None) -> dict[str, Any]:
        body = super().to_body(path)
        if self.response is None and self.violations:
            body["violations"] = list(self.violations)
        return body


class UnauthorizedError(StructuredError):
    default_kind = ErrorKind.UNAUTHORIZED


class ForbiddenError(StructuredError):
    default_kind = ErrorKind.FORBIDDEN


class NotFoundError(StructuredError):
    default_kind = ErrorKind.NOT_FOUND


class NotAcceptableError(StructuredError):
    default_kind = ErrorKind.NOT_ACCEPTABLE


class RequestTimeoutError(StructuredError):
    default_kind = ErrorKind.REQUEST_TIMEOUT


class InternalServerError(StructuredError):
    default_kind = ErrorKind.INTERNAL_SERVER_ERROR

    def __init__(self, message: str | None = None, **kwargs: Any) -> None:
        super().__init__(message or GENERIC_ERROR_MESSAGE, **kwargs)


_ERROR_BY_STATUS: dict[int, type[StructuredError]] = {
    400: BadRequestError,
    401: UnauthorizedError,
    403: ForbiddenError,
    404: NotFoundError,
    406: NotAcceptableError,
    408: RequestTimeoutError,
    500: InternalServerError,
}


def error_for_status(status_code: int, message: str | None = None) -> StructuredError:
    """Build the error class registered for ``status_code``."""
    cls = _ERROR_BY_STATUS.get(status_code)
    if cls is None:
        return StructuredError(message, kind=f"Http{status_code}", status_code=status_code)
    return cls(message)


def status_for_kind(kind: str) -> int | None:
    return _STATUS_BY_KIND.get(kind)


class MiddlewareError(RuntimeError):
    """Fatal failure inside a middleware stage.

    Middleware runs before any route concern exists, so these errors bypass
    the exception boundary and are raised to the transport.
    """

    def __init__(self, stage: str, message: str, *, cause: BaseException | None = None) -> None:
        self.stage = stage
        super().__init__(f"middleware {stage}: {message}")
        if cause is not None:
            self.__cause__ = cause


class ResponseAlreadySentError(RuntimeError):
    """A second write was attempted on a response that is already sent."""
