"""Typed core primitives: errors, request models, context and registration."""

from routekit.core.context import ExecutionContext, Metadata
from routekit.core.errors import (
    BadRequestError,
    ErrorKind,
    ForbiddenError,
    InternalServerError,
    MiddlewareError,
    NotAcceptableError,
    NotFoundError,
    RequestTimeoutError,
    ResponseAlreadySentError,
    StructuredError,
    UnauthorizedError,
)
from routekit.core.models import ArgumentMetadata, HttpRequest, ParamSpec, PipelineResult, Principal
from routekit.core.registry import ControllerDefinition, RouteBinding, RouteDefinition, RouteRegistry
from routekit.core.response import RecordingWriter, ResponseHandle

__all__ = [
    "ArgumentMetadata",
    "BadRequestError",
    "ControllerDefinition",
    "ErrorKind",
    "ExecutionContext",
    "ForbiddenError",
    "HttpRequest",
    "InternalServerError",
    "Metadata",
    "MiddlewareError",
    "NotAcceptableError",
    "NotFoundError",
    "ParamSpec",
    "PipelineResult",
    "Principal",
    "RecordingWriter",
    "RequestTimeoutError",
    "ResponseAlreadySentError",
    "ResponseHandle",
    "RouteBinding",
    "RouteDefinition",
    "RouteRegistry",
    "StructuredError",
    "UnauthorizedError",
]
